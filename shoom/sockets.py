"""
Socket.IO event handlers - one connection is bound to exactly one room
"""
import logging
from typing import Dict, Optional
from urllib.parse import parse_qs

import socketio

from . import ledger, phases
from .gateway import BroadcastGateway
from .state import RoomRegistry

logger = logging.getLogger("shoom")


def room_id_from_environ(environ: dict) -> Optional[str]:
    """Read ``roomId`` from the handshake query string"""
    query = parse_qs(environ.get("QUERY_STRING", ""))
    values = query.get("roomId")
    if not values or not values[0]:
        return None
    return values[0]


class ConnectionHandler:
    """Translates inbound socket events into room mutations and broadcasts"""

    def __init__(self, registry: RoomRegistry, gateway: BroadcastGateway):
        self.registry = registry
        self.gateway = gateway
        # sid -> room id
        self.connections: Dict[str, str] = {}

    def register(self, sio: socketio.AsyncServer) -> None:
        sio.on("connect", self.connect)
        sio.on("disconnect", self.disconnect)
        sio.on("admin_action", self.admin_action)
        sio.on("send_message", self.send_message)
        sio.on("send_reaction", self.send_reaction)

    # ============================================================
    # CONNECTION LIFECYCLE
    # ============================================================

    async def connect(self, sid, environ, auth=None):
        room_id = room_id_from_environ(environ)
        if room_id is None:
            logger.warning(f"❌ Client {sid} connected without roomId")
            return False

        logger.info(f"🔌 Client {sid} joined room: {room_id}")
        self.connections[sid] = room_id
        await self.gateway.enter_room(sid, room_id)

        room = self.registry.get_or_create(room_id)
        room.add_viewer()

        await self.gateway.send_state(sid, room)
        await self.gateway.broadcast_state(room_id, room)
        return True

    async def disconnect(self, sid, reason=None):
        room_id = self.connections.pop(sid, None)
        if room_id is None:
            return
        logger.info(f"👋 Client {sid} left room: {room_id}")

        room = self.registry.get(room_id)
        if room is None or room.viewers_count == 0:
            return
        room.remove_viewer()
        await self.gateway.broadcast_state(room_id, room)

    # ============================================================
    # ROOM EVENTS
    # ============================================================

    def _room_for(self, sid: str):
        room_id = self.connections.get(sid)
        if room_id is None:
            return None, None
        room = self.registry.get(room_id)
        if room is None:
            logger.debug(f"Event for unknown room {room_id} from {sid}, ignoring")
        return room_id, room

    async def admin_action(self, sid, payload):
        room_id, room = self._room_for(sid)
        if room is None:
            return
        if not isinstance(payload, dict):
            logger.warning(f"Malformed admin_action from {sid}: {payload!r}")
            return

        action = payload.get("action")
        room = self.registry.replace(room_id, phases.apply_admin_action(room, action))
        logger.info(f"🎬 {room_id}: {action} -> {room.phase.value}")
        await self.gateway.broadcast_state(room_id, room)

    async def send_message(self, sid, payload):
        room_id, room = self._room_for(sid)
        if room is None:
            return
        if not isinstance(payload, dict):
            logger.warning(f"Malformed send_message from {sid}: {payload!r}")
            return

        user = payload.get("user")
        text = payload.get("text")
        if not user or text is None:
            logger.warning(f"send_message from {sid} missing user or text")
            return

        message = ledger.build_message(
            user=user,
            text=text,
            is_donation=payload.get("isDonation", False),
            amount=payload.get("amount"),
        )
        ledger.append(room, message)
        await self.gateway.broadcast_chat(room_id, message)

    async def send_reaction(self, sid, payload):
        room_id = self.connections.get(sid)
        if room_id is None:
            return
        if not isinstance(payload, dict):
            logger.warning(f"Malformed send_reaction from {sid}: {payload!r}")
            return
        await self.gateway.broadcast_reaction(room_id, payload.get("type"))
