"""
Outbound fan-out to room subscribers over Socket.IO
"""
import logging

import socketio

from .models import ChatMessage, RoomState

logger = logging.getLogger("shoom")

STATE_UPDATE = "state_update"
CHAT_UPDATE = "chat_update"
REACTION_RECEIVED = "reaction_received"


class BroadcastGateway:
    """Sends snapshots and events to a room's subscriber group"""

    def __init__(self, sio: socketio.AsyncServer):
        self.sio = sio

    async def send_state(self, sid: str, room: RoomState) -> None:
        """Snapshot to a single connection"""
        await self.sio.emit(STATE_UPDATE, room.to_snapshot(), to=sid)

    async def broadcast_state(self, room_id: str, room: RoomState) -> None:
        await self.sio.emit(STATE_UPDATE, room.to_snapshot(), room=room_id)

    async def broadcast_chat(self, room_id: str, message: ChatMessage) -> None:
        await self.sio.emit(CHAT_UPDATE, message.to_dict(), room=room_id)

    async def broadcast_reaction(self, room_id: str, reaction_type) -> None:
        await self.sio.emit(REACTION_RECEIVED, {"type": reaction_type}, room=room_id)

    async def enter_room(self, sid: str, room_id: str) -> None:
        await self.sio.enter_room(sid, room_id)
