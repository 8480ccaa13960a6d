"""
In-memory room registry
One RoomState per room id, created on first reference
"""
import logging
import time
from typing import Dict, List, Optional, Tuple

from .models import RoomState

logger = logging.getLogger("shoom")


class RoomRegistry:
    """
    Process-wide mapping of room id -> RoomState.

    All methods are synchronous. Under the single asyncio loop that makes
    each lookup-and-insert indivisible, so two first references to the same
    unseen id always end up with the same instance.
    """

    def __init__(self):
        self._rooms: Dict[str, RoomState] = {}

    def get_or_create(self, room_id: str) -> RoomState:
        room = self._rooms.get(room_id)
        if room is None:
            room = RoomState()
            self._rooms[room_id] = room
            logger.info(f"🏠 Created new room: {room_id}")
        return room

    def get(self, room_id: str) -> Optional[RoomState]:
        return self._rooms.get(room_id)

    def replace(self, room_id: str, room: RoomState) -> RoomState:
        self._rooms[room_id] = room
        return room

    def room_ids(self) -> List[str]:
        """Ids known right now; rooms added later are not included"""
        return list(self._rooms.keys())

    def items(self) -> List[Tuple[str, RoomState]]:
        return list(self._rooms.items())

    def expire_idle(self, max_idle: float, now: Optional[float] = None) -> List[str]:
        """Drop rooms nobody watches that have not changed for ``max_idle`` seconds"""
        if now is None:
            now = time.monotonic()
        stale = [
            rid for rid, room in self._rooms.items()
            if room.viewers_count == 0 and now - room.last_activity > max_idle
        ]
        for rid in stale:
            logger.info(f"🧹 Removing idle room: {rid}")
            del self._rooms[rid]
        return stale

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
