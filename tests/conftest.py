from __future__ import annotations

import pytest

from shoom import livekit_auth
from shoom.gateway import BroadcastGateway
from shoom.sockets import ConnectionHandler
from shoom.state import RoomRegistry


class FakeSio:
    """Records what would have gone out over Socket.IO."""

    def __init__(self):
        self.emitted: list[dict] = []
        self.rooms: dict[str, set] = {}
        self.handlers: dict = {}

    def on(self, event, handler=None):
        self.handlers[event] = handler

    async def emit(self, event, data=None, to=None, room=None, **kwargs):
        self.emitted.append({"event": event, "data": data, "to": to, "room": room})

    async def enter_room(self, sid, room, namespace=None):
        self.rooms.setdefault(room, set()).add(sid)

    def sent(self, event: str, room: str | None = None, to: str | None = None) -> list:
        return [
            e["data"] for e in self.emitted
            if e["event"] == event
            and (room is None or e["room"] == room)
            and (to is None or e["to"] == to)
        ]


def environ_for(room_id: str | None) -> dict:
    if room_id is None:
        return {"QUERY_STRING": "EIO=4&transport=websocket"}
    return {"QUERY_STRING": f"EIO=4&transport=websocket&roomId={room_id}"}


@pytest.fixture
def registry() -> RoomRegistry:
    return RoomRegistry()


@pytest.fixture
def sio() -> FakeSio:
    return FakeSio()


@pytest.fixture
def gateway(sio) -> BroadcastGateway:
    return BroadcastGateway(sio)


@pytest.fixture
def handler(registry, gateway) -> ConnectionHandler:
    return ConnectionHandler(registry, gateway)


@pytest.fixture
def livekit_keys(monkeypatch):
    monkeypatch.setattr(livekit_auth, "LIVEKIT_API_KEY", "devkey")
    monkeypatch.setattr(livekit_auth, "LIVEKIT_API_SECRET", "secret-for-tests-0123456789abcdef")
    return "devkey", "secret-for-tests-0123456789abcdef"


@pytest.fixture
def no_livekit_keys(monkeypatch):
    monkeypatch.setattr(livekit_auth, "LIVEKIT_API_KEY", "")
    monkeypatch.setattr(livekit_auth, "LIVEKIT_API_SECRET", "")
