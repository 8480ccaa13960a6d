"""
HTTP API handlers for Shoom
Health, client config, room listing and LiveKit tokens
"""
import hashlib
import json
import logging

from aiohttp import web

from .livekit_auth import (
    LiveKitNotConfigured, TokenMintError, livekit_ws_url, mint_livekit_token,
)
from .models import Phase
from .state import RoomRegistry
from .utils import room_title

logger = logging.getLogger("shoom")


def get_registry(request: web.Request) -> RoomRegistry:
    return request.app["rooms"]

# ============================================================
# HEALTH & CONFIGURATION
# ============================================================

async def index(request):
    return web.Response(text="Shoom Backend is running 🚀")


async def health(request: web.Request) -> web.Response:
    return web.json_response({"ok": True, "rooms": len(get_registry(request))})


async def serve_config(request):
    """Return client configuration with correct LiveKit URL"""
    host = request.host.split(':')[0]
    return web.json_response({"livekit_ws_url": livekit_ws_url(host)})

# ============================================================
# ROOM LISTING
# ============================================================

def get_rooms_data(registry: RoomRegistry) -> list:
    """Rooms that have an audience or have not finished"""
    items = []
    for room_id, room in registry.items():
        if room.viewers_count > 0 or room.phase != Phase.FINISHED:
            items.append({
                "id": room_id,
                "phase": room.phase.value,
                "viewers": room.viewers_count,
                "title": room_title(room_id),
            })
    return items


async def api_rooms(request: web.Request) -> web.Response:
    """List active rooms with ETag caching"""
    items = get_rooms_data(get_registry(request))

    content = json.dumps(items, sort_keys=True)
    etag = hashlib.md5(content.encode()).hexdigest()

    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    response = web.json_response(items)
    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "max-age=5"
    return response

# ============================================================
# LIVEKIT TOKEN GENERATION
# ============================================================

async def api_token(request: web.Request) -> web.Response:
    """Generate a LiveKit access token for a participant"""
    room_name = request.query.get("roomName")
    participant_name = request.query.get("participantName")
    role = request.query.get("role")

    if not room_name or not participant_name:
        return web.json_response({"error": "roomName required"}, status=400)

    # Make sure the show exists before anyone joins the media room
    get_registry(request).get_or_create(room_name)

    try:
        token = mint_livekit_token(identity=participant_name, room=room_name, role=role)
    except LiveKitNotConfigured:
        logger.error("❌ LIVEKIT KEYS MISSING IN ENVIRONMENT")
        return web.json_response({"error": "Server misconfigured"}, status=500)
    except TokenMintError:
        logger.exception("Token generation error")
        return web.json_response({"error": "Failed to generate token"}, status=500)

    logger.info("🎟️ Token issued: %s (%s) in %s", participant_name, role, room_name)
    return web.json_response({"token": token})
