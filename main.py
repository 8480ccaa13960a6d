#!/usr/bin/env python3
"""
Shoom - debate show backend entry point
Socket.IO rooms + show clock + LiveKit tokens
"""
import logging
import time
from collections import defaultdict
from typing import Optional

import socketio
from aiohttp import web

from shoom import config
from shoom.api import api_rooms, api_token, health, index, serve_config
from shoom.config import OriginPolicy
from shoom.gateway import BroadcastGateway
from shoom.sockets import ConnectionHandler
from shoom.state import RoomRegistry
from shoom.ticker import Ticker

logger = logging.getLogger("shoom")

# Rate limiting storage
rate_limit_store = defaultdict(list)
RATE_LIMIT_WINDOW = 60


def prune_rate_limit_store(now: float) -> None:
    """Forget IPs with no requests inside the window"""
    stale = [
        ip for ip, hits in rate_limit_store.items()
        if not hits or now - hits[-1] >= RATE_LIMIT_WINDOW
    ]
    for ip in stale:
        del rate_limit_store[ip]


@web.middleware
async def rate_limit_middleware(request, handler):
    """Simple rate limiting: 100 requests per minute per IP"""
    ip = request.remote
    now = time.time()
    path = request.path

    # Socket.IO polling traffic is not an API call
    if path.startswith('/socket.io'):
        return await handler(request)

    # Clean old entries
    prune_rate_limit_store(now)
    hits = [t for t in rate_limit_store.get(ip, ()) if now - t < RATE_LIMIT_WINDOW]
    rate_limit_store[ip] = hits

    # Check limit
    if len(rate_limit_store[ip]) > 100:
        logger.warning(f"Rate limit exceeded for {ip}")
        return web.json_response(
            {"ok": False, "error": "Rate limit exceeded"},
            status=429
        )

    rate_limit_store[ip].append(now)
    return await handler(request)


def cors_middleware(policy: OriginPolicy):
    @web.middleware
    async def middleware(request, handler):
        if request.path.startswith('/socket.io'):
            return await handler(request)

        origin = request.headers.get("Origin")
        if not policy.is_allowed(origin):
            return web.json_response({"error": "Origin not allowed"}, status=403)

        if request.method == "OPTIONS":
            response = web.Response(status=204)
        else:
            response = await handler(request)

        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST"
            response.headers["Vary"] = "Origin"
        return response
    return middleware


def create_app(registry: Optional[RoomRegistry] = None,
               policy: Optional[OriginPolicy] = None,
               start_ticker: bool = True) -> web.Application:
    """Create and configure the aiohttp application"""
    registry = registry if registry is not None else RoomRegistry()
    policy = policy if policy is not None else OriginPolicy()

    app = web.Application(middlewares=[cors_middleware(policy), rate_limit_middleware])
    app["rooms"] = registry

    sio = socketio.AsyncServer(
        async_mode="aiohttp",
        cors_allowed_origins=policy.socketio_origins(),
    )
    sio.attach(app)
    gateway = BroadcastGateway(sio)
    handler = ConnectionHandler(registry, gateway)
    handler.register(sio)
    app["sio"] = sio
    app["connections"] = handler

    # HTTP routes
    app.router.add_get("/", index)
    app.router.add_get("/health", health)
    app.router.add_get("/config", serve_config)
    app.router.add_get("/api/rooms", api_rooms)
    app.router.add_get("/api/token", api_token)

    ticker = Ticker(
        registry,
        gateway,
        interval=config.TICK_INTERVAL,
        idle_ttl=config.ROOM_IDLE_TTL or None,
    )
    app["ticker"] = ticker
    if start_ticker:
        app.on_startup.append(ticker.start)
        app.on_cleanup.append(ticker.stop)

    logger.info("🎙️ Shoom server ready • Socket.IO enabled")
    return app


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    app = create_app()
    logger.info(f"🚀 Starting server on {config.SERVER_HOST}:{config.PORT}")
    web.run_app(app, host=config.SERVER_HOST, port=config.PORT)


if __name__ == "__main__":
    main()
