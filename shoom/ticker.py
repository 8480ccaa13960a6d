"""
Global show clock - advances every room once per tick
"""
import asyncio
import logging
from typing import List, Optional, Set

from aiohttp import web

from . import phases
from .gateway import BroadcastGateway
from .state import RoomRegistry

logger = logging.getLogger("shoom")


class Ticker:
    """
    Background task that ticks every room each ``interval`` seconds.

    Room updates are applied first, broadcasts are then fired off as
    separate tasks so a slow subscriber never holds up the clock.
    """

    def __init__(self, registry: RoomRegistry, gateway: BroadcastGateway,
                 interval: float = 1.0, idle_ttl: Optional[float] = None,
                 sweep_every: int = 60):
        self.registry = registry
        self.gateway = gateway
        self.interval = interval
        self.idle_ttl = idle_ttl
        self.sweep_every = max(1, sweep_every)
        self.ticks = 0
        self._pending: Set[asyncio.Task] = set()

    def advance_rooms(self) -> List[str]:
        """Tick every room known at call time, return ids that changed"""
        changed = []
        for room_id in self.registry.room_ids():
            room = self.registry.get(room_id)
            if room is None:
                continue
            try:
                if phases.tick(room):
                    changed.append(room_id)
            except Exception:
                logger.exception(f"Tick failed for room {room_id}")
        return changed

    async def tick_once(self) -> List[str]:
        changed = self.advance_rooms()
        for room_id in changed:
            room = self.registry.get(room_id)
            if room is not None:
                self._fire(self.gateway.broadcast_state(room_id, room), room_id)

        self.ticks += 1
        if self.idle_ttl and self.ticks % self.sweep_every == 0:
            self.registry.expire_idle(self.idle_ttl)
        return changed

    def _fire(self, coro, room_id: str) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(lambda t: self._broadcast_done(t, room_id))

    def _broadcast_done(self, task: asyncio.Task, room_id: str) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Broadcast to room {room_id} failed: {exc}")

    async def drain(self) -> None:
        """Wait for in-flight broadcasts"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def run(self) -> None:
        logger.info(f"⏱️ Ticker started ({self.interval}s interval)")
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick_once()
            except Exception:
                logger.exception("Ticker step failed")

    # ============================================================
    # AIOHTTP LIFECYCLE HOOKS
    # ============================================================

    async def start(self, app: web.Application) -> None:
        app["ticker_task"] = asyncio.create_task(self.run())

    async def stop(self, app: web.Application) -> None:
        task = app.get("ticker_task")
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        await self.drain()
        logger.info("⏱️ Ticker stopped")
