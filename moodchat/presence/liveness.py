"""Liveness monitor.

Every cycle, sessions that did not acknowledge the previous probe are
evicted; every other session has its liveness flag cleared and gets a
new ``ping``. A ``pong`` sets the flag again.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from moodchat.presence.connection import deliver
from moodchat.presence.protocol import PingFrame
from moodchat.presence.registry import ConnectionRegistry, Session

logger = logging.getLogger(__name__)


class LivenessMonitor:
    """Periodic task that reclaims half-open connections."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        evict: Callable[[Session], Awaitable[bool]],
        interval_seconds: float = 30.0,
    ):
        self._registry = registry
        self._evict = evict
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep(self) -> List[Session]:
        """Run one probe cycle. Returns the sessions evicted."""
        evicted: List[Session] = []
        for session in self._registry.sessions():
            if not session.alive:
                logger.info("%s missed liveness probe; terminating", session.username)
                if await self._evict(session):
                    evicted.append(session)
                continue
            session.alive = False
            await deliver(session.connection, PingFrame().to_wire())

        self.cycles += 1
        logger.debug("Liveness cycle %d: %s, evicted=%d", self.cycles, self._registry.get_stats(), len(evicted))
        return evicted

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="liveness-monitor")
        logger.info("Liveness monitor started (interval=%ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Liveness monitor stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep()
            except Exception:
                logger.exception("Liveness sweep failed")
