"""Queued write-through to the history store.

The router hands each message to ``HistoryWriter.submit`` and moves on
to delivery. A single consumer task applies appends in submission
order, so per-pair history order matches send order and delivery never
waits on storage.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from moodchat.errors import ErrorCode
from moodchat.persistence.adapter import PersistenceAdapter
from moodchat.persistence.models import ChatMessage, PairKey

logger = logging.getLogger(__name__)


@dataclass
class WriterStats:
    """Counters for the write-through queue."""

    submitted: int = 0
    appended: int = 0
    failed: int = 0
    dropped: int = 0


class HistoryWriter:
    """Single-consumer append queue in front of a PersistenceAdapter."""

    def __init__(self, store: PersistenceAdapter, max_queue_size: int = 10000):
        self.store = store
        self.stats = WriterStats()
        self._queue: asyncio.Queue[Tuple[PairKey, ChatMessage]] = asyncio.Queue(maxsize=max_queue_size)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, message: ChatMessage, keys: Iterable[PairKey]) -> None:
        """Queue *message* for every history in *keys*. Never blocks."""
        for key in keys:
            try:
                self._queue.put_nowait((key, message))
            except asyncio.QueueFull:
                self.stats.dropped += 1
                logger.error(
                    "[%s] History queue full, dropped append to %s",
                    ErrorCode.PERSISTENCE_FAILURE.value,
                    key,
                )
                continue
            self.stats.submitted += 1

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="history-writer")
        logger.info("History writer started")

    async def flush(self) -> None:
        """Wait until every queued append has been attempted."""
        await self._queue.join()

    async def stop(self, timeout: float = 5.0) -> None:
        """Drain what is queued (bounded by *timeout*) and stop the consumer."""
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self.flush(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("History writer stopped with %d appends pending", self.pending)
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("History writer stopped")

    async def _run(self) -> None:
        while True:
            key, message = await self._queue.get()
            try:
                await self._append(key, message)
            finally:
                self._queue.task_done()

    async def _append(self, key: PairKey, message: ChatMessage) -> None:
        try:
            stored = await self.store.append(key, message)
        except asyncio.CancelledError:
            raise
        except Exception:
            self.stats.failed += 1
            logger.exception("[%s] Append to %s raised", ErrorCode.PERSISTENCE_FAILURE.value, key)
            return

        if stored:
            self.stats.appended += 1
        else:
            self.stats.failed += 1
            logger.error("[%s] Append to %s failed", ErrorCode.PERSISTENCE_FAILURE.value, key)
