"""Periodic removal of stale temp chunks."""

import asyncio
import time
from typing import Callable, List, Optional

from .._utils import logger
from .stores import TempStore


class RetentionSweeper:
    """Delete temp store entries that have not been modified for ``max_age`` seconds.

    The sweeper is an explicitly owned task: ``start()`` schedules it on the
    running event loop and ``stop()`` cancels it. The clock is injectable so
    sweeps can be tested without waiting.
    """

    def __init__(
        self,
        temp_store: TempStore,
        interval: float = 3600.0,
        max_age: float = 3600.0,
        clock: Callable[[], float] = time.time
    ):
        self.temp_store = temp_store
        self.interval = interval
        self.max_age = max_age
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> List[str]:
        """Run one sweep.

        A failed delete is logged and the sweep moves on to the next entry.

        Returns:
            Ids of removed entries
        """
        now = self.clock()
        removed = []

        for chunk_id, mtime in await self.temp_store.list_all():
            if now - mtime <= self.max_age:
                continue
            try:
                await self.temp_store.delete(chunk_id)
            except Exception as e:
                logger.error(f"Failed to remove stale temp file {chunk_id}: {e}")
                continue
            removed.append(chunk_id)

        if removed:
            logger.info(f"Removed {len(removed)} stale temp files")
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.sweep_once()
            except Exception as e:
                logger.error(f"Error cleaning up temp files: {e}")

    def start(self) -> None:
        """Schedule the sweep loop. Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Retention sweeper started (interval={self.interval}s, max_age={self.max_age}s)")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Retention sweeper stopped")
