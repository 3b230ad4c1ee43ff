"""
Periodic maintenance jobs: retention purge and summary reports.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable, List, Optional

from uptime_monitor.contracts import ResultSink
from uptime_monitor.notifier.dispatcher import NotificationDispatcher

# Module logger
logger = logging.getLogger(__name__)


class Housekeeper:
    """
    Runs the purge of old outcomes and the summary report on their own timers.

    A job whose interval is zero is disabled.
    """

    def __init__(
        self,
        sink: ResultSink,
        dispatcher: NotificationDispatcher,
        retention_days: int,
        purge_interval: float,
        summary_interval: float,
        summary_window: Optional[timedelta] = None,
    ) -> None:
        """
        Args:
            sink: The store holding the probe outcomes.
            dispatcher: Delivers the summary reports.
            retention_days: Outcomes older than this are purged.
            purge_interval: Seconds between two purges, 0 to disable.
            summary_interval: Seconds between two summaries, 0 to disable.
            summary_window: Period covered by a summary, defaults to summary_interval.
        """
        self._sink = sink
        self._dispatcher = dispatcher
        self._retention_days = retention_days
        self._purge_interval = purge_interval
        self._summary_interval = summary_interval
        self._summary_window = summary_window or timedelta(seconds=summary_interval)
        self._stop_event = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

    async def purge(self) -> int:
        removed = await self._sink.purge(self._retention_days)
        logger.debug(f"Purge job done, retention {self._retention_days} days")
        return removed

    async def send_summary(self) -> int:
        stats = await self._sink.query_all_stats(self._summary_window)
        if not stats:
            logger.info("No outcomes in the summary window, skipping summary report")
            return 0
        return await self._dispatcher.send_summary(stats)

    async def start(self) -> None:
        if self._purge_interval > 0:
            self._tasks.append(asyncio.create_task(self._every(self._purge_interval, self.purge)))
        if self._summary_interval > 0:
            self._tasks.append(
                asyncio.create_task(self._every(self._summary_interval, self.send_summary))
            )
        logger.info(f"Housekeeping started with {len(self._tasks)} periodic jobs")

    async def stop(self) -> None:
        self._stop_event.set()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def _every(self, interval: float, job: Callable[[], Awaitable[int]]) -> None:
        while True:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                return
            except asyncio.TimeoutError:
                pass

            try:
                await job()
            except Exception as e:
                logger.exception(f"Housekeeping job {job.__name__} failed: {e}")
