"""
In-process implementation of the ResultSink interface.

Keeps outcomes in memory for the lifetime of the process. Used when the
monitor runs without a database and when embedding the engine.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from uptime_monitor.contracts import ResultSink
from uptime_monitor.domain import ProbeOutcome, TargetStats
from uptime_monitor.sink.stats import build_stats

# Module logger
logger = logging.getLogger(__name__)


class InMemoryResultSink(ResultSink):
    """A ResultSink backed by a list, guarded by an asyncio lock."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._outcomes: List[ProbeOutcome] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._outcomes)

    async def save(self, outcome: ProbeOutcome) -> None:
        async with self._lock:
            self._outcomes.append(outcome)

    async def flush(self) -> None:
        pass

    async def _window(self, window: timedelta) -> List[ProbeOutcome]:
        since = self._clock() - window
        async with self._lock:
            return [outcome for outcome in self._outcomes if outcome.checked_at >= since]

    async def query_stats(self, target_name: str, window: timedelta) -> TargetStats:
        outcomes = await self._window(window)
        return build_stats(
            target_name, [outcome for outcome in outcomes if outcome.target_name == target_name]
        )

    async def query_all_stats(self, window: timedelta) -> List[TargetStats]:
        outcomes = await self._window(window)
        names = sorted({outcome.target_name for outcome in outcomes})
        return [
            build_stats(name, [outcome for outcome in outcomes if outcome.target_name == name])
            for name in names
        ]

    async def purge(self, older_than_days: int) -> int:
        cutoff = self._clock() - timedelta(days=older_than_days)
        async with self._lock:
            kept = [outcome for outcome in self._outcomes if outcome.checked_at >= cutoff]
            removed = len(self._outcomes) - len(kept)
            self._outcomes = kept
        logger.info(f"Purged {removed} outcomes older than {older_than_days} days.")
        return removed

    async def close(self) -> None:
        pass
