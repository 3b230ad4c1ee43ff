"""
Interval-based implementation of the WorkScheduler interface.

This module provides a scheduler that submits every configured target to the
worker pool immediately at startup and then once per interval, until stopped.
Rounds are fire-and-forget: a round never waits for the outcomes of the
previous one, so rounds may overlap when probes are slower than the interval.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional, Sequence, Set, Tuple

from uptime_monitor.contracts import WorkScheduler
from uptime_monitor.domain import TargetSpec
from uptime_monitor.worker_pool import WorkerPool

# Module logger
logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class RoundScheduler(WorkScheduler):
    """
    Triggers periodic probe rounds on a worker pool.

    State machine: IDLE -> RUNNING -> STOPPED. Each round runs in its own task
    so that backpressure from the pool never delays the timer.
    """

    def __init__(
        self,
        pool: WorkerPool,
        targets: Sequence[TargetSpec],
        interval: float,
    ) -> None:
        """
        Initializes a new RoundScheduler instance.

        Args:
            pool: The worker pool receiving the submissions.
            targets: The targets submitted on every round.
            interval: Seconds between two rounds.

        Raises:
            ValueError: If any of the parameters have invalid values.
        """
        if interval <= 0:
            raise ValueError("interval must be positive.")

        self._pool: WorkerPool = pool
        self._targets: Tuple[TargetSpec, ...] = tuple(targets)
        self._interval: float = interval
        self._state: SchedulerState = SchedulerState.IDLE
        self._stop_event: asyncio.Event = asyncio.Event()
        self._loop_task: Optional[asyncio.Task] = None
        self._round_tasks: Set[asyncio.Task] = set()
        self._rounds_started: int = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def targets(self) -> Tuple[TargetSpec, ...]:
        return self._targets

    @property
    def rounds_started(self) -> int:
        return self._rounds_started

    def update_targets(self, targets: Sequence[TargetSpec]) -> None:
        """
        Replaces the target list. Rounds already in progress keep their snapshot.
        """
        self._targets = tuple(targets)
        logger.info(f"Target list updated: {len(self._targets)} targets from the next round.")

    async def run_round(self) -> int:
        """
        Submits every configured target once.

        Returns:
            int: The number of submissions accepted by the pool.
        """
        targets = self._targets
        self._rounds_started += 1
        logger.info(f"Starting probe round {self._rounds_started} for {len(targets)} targets.")

        accepted = 0
        for target in targets:
            if await self._pool.submit(target):
                accepted += 1

        if accepted < len(targets):
            logger.info(f"Pool dropped {len(targets) - accepted} submissions of this round.")
        return accepted

    async def start(self) -> None:
        """
        Performs an immediate round and arms the periodic timer.

        Raises:
            RuntimeError: If the scheduler is not idle.
        """
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"Cannot start a scheduler in state {self._state.value}.")

        logger.info(f"Starting scheduler (interval: {self._interval}s)...")
        self._state = SchedulerState.RUNNING
        self._spawn_round()
        self._loop_task = asyncio.create_task(self._tick_loop())

    async def stop(self) -> None:
        """
        Disarms the timer and waits for the periodic loop to exit.

        Round tasks still blocked on submission are cancelled; jobs already
        handed to the pool are left alone. Safe to call before start() or twice.
        """
        self._stop_event.set()
        if self._state is not SchedulerState.RUNNING:
            return

        logger.info("Stopping scheduler...")
        self._state = SchedulerState.STOPPED

        if self._loop_task is not None:
            await self._loop_task

        pending = list(self._round_tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.info("Scheduler stopped.")

    def _spawn_round(self) -> None:
        task = asyncio.create_task(self.run_round())
        self._round_tasks.add(task)
        task.add_done_callback(self._on_round_done)

    def _on_round_done(self, task: asyncio.Task) -> None:
        self._round_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Probe round failed: {task.exception()!r}")

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_fire_at = loop.time() + self._interval

        while True:
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=max(0.0, next_fire_at - loop.time())
                )
                return
            except asyncio.TimeoutError:
                pass

            self._spawn_round()
            next_fire_at += self._interval
            # Skip missed ticks instead of firing a burst of rounds
            if next_fire_at < loop.time():
                next_fire_at = loop.time() + self._interval
