"""
Core engine of the uptime monitoring system.

This module provides the MonitoringEngine class, which wires the scheduler, the
worker pool and the outcome fan-out together and owns their start and shutdown
order. The scheduler produces probe jobs, the pool executes them and the fan-out
hands every outcome to the registered processors.
"""

import logging
from typing import List, Optional, Sequence

from .contracts import ResultProcessor, TargetProber
from .domain import TargetSpec
from .processor.fan_out import OutcomeFanOut
from .scheduler.round_scheduler import RoundScheduler
from .worker_pool import WorkerPool


class MonitoringEngine:
    """
    Coordinates the monitoring workflow.

    Outcomes flow: RoundScheduler -> WorkerPool -> OutcomeStream -> OutcomeFanOut
    -> processors. The engine starts the consumers before the producers and stops
    them in the reverse order, so that no outcome is produced without a reader.
    """

    def __init__(
        self,
        worker_id: str,
        targets: Sequence[TargetSpec],
        prober: TargetProber,
        processors: List[ResultProcessor],
        num_workers: int,
        interval: float,
        default_timeout: float,
        queue_size: Optional[int] = None,
        drain_timeout: float = 0.0,
    ) -> None:
        """
        Initializes a new MonitoringEngine instance.

        Args:
            worker_id: A unique identifier for this monitor instance.
            targets: The targets probed on every round.
            prober: Component that performs the check of a single target.
            processors: Components receiving every probe outcome.
            num_workers: Number of concurrent probes.
            interval: Seconds between two probe rounds.
            default_timeout: Probe deadline for targets without their own.
            queue_size: Capacity of the job queue, defaults to 2 x num_workers.
            drain_timeout: Seconds pending probes may keep running during stop().
        """
        self._worker_id: str = worker_id
        self._logger: logging.Logger = logging.getLogger(__name__)
        self._drain_timeout: float = drain_timeout
        self._pool: WorkerPool = WorkerPool(
            prober=prober,
            num_workers=num_workers,
            default_timeout=default_timeout,
            queue_size=queue_size,
        )
        self._scheduler: RoundScheduler = RoundScheduler(
            pool=self._pool, targets=targets, interval=interval
        )
        self._fan_out: OutcomeFanOut = OutcomeFanOut(self._pool.results, processors)
        self._started: bool = False
        self._stopped: bool = False

    @property
    def pool(self) -> WorkerPool:
        return self._pool

    @property
    def scheduler(self) -> RoundScheduler:
        return self._scheduler

    def update_targets(self, targets: Sequence[TargetSpec]) -> None:
        self._scheduler.update_targets(targets)

    async def start(self) -> None:
        """
        Starts the pool, the fan-out and finally the scheduler.

        The first probe round is submitted immediately.
        """
        if self._started:
            raise RuntimeError("The engine has already been started.")
        self._started = True

        self._logger.info(f"Starting monitoring engine {self._worker_id}...")
        await self._pool.start()
        await self._fan_out.start()
        await self._scheduler.start()
        self._logger.info("Monitoring engine started.")

    async def stop(self) -> None:
        """
        Gracefully stops the engine.

        The shutdown sequence is:
        1. Stop the scheduler so that no new rounds are triggered
        2. Close the pool, aborting in-flight probes after the drain timeout
        3. Wait for every processor to consume the remaining outcomes and flush

        Returns:
            None
        """
        if self._stopped:
            return
        self._stopped = True

        self._logger.info("Initiating graceful shutdown...")
        await self._scheduler.stop()
        await self._pool.close(drain_timeout=self._drain_timeout)
        if self._started:
            await self._fan_out.wait_closed()
        self._logger.info("Monitoring engine shutdown complete.")
