"""
Bounded worker pool for the uptime monitoring system.

This module provides the WorkerPool class, which owns a bounded job queue and a
fixed number of executor tasks. Each executor pulls a target, probes it under a
deadline and pushes the outcome onto a bounded OutcomeStream. The bounded queues
provide backpressure in both directions.
"""

import asyncio
import logging
from asyncio import Queue, Task
from collections import deque
from typing import Deque, List, Optional

from .contracts import TargetProber
from .domain import ProbeOutcome, TargetSpec

# Module logger
logger = logging.getLogger(__name__)


class OutcomeStream:
    """
    A bounded, closable asynchronous stream of probe outcomes.

    Producers block in put() while the stream is full. Once closed, readers
    receive the remaining buffered outcomes and then stop iterating. Putting
    into a closed stream is a programming error and raises RuntimeError.
    """

    def __init__(self, maxsize: int) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be a positive integer.")
        self._maxsize: int = maxsize
        self._items: Deque[ProbeOutcome] = deque()
        self._closed: bool = False
        self._condition = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return len(self._items)

    async def put(self, outcome: ProbeOutcome) -> None:
        """
        Appends an outcome, waiting while the stream is full.

        Raises:
            RuntimeError: If the stream is (or becomes) closed.
        """
        async with self._condition:
            await self._condition.wait_for(
                lambda: self._closed or len(self._items) < self._maxsize
            )
            if self._closed:
                raise RuntimeError("Cannot put an outcome into a closed stream.")
            self._items.append(outcome)
            self._condition.notify_all()

    async def get(self) -> ProbeOutcome:
        """
        Removes and returns the next outcome.

        Raises:
            StopAsyncIteration: When the stream is closed and fully drained.
        """
        async with self._condition:
            await self._condition.wait_for(lambda: self._closed or bool(self._items))
            if not self._items:
                raise StopAsyncIteration
            outcome = self._items.popleft()
            self._condition.notify_all()
            return outcome

    async def close(self) -> None:
        """Closes the stream. Buffered outcomes remain readable."""
        async with self._condition:
            self._closed = True
            self._condition.notify_all()

    def __aiter__(self) -> "OutcomeStream":
        return self

    async def __anext__(self) -> ProbeOutcome:
        return await self.get()


class WorkerPool:
    """
    Bounded concurrency executor over TargetSpec jobs.

    The pool launches a fixed number of executor tasks that consume targets
    from a bounded job queue. Submitters block while the queue is full, unless
    the pool is shutting down, in which case the submission is dropped.
    """

    def __init__(
        self,
        prober: TargetProber,
        num_workers: int,
        default_timeout: float,
        queue_size: Optional[int] = None,
        results_size: Optional[int] = None,
        queue_size_monitoring_interval: float = 20,
    ) -> None:
        """
        Initializes a new WorkerPool instance.

        Args:
            prober: Component that performs the check of a single target.
            num_workers: Number of concurrent executor tasks to create.
            default_timeout: Probe deadline in seconds for targets without their own.
            queue_size: Capacity of the job queue, defaults to 2 x num_workers.
            results_size: Capacity of the results stream, defaults to 2 x num_workers.
            queue_size_monitoring_interval: Seconds between two queue size log lines.

        Raises:
            ValueError: If any of the parameters have invalid values.
        """
        if not isinstance(num_workers, int) or num_workers < 1:
            raise ValueError("num_workers must be a positive integer.")

        if default_timeout <= 0:
            raise ValueError("default_timeout must be positive.")

        self._prober: TargetProber = prober
        self._num_workers: int = num_workers
        self._default_timeout: float = default_timeout
        # The queue provides backpressure. Submitters pause while it is full.
        self._jobs: Queue[TargetSpec] = Queue(maxsize=queue_size or 2 * num_workers)
        self._results: OutcomeStream = OutcomeStream(results_size or 2 * num_workers)
        self._queue_size_monitoring_interval: float = queue_size_monitoring_interval
        self._shutdown: asyncio.Event = asyncio.Event()
        self._closed_event: asyncio.Event = asyncio.Event()
        self._closing: bool = False
        self._worker_tasks: List[Task] = []
        self._monitor_task: Optional[Task] = None

    @property
    def results(self) -> OutcomeStream:
        """The stream every executor pushes its outcomes onto."""
        return self._results

    @property
    def num_workers(self) -> int:
        return self._num_workers

    @property
    def closed(self) -> bool:
        return self._closed_event.is_set()

    def queue_size(self) -> int:
        return self._jobs.qsize()

    async def start(self) -> None:
        """
        Launches all executor tasks and the queue size monitor.

        Must be called exactly once.

        Returns:
            None
        """
        logger.info(f"Starting worker pool with {self._num_workers} executors.")
        self._worker_tasks = [
            asyncio.create_task(self._executor(i + 1)) for i in range(self._num_workers)
        ]
        self._monitor_task = asyncio.create_task(self._monitor_queue())

    async def submit(self, target: TargetSpec) -> bool:
        """
        Enqueues a target, waiting for a free slot in the job queue.

        If the pool is shutting down, or starts shutting down while the caller
        is waiting, the submission is silently dropped.

        Args:
            target: The target to probe.

        Returns:
            bool: True if the job was enqueued, False if it was dropped.
        """
        if self._closing:
            logger.debug(f"Pool is shutting down, dropping job for {target.name}.")
            return False

        if not self._jobs.full():
            self._jobs.put_nowait(target)
            return True

        put_task = asyncio.ensure_future(self._jobs.put(target))
        shutdown_task = asyncio.ensure_future(self._shutdown.wait())
        try:
            await asyncio.wait({put_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            shutdown_task.cancel()
            if not put_task.done():
                put_task.cancel()

        if put_task.done() and not put_task.cancelled():
            return True

        logger.debug(f"Pool shut down while waiting, dropping job for {target.name}.")
        return False

    async def _executor(self, worker_num: int) -> None:
        """
        Consumer task that probes targets from the queue.

        Args:
            worker_num: The identifier number of this executor task.

        Returns:
            None
        """
        worker_logger: logging.Logger = logging.getLogger(f"executor-{worker_num}")

        while True:
            try:
                # 1. Wait for a job
                target: TargetSpec = await self._jobs.get()

                # 2. Probe it under its own deadline and hand the outcome over
                try:
                    timeout = target.timeout or self._default_timeout
                    outcome = await self._prober.probe(target, timeout)
                    await self._results.put(outcome)
                except Exception as e:
                    worker_logger.exception(f"Probe failed for target {target.name} with error: {e}")
                finally:
                    # 3. Notify the queue that the job is done
                    self._jobs.task_done()

            except asyncio.CancelledError:
                worker_logger.debug("Stopping.")
                break

    async def _monitor_queue(self) -> None:
        """
        A task that monitors the job queue size and logs it periodically.

        Returns:
            None
        """
        monitor_logger: logging.Logger = logging.getLogger(f"{__name__}.QueueMonitor")

        while True:
            try:
                await asyncio.sleep(self._queue_size_monitoring_interval)
                qsize = self._jobs.qsize()
                ninety_percent_capacity = self._jobs.maxsize * 0.9
                if qsize > ninety_percent_capacity:
                    monitor_logger.warning(
                        f"Job queue size ({qsize}) is above 90% of capacity ({self._jobs.maxsize})"
                    )
                else:
                    monitor_logger.debug(f"Current job queue size: {qsize}")
            except asyncio.CancelledError:
                monitor_logger.debug("Shutting down.")
                break

    async def close(self, drain_timeout: float = 0.0) -> None:
        """
        Shuts the pool down and closes the results stream.

        The shutdown sequence is:
        1. Stop accepting jobs and release blocked submitters
        2. Optionally wait up to drain_timeout seconds for queued and in-flight jobs
        3. Cancel all executors, aborting in-flight requests and discarding their outcomes
        4. Wait for all executors to exit
        5. Close the results stream

        Calling close() again, even concurrently, is safe: later calls wait for
        the first one to complete.

        Args:
            drain_timeout: Seconds to let pending work finish before aborting it.

        Returns:
            None
        """
        if self._closing:
            await self._closed_event.wait()
            return

        self._closing = True
        self._shutdown.set()
        logger.info("Closing worker pool...")

        if drain_timeout > 0 and self._worker_tasks:
            logger.info(f"Waiting up to {drain_timeout}s for {self._jobs.qsize()} queued jobs...")
            try:
                await asyncio.wait_for(self._jobs.join(), timeout=drain_timeout)
            except asyncio.TimeoutError:
                logger.warning("Drain timeout expired, aborting in-flight probes.")

        all_background_tasks = list(self._worker_tasks)
        if self._monitor_task is not None:
            all_background_tasks.append(self._monitor_task)

        for task in all_background_tasks:
            task.cancel()

        await asyncio.gather(*all_background_tasks, return_exceptions=True)

        # No executor can push anymore, so the stream can be closed safely
        await self._results.close()
        self._closed_event.set()
        logger.info("Worker pool closed.")
