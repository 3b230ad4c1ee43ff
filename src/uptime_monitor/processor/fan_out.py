"""
Outcome fan-out.

This module provides the single reader of the worker pool's outcome stream. It
copies every outcome to each registered ResultProcessor, each one consumed by
its own task, so that a slow or failing processor neither blocks nor breaks the
others.
"""

import asyncio
import logging
from typing import List, Optional, Union

from uptime_monitor.contracts import ResultProcessor
from uptime_monitor.domain import ProbeOutcome
from uptime_monitor.worker_pool import OutcomeStream

# Module logger
logger = logging.getLogger(__name__)

# Marks the end of the stream inside a processor queue
_END_OF_STREAM = object()

_QueueItem = Union[ProbeOutcome, object]


class OutcomeFanOut:
    """
    Broadcasts the outcome stream to a list of processors.

    A pump task reads the stream and appends each outcome to one unbounded
    queue per processor. Every processor is driven by a dedicated consumer
    task, which preserves the stream order per processor. When the stream
    closes, each consumer drains its queue, flushes its processor and exits.
    """

    def __init__(self, stream: OutcomeStream, processors: List[ResultProcessor]) -> None:
        """
        Initializes the fan-out.

        Args:
            stream: The outcome stream to read. The fan-out must be its only reader.
            processors: The processors receiving every outcome.
        """
        self._stream: OutcomeStream = stream
        self._processors: List[ResultProcessor] = processors
        self._queues: List["asyncio.Queue[_QueueItem]"] = [asyncio.Queue() for _ in processors]
        self._pump_task: Optional[asyncio.Task] = None
        self._consumer_tasks: List[asyncio.Task] = []

    async def start(self) -> None:
        """Starts the pump and one consumer task per processor."""
        logger.info(f"Starting outcome fan-out to {len(self._processors)} processors.")
        self._consumer_tasks = [
            asyncio.create_task(self._consume(processor, queue))
            for processor, queue in zip(self._processors, self._queues)
        ]
        self._pump_task = asyncio.create_task(self._pump())

    async def _pump(self) -> None:
        try:
            async for outcome in self._stream:
                for queue in self._queues:
                    queue.put_nowait(outcome)
        finally:
            for queue in self._queues:
                queue.put_nowait(_END_OF_STREAM)
            logger.debug("Outcome stream closed, consumers notified.")

    async def _consume(self, processor: ResultProcessor, queue: "asyncio.Queue[_QueueItem]") -> None:
        """
        Feeds one processor from its queue until the end of the stream.

        Processor failures are logged and never propagated, ensuring that one
        processor's failure does not affect the pipeline.
        """
        processor_name = type(processor).__name__
        while True:
            item = await queue.get()
            if item is _END_OF_STREAM:
                break
            try:
                await processor.process(item)
            except Exception as e:
                logger.exception(
                    f"Processor '{processor_name}' failed for target {item.target_name} with error: {e}",
                )

        try:
            await processor.flush()
        except Exception as e:
            logger.exception(f"Processor '{processor_name}' failed to flush: {e}")

    async def wait_closed(self) -> None:
        """
        Waits until the stream is closed and every processor has drained and flushed.
        """
        tasks = list(self._consumer_tasks)
        if self._pump_task is not None:
            tasks.append(self._pump_task)
        await asyncio.gather(*tasks)
        logger.info("Outcome fan-out finished.")
