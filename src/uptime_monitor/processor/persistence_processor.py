"""
Result processor that hands every outcome to a ResultSink.
"""

import logging

from uptime_monitor.contracts import ResultProcessor, ResultSink
from uptime_monitor.domain import ProbeOutcome

# Module logger
logger = logging.getLogger(__name__)


class PersistenceProcessor(ResultProcessor):
    """
    Persists every raw outcome through a ResultSink.

    A failed save is logged and dropped; it never stops future probes.
    """

    def __init__(self, sink: ResultSink) -> None:
        self._sink: ResultSink = sink

    async def process(self, outcome: ProbeOutcome) -> None:
        try:
            await self._sink.save(outcome)
        except Exception as e:
            logger.error(f"Failed to save outcome for {outcome.target_name}: {e}")

    async def flush(self) -> None:
        try:
            await self._sink.flush()
        except Exception as e:
            logger.error(f"Failed to flush result sink: {e}")
