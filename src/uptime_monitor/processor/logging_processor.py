"""
Result processor that writes one log line per outcome.
"""

import logging

from uptime_monitor.contracts import ResultProcessor
from uptime_monitor.domain import ProbeOutcome

# Module logger
logger = logging.getLogger(__name__)


class LoggingProcessor(ResultProcessor):
    """Logs every outcome; failures at WARNING level with their cause."""

    async def process(self, outcome: ProbeOutcome) -> None:
        elapsed_ms = outcome.elapsed * 1000
        if outcome.is_up:
            logger.info(
                f"UP {outcome.target_name} ({outcome.url}) - {outcome.message} (time: {elapsed_ms:.0f}ms)"
            )
            return

        logger.warning(
            f"DOWN {outcome.target_name} ({outcome.url}) - {outcome.message} (time: {elapsed_ms:.0f}ms)"
        )
        if outcome.error is not None:
            logger.warning(f"   error: {outcome.error!r}")

    async def flush(self) -> None:
        pass
