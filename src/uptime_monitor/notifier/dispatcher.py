"""
Notification dispatcher.

This module provides a composite that fans every alert out to all enabled
notification backends concurrently. It ensures that a failure in one backend
neither blocks nor fails delivery to another, and never reaches the caller.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, List

from uptime_monitor.contracts import Notifier
from uptime_monitor.domain import TargetStats

# Module logger
logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Delivers alerts to every enabled Notifier.

    Each send method returns the number of backends that delivered the
    message successfully.
    """

    def __init__(self, notifiers: List[Notifier]) -> None:
        """
        Args:
            notifiers: The notification backends. Disabled ones are skipped.
        """
        self._notifiers: List[Notifier] = notifiers

    @property
    def notifiers(self) -> List[Notifier]:
        return list(self._notifiers)

    def enabled_notifiers(self) -> List[Notifier]:
        return [notifier for notifier in self._notifiers if notifier.is_enabled()]

    async def _deliver_with_one(self, notifier: Notifier, method: str, *args: Any) -> bool:
        """
        Runs one backend's send method, logging and swallowing its failure.
        """
        try:
            await getattr(notifier, method)(*args)
            return True
        except Exception as e:
            logger.error(f"Notifier '{notifier.name}' failed to {method}: {e!r}")
            return False

    async def _deliver(self, method: str, *args: Any) -> int:
        notifiers = self.enabled_notifiers()
        if not notifiers:
            return 0

        results = await asyncio.gather(
            *(self._deliver_with_one(notifier, method, *args) for notifier in notifiers)
        )
        return sum(1 for delivered in results if delivered)

    async def send_down(self, target_name: str, url: str, message: str) -> int:
        logger.info(f"Sending down alert for {target_name}")
        return await self._deliver("send_down", target_name, url, message)

    async def send_up(self, target_name: str, url: str, downtime: timedelta) -> int:
        logger.info(f"Sending up alert for {target_name} (downtime: {downtime})")
        return await self._deliver("send_up", target_name, url, downtime)

    async def send_summary(self, stats: List[TargetStats]) -> int:
        logger.info(f"Sending summary report for {len(stats)} targets")
        return await self._deliver("send_summary", stats)

    async def close(self) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.close()
            except Exception as e:
                logger.error(f"Failed to close notifier '{notifier.name}': {e!r}")
