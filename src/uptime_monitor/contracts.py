"""
Core interfaces for the uptime monitoring system.

This module defines the abstract base classes that form the foundation of the
monitoring system's architecture. These interfaces establish a clear contract
for implementations and enable a modular, pluggable design.
"""

import abc
from datetime import timedelta
from typing import List

from .domain import ProbeOutcome, TargetSpec, TargetStats


class WorkScheduler(abc.ABC):
    """
    Abstract interface for a component that triggers probe rounds.
    """

    @abc.abstractmethod
    async def start(self) -> None:
        """
        Starts producing probe rounds.

        Returns:
            None
        """
        pass

    @abc.abstractmethod
    async def stop(self) -> None:
        """
        Stops producing probe rounds. Must be safe to call more than once.

        Returns:
            None
        """
        pass


class TargetProber(abc.ABC):
    """
    Abstract interface for a component that performs the check for a single target.

    Its responsibility is to encapsulate the network I/O for a given TargetSpec
    and return a structured outcome.
    """

    @abc.abstractmethod
    async def probe(self, target: TargetSpec, timeout: float) -> ProbeOutcome:
        """
        Performs one check on the given target under a deadline.

        Args:
            target: The target to check.
            timeout: Deadline for the whole check, in seconds.

        Returns:
            ProbeOutcome: The outcome of the check.

        Raises:
            asyncio.CancelledError: When the check is aborted by a shutdown.
                Network errors are encoded in the outcome instead of raised.
        """
        pass


class ResultProcessor(abc.ABC):
    """
    Abstract interface for a consumer of the outcome stream.

    Processors are fed by the outcome fan-out, one dedicated consumer task each,
    so a slow processor never delays another.
    """

    @abc.abstractmethod
    async def process(self, outcome: ProbeOutcome) -> None:
        """
        Processes a single outcome.

        Args:
            outcome: The outcome to process.

        Returns:
            None
        """
        pass

    @abc.abstractmethod
    async def flush(self) -> None:
        """
        Forces the persistence of any buffered results.

        Called once the outcome stream has been closed and fully consumed.
        For processors that do not buffer data, this method can be a no-op.

        Returns:
            None
        """
        pass


class ResultSink(abc.ABC):
    """
    Abstract interface for the storage collaborator.

    A sink persists every raw outcome and serves aggregated statistics.
    """

    @abc.abstractmethod
    async def save(self, outcome: ProbeOutcome) -> None:
        """Stores (or buffers) a single outcome."""
        pass

    @abc.abstractmethod
    async def flush(self) -> None:
        """Persists any buffered outcomes."""
        pass

    @abc.abstractmethod
    async def query_stats(self, target_name: str, window: timedelta) -> TargetStats:
        """
        Computes statistics for one target over the trailing window.

        Args:
            target_name: Name of the target.
            window: How far back to look from now.

        Returns:
            TargetStats: The aggregated statistics (zero counts when nothing is stored).
        """
        pass

    @abc.abstractmethod
    async def query_all_stats(self, window: timedelta) -> List[TargetStats]:
        """Computes statistics for every target seen in the trailing window."""
        pass

    @abc.abstractmethod
    async def purge(self, older_than_days: int) -> int:
        """
        Deletes outcomes older than the given number of days.

        Returns:
            int: The number of deleted outcomes.
        """
        pass

    @abc.abstractmethod
    async def close(self) -> None:
        """Flushes and releases any resources held by the sink."""
        pass


class Notifier(abc.ABC):
    """
    Abstract interface for a notification backend.

    Send methods raise on delivery failure; the dispatcher isolates backends
    from each other and from the probing pipeline.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """A short backend name used in logs."""
        pass

    @abc.abstractmethod
    def is_enabled(self) -> bool:
        """Whether the backend is configured to deliver messages."""
        pass

    @abc.abstractmethod
    async def send_down(self, target_name: str, url: str, message: str) -> None:
        pass

    @abc.abstractmethod
    async def send_up(self, target_name: str, url: str, downtime: timedelta) -> None:
        pass

    @abc.abstractmethod
    async def send_summary(self, stats: List[TargetStats]) -> None:
        pass

    async def close(self) -> None:
        """Releases resources (HTTP sessions, etc.). No-op by default."""
        return None
