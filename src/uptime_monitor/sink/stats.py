"""
Statistics helpers shared by the result sink implementations.
"""

from typing import Optional, Sequence

from uptime_monitor.domain import ProbeOutcome, TargetStats


def uptime_percent(total_checks: int, successful_checks: int) -> float:
    """Returns successful/total x 100, or 0.0 when there are no checks."""
    if total_checks <= 0:
        return 0.0
    return successful_checks / total_checks * 100


def to_microseconds(elapsed: float) -> int:
    """Converts an elapsed time in seconds to whole microseconds for storage."""
    return int(round(elapsed * 1_000_000))


def average_response_ms(avg_microseconds: Optional[float]) -> int:
    """Converts an average of microsecond samples to whole milliseconds."""
    if avg_microseconds is None:
        return 0
    return int(round(float(avg_microseconds) / 1000))


def empty_stats(target_name: str) -> TargetStats:
    return TargetStats(
        target_name=target_name,
        url="",
        total_checks=0,
        successful_checks=0,
        uptime_percent=0.0,
        avg_response_time_ms=0,
        last_check=None,
        last_is_up=None,
    )


def build_stats(target_name: str, outcomes: Sequence[ProbeOutcome]) -> TargetStats:
    """
    Aggregates a sequence of outcomes of one target.

    Args:
        target_name: Name of the target.
        outcomes: The outcomes in the window, in any order.

    Returns:
        TargetStats: The aggregated statistics.
    """
    if not outcomes:
        return empty_stats(target_name)

    total = len(outcomes)
    successful = sum(1 for outcome in outcomes if outcome.is_up)
    avg_us = sum(to_microseconds(outcome.elapsed) for outcome in outcomes) / total
    latest = max(outcomes, key=lambda outcome: outcome.checked_at)

    return TargetStats(
        target_name=target_name,
        url=latest.url,
        total_checks=total,
        successful_checks=successful,
        uptime_percent=uptime_percent(total, successful),
        avg_response_time_ms=average_response_ms(avg_us),
        last_check=latest.checked_at,
        last_is_up=latest.is_up,
    )
