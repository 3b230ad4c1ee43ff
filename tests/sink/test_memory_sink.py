"""
Unit tests for the InMemoryResultSink class.
"""

from datetime import datetime, timedelta, timezone

import pytest

from uptime_monitor.domain import ProbeOutcome
from uptime_monitor.sink.memory_sink import InMemoryResultSink

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


def _outcome(name: str, is_up: bool, age: timedelta) -> ProbeOutcome:
    return ProbeOutcome(
        target_name=name,
        url=f"https://{name}.example.com",
        status_code=200 if is_up else 500,
        elapsed=0.1,
        is_up=is_up,
        message="",
        error=None,
        checked_at=NOW - age,
    )


@pytest.fixture
def sink() -> InMemoryResultSink:
    return InMemoryResultSink(clock=lambda: NOW)


@pytest.mark.asyncio
async def test_uptime_reflects_successful_share(sink: InMemoryResultSink) -> None:
    """
    Tests that K successes out of N outcomes give K/N x 100 percent uptime.
    """
    # Arrange
    for index in range(8):
        await sink.save(_outcome("api", index % 4 != 0, timedelta(minutes=index)))

    # Act
    stats = await sink.query_stats("api", timedelta(hours=1))

    # Assert
    assert stats.total_checks == 8
    assert stats.successful_checks == 6
    assert stats.uptime_percent == 75.0
    assert stats.avg_response_time_ms == 100


@pytest.mark.asyncio
async def test_query_stats_ignores_outcomes_outside_window(sink: InMemoryResultSink) -> None:
    # Arrange
    await sink.save(_outcome("api", True, timedelta(minutes=5)))
    await sink.save(_outcome("api", False, timedelta(hours=2)))

    # Act
    stats = await sink.query_stats("api", timedelta(hours=1))

    # Assert
    assert stats.total_checks == 1
    assert stats.uptime_percent == 100.0


@pytest.mark.asyncio
async def test_query_stats_for_unknown_target_is_empty(sink: InMemoryResultSink) -> None:
    stats = await sink.query_stats("missing", timedelta(hours=1))

    assert stats.total_checks == 0
    assert stats.uptime_percent == 0.0


@pytest.mark.asyncio
async def test_query_all_stats_covers_every_target_sorted(sink: InMemoryResultSink) -> None:
    # Arrange
    await sink.save(_outcome("web", True, timedelta(minutes=1)))
    await sink.save(_outcome("api", False, timedelta(minutes=1)))
    await sink.save(_outcome("old", True, timedelta(days=2)))

    # Act
    stats = await sink.query_all_stats(timedelta(days=1))

    # Assert
    assert [stat.target_name for stat in stats] == ["api", "web"]
    assert stats[0].last_is_up is False


@pytest.mark.asyncio
async def test_purge_removes_old_outcomes(sink: InMemoryResultSink) -> None:
    """
    Tests that only outcomes older than the retention are removed.
    """
    # Arrange
    await sink.save(_outcome("api", True, timedelta(days=1)))
    await sink.save(_outcome("api", True, timedelta(days=31)))
    await sink.save(_outcome("api", True, timedelta(days=40)))

    # Act
    removed = await sink.purge(30)

    # Assert
    assert removed == 2
    assert len(sink) == 1
