"""
Unit tests for the Housekeeper class.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from uptime_monitor.contracts import ResultSink
from uptime_monitor.domain import TargetStats
from uptime_monitor.housekeeping import Housekeeper
from uptime_monitor.notifier.dispatcher import NotificationDispatcher
from uptime_monitor.sink.memory_sink import InMemoryResultSink


@pytest.fixture
def mock_sink() -> AsyncMock:
    sink = AsyncMock(spec=ResultSink)
    sink.purge.return_value = 3
    sink.query_all_stats.return_value = [
        TargetStats("api", "https://api.example.com", 10, 9, 90.0, 120, datetime.now(timezone.utc), True)
    ]
    return sink


@pytest.fixture
def mock_dispatcher() -> AsyncMock:
    dispatcher = AsyncMock(spec=NotificationDispatcher)
    dispatcher.send_summary.return_value = 1
    return dispatcher


@pytest.mark.asyncio
async def test_purge_uses_retention(mock_sink: AsyncMock, mock_dispatcher: AsyncMock) -> None:
    # Arrange
    housekeeper = Housekeeper(mock_sink, mock_dispatcher, 30, purge_interval=0, summary_interval=0)

    # Act
    removed = await housekeeper.purge()

    # Assert
    assert removed == 3
    mock_sink.purge.assert_awaited_once_with(30)


@pytest.mark.asyncio
async def test_purge_logs_removed_count_once(
    mock_dispatcher: AsyncMock, caplog: pytest.LogCaptureFixture
) -> None:
    # Arrange
    housekeeper = Housekeeper(
        InMemoryResultSink(), mock_dispatcher, 30, purge_interval=0, summary_interval=0
    )
    caplog.set_level(logging.INFO)

    # Act
    await housekeeper.purge()

    # Assert
    purge_lines = [record for record in caplog.records if "Purged" in record.getMessage()]
    assert len(purge_lines) == 1


@pytest.mark.asyncio
async def test_send_summary_queries_window_and_dispatches(
    mock_sink: AsyncMock, mock_dispatcher: AsyncMock
) -> None:
    """
    Tests that the summary covers the configured window and reaches the dispatcher.
    """
    # Arrange
    housekeeper = Housekeeper(
        mock_sink,
        mock_dispatcher,
        30,
        purge_interval=0,
        summary_interval=3600,
        summary_window=timedelta(hours=24),
    )

    # Act
    delivered = await housekeeper.send_summary()

    # Assert
    assert delivered == 1
    mock_sink.query_all_stats.assert_awaited_once_with(timedelta(hours=24))
    mock_dispatcher.send_summary.assert_awaited_once_with(mock_sink.query_all_stats.return_value)


@pytest.mark.asyncio
async def test_send_summary_skips_empty_stats(mock_sink: AsyncMock, mock_dispatcher: AsyncMock) -> None:
    # Arrange
    mock_sink.query_all_stats.return_value = []
    housekeeper = Housekeeper(mock_sink, mock_dispatcher, 30, purge_interval=0, summary_interval=60)

    # Act
    delivered = await housekeeper.send_summary()

    # Assert
    assert delivered == 0
    mock_dispatcher.send_summary.assert_not_called()


@pytest.mark.asyncio
async def test_periodic_jobs_run_until_stopped(mock_sink: AsyncMock, mock_dispatcher: AsyncMock) -> None:
    """
    Tests that both jobs repeat on their interval and a failing run does not stop them.
    """
    # Arrange
    mock_sink.purge.side_effect = [RuntimeError("db down"), 1, 1, 1, 1, 1, 1, 1, 1, 1]
    housekeeper = Housekeeper(
        mock_sink, mock_dispatcher, 30, purge_interval=0.02, summary_interval=0.03
    )

    # Act
    await housekeeper.start()
    await asyncio.sleep(0.1)
    await asyncio.wait_for(housekeeper.stop(), timeout=1)
    purges = mock_sink.purge.await_count
    await asyncio.sleep(0.05)

    # Assert
    assert purges >= 2
    assert mock_sink.purge.await_count == purges
    assert mock_dispatcher.send_summary.await_count >= 1


@pytest.mark.asyncio
async def test_zero_intervals_disable_jobs(mock_sink: AsyncMock, mock_dispatcher: AsyncMock) -> None:
    # Arrange
    housekeeper = Housekeeper(mock_sink, mock_dispatcher, 30, purge_interval=0, summary_interval=0)

    # Act
    await housekeeper.start()
    await asyncio.sleep(0.05)
    await housekeeper.stop()

    # Assert
    mock_sink.purge.assert_not_called()
    mock_sink.query_all_stats.assert_not_called()
