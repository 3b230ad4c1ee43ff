"""
Unit tests for the RoundScheduler class.

The worker pool is replaced by an AsyncMock, so these tests only check when
and how often targets are submitted.
"""

import asyncio
from typing import List
from unittest.mock import AsyncMock

import pytest

from uptime_monitor.domain import TargetSpec
from uptime_monitor.scheduler.round_scheduler import RoundScheduler, SchedulerState
from uptime_monitor.worker_pool import WorkerPool


@pytest.fixture
def targets() -> List[TargetSpec]:
    """Provides two sample targets."""
    return [
        TargetSpec(name="api", url="https://api.example.com"),
        TargetSpec(name="web", url="https://www.example.com"),
    ]


@pytest.fixture
def mock_pool() -> AsyncMock:
    """Provides a pool mock accepting every submission."""
    pool = AsyncMock(spec=WorkerPool)
    pool.submit.return_value = True
    return pool


def test_scheduler_rejects_non_positive_interval(mock_pool: AsyncMock) -> None:
    with pytest.raises(ValueError):
        RoundScheduler(pool=mock_pool, targets=[], interval=0)


@pytest.mark.asyncio
async def test_start_submits_first_round_immediately(
    mock_pool: AsyncMock, targets: List[TargetSpec]
) -> None:
    """
    Tests that start() triggers a round without waiting for the interval.
    """
    # Arrange
    scheduler = RoundScheduler(pool=mock_pool, targets=targets, interval=60)

    # Act
    await scheduler.start()
    await asyncio.sleep(0.01)

    # Assert
    submitted = [call.args[0].name for call in mock_pool.submit.call_args_list]
    assert submitted == ["api", "web"]
    assert scheduler.state is SchedulerState.RUNNING

    # Cleanup
    await scheduler.stop()


@pytest.mark.asyncio
async def test_scheduler_runs_a_round_per_interval(
    mock_pool: AsyncMock, targets: List[TargetSpec]
) -> None:
    """
    Tests that the timer keeps producing rounds until stopped.
    """
    # Arrange
    scheduler = RoundScheduler(pool=mock_pool, targets=targets, interval=0.05)

    # Act
    await scheduler.start()
    await asyncio.sleep(0.18)
    await scheduler.stop()
    rounds = scheduler.rounds_started
    await asyncio.sleep(0.1)

    # Assert
    assert rounds >= 3
    assert scheduler.rounds_started == rounds
    assert mock_pool.submit.call_count == rounds * len(targets)
    assert scheduler.state is SchedulerState.STOPPED


@pytest.mark.asyncio
async def test_start_twice_raises(mock_pool: AsyncMock, targets: List[TargetSpec]) -> None:
    """
    Tests that a scheduler can only be started from the idle state.
    """
    # Arrange
    scheduler = RoundScheduler(pool=mock_pool, targets=targets, interval=60)
    await scheduler.start()

    # Act / Assert
    with pytest.raises(RuntimeError):
        await scheduler.start()

    await scheduler.stop()
    with pytest.raises(RuntimeError):
        await scheduler.start()


@pytest.mark.asyncio
async def test_stop_is_safe_before_start_and_twice(
    mock_pool: AsyncMock, targets: List[TargetSpec]
) -> None:
    """
    Tests that stop() never fails, whatever the state.
    """
    # Arrange
    scheduler = RoundScheduler(pool=mock_pool, targets=targets, interval=60)

    # Act
    await scheduler.stop()
    await scheduler.start()
    await scheduler.stop()
    await scheduler.stop()

    # Assert
    assert scheduler.state is SchedulerState.STOPPED


@pytest.mark.asyncio
async def test_run_round_counts_accepted_submissions(
    mock_pool: AsyncMock, targets: List[TargetSpec]
) -> None:
    """
    Tests that dropped submissions are not counted.
    """
    # Arrange
    mock_pool.submit.side_effect = [True, False]
    scheduler = RoundScheduler(pool=mock_pool, targets=targets, interval=60)

    # Act
    accepted = await scheduler.run_round()

    # Assert
    assert accepted == 1


@pytest.mark.asyncio
async def test_stop_cancels_round_blocked_on_submit(targets: List[TargetSpec]) -> None:
    """
    Tests that stop() does not hang on a round waiting for the pool.
    """
    # Arrange
    pool = AsyncMock(spec=WorkerPool)
    never = asyncio.Event()

    async def _blocked_submit(target: TargetSpec) -> bool:
        await never.wait()
        return True

    pool.submit.side_effect = _blocked_submit
    scheduler = RoundScheduler(pool=pool, targets=targets, interval=60)
    await scheduler.start()
    await asyncio.sleep(0.01)

    # Act
    await asyncio.wait_for(scheduler.stop(), timeout=1)

    # Assert
    assert pool.submit.call_count == 1
    assert scheduler.state is SchedulerState.STOPPED


@pytest.mark.asyncio
async def test_update_targets_applies_from_next_round(
    mock_pool: AsyncMock, targets: List[TargetSpec]
) -> None:
    """
    Tests that a new target list is used by the following rounds.
    """
    # Arrange
    scheduler = RoundScheduler(pool=mock_pool, targets=targets, interval=60)
    await scheduler.run_round()
    mock_pool.submit.reset_mock()

    # Act
    scheduler.update_targets([TargetSpec(name="new", url="https://new.example.com")])
    await scheduler.run_round()

    # Assert
    assert [call.args[0].name for call in mock_pool.submit.call_args_list] == ["new"]
    assert len(scheduler.targets) == 1
