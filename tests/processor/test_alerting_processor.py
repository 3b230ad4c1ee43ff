"""
Unit tests for the AlertingProcessor class.

The notification dispatcher is mocked, ensuring that only the mapping from
state machine transitions to dispatcher calls is tested.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from uptime_monitor.availability import AvailabilityStateMachine
from uptime_monitor.domain import ProbeOutcome
from uptime_monitor.notifier.dispatcher import NotificationDispatcher
from uptime_monitor.processor.alerting_processor import AlertingProcessor


def _outcome(is_up: bool, message: str = "") -> ProbeOutcome:
    return ProbeOutcome(
        target_name="api",
        url="https://api.example.com",
        status_code=200 if is_up else 0,
        elapsed=0.1,
        is_up=is_up,
        message=message or "Status 200 (as expected)",
        error=None,
        checked_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def mock_dispatcher() -> AsyncMock:
    """Provides a mock for the NotificationDispatcher."""
    return AsyncMock(spec=NotificationDispatcher)


@pytest.mark.asyncio
async def test_first_outcome_sends_nothing(mock_dispatcher: AsyncMock) -> None:
    # Arrange
    processor = AlertingProcessor(dispatcher=mock_dispatcher)

    # Act
    await processor.process(_outcome(False))

    # Assert
    mock_dispatcher.send_down.assert_not_called()
    mock_dispatcher.send_up.assert_not_called()


@pytest.mark.asyncio
async def test_down_transition_sends_down_alert(mock_dispatcher: AsyncMock) -> None:
    """
    Tests that an up -> down change is forwarded with the outcome message.
    """
    # Arrange
    processor = AlertingProcessor(dispatcher=mock_dispatcher)
    await processor.process(_outcome(True))

    # Act
    await processor.process(_outcome(False, message="request failed"))

    # Assert
    mock_dispatcher.send_down.assert_awaited_once_with(
        "api", "https://api.example.com", "request failed"
    )


@pytest.mark.asyncio
async def test_up_transition_sends_up_alert_with_downtime(mock_dispatcher: AsyncMock) -> None:
    """
    Tests that a recovery is forwarded with the computed downtime.
    """
    # Arrange
    times = iter(
        [
            datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
            datetime(2024, 1, 1, 12, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 1, 12, 6, tzinfo=timezone.utc),
        ]
    )
    machine = AvailabilityStateMachine(clock=lambda: next(times))
    processor = AlertingProcessor(dispatcher=mock_dispatcher, state_machine=machine)

    # Act
    await processor.process(_outcome(True))
    await processor.process(_outcome(False))
    await processor.process(_outcome(True))

    # Assert
    mock_dispatcher.send_up.assert_awaited_once_with(
        "api", "https://api.example.com", timedelta(minutes=5)
    )
    assert processor.state_machine is machine


@pytest.mark.asyncio
async def test_still_down_transition_sends_down_alert(mock_dispatcher: AsyncMock) -> None:
    """
    Tests that the one-shot alert for a target down since startup goes through send_down.
    """
    # Arrange
    processor = AlertingProcessor(dispatcher=mock_dispatcher)
    await processor.process(_outcome(False, message="request failed"))

    # Act
    await processor.process(_outcome(False, message="request failed"))
    await processor.process(_outcome(False, message="request failed"))

    # Assert
    mock_dispatcher.send_down.assert_awaited_once()
