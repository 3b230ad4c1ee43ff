"""
Alerting result processor.

Feeds every outcome to the availability state machine and forwards the
resulting transitions to the notification dispatcher.
"""

import logging
from typing import Optional

from uptime_monitor.availability import AvailabilityStateMachine
from uptime_monitor.contracts import ResultProcessor
from uptime_monitor.domain import ProbeOutcome, Transition, TransitionKind
from uptime_monitor.notifier.dispatcher import NotificationDispatcher

# Module logger
logger = logging.getLogger(__name__)


class AlertingProcessor(ResultProcessor):
    """
    The single owner of the availability state machine.

    Outcomes arrive from one consumer task, in stream order, so the state
    table needs no lock. Dispatch is awaited inline, which keeps notifications
    for a target in the order of its transitions.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        state_machine: Optional[AvailabilityStateMachine] = None,
    ) -> None:
        self._dispatcher: NotificationDispatcher = dispatcher
        self._state_machine: AvailabilityStateMachine = state_machine or AvailabilityStateMachine()

    @property
    def state_machine(self) -> AvailabilityStateMachine:
        return self._state_machine

    async def process(self, outcome: ProbeOutcome) -> None:
        transition: Optional[Transition] = self._state_machine.evaluate(outcome)
        if transition is None:
            return

        if transition.kind is TransitionKind.UP:
            await self._dispatcher.send_up(
                transition.target_name, transition.url, transition.downtime
            )
        else:
            await self._dispatcher.send_down(
                transition.target_name, transition.url, transition.message
            )

    async def flush(self) -> None:
        pass
