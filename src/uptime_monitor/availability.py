"""
Per-target availability state machine.

The state machine consumes probe outcomes, keeps one TargetState per target and
decides whether an outcome represents a notification-worthy transition. It is
owned by a single consumer task, which serializes every read and write of the
state table and preserves the per-target processing order.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .domain import ProbeOutcome, TargetState, Transition, TransitionKind

# Module logger
logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AvailabilityStateMachine:
    """
    Decides which outcomes should produce a notification.

    Decision table, given the prior state and the new verdict:

    - no prior state: seed the state from the outcome, never notify
    - down -> up: notify UP with the downtime since the last down transition
    - up -> down: notify DOWN with the outcome message
    - down -> down: notify STILL_DOWN only while no alert has been sent for
      this target yet (one-shot escalation), then stay silent
    - up -> up: nothing
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """
        Args:
            clock: Returns the current time; defaults to timezone-aware UTC now.
        """
        self._clock: Clock = clock or utc_now
        self._states: Dict[str, TargetState] = {}

    def known_targets(self) -> List[str]:
        return list(self._states)

    def state_of(self, target_name: str) -> Optional[TargetState]:
        """Returns a copy of the state of a target, or None if never seen."""
        state = self._states.get(target_name)
        if state is None:
            return None
        return TargetState(
            is_up=state.is_up,
            last_up=state.last_up,
            last_down=state.last_down,
            last_alert=state.last_alert,
        )

    def evaluate(self, outcome: ProbeOutcome) -> Optional[Transition]:
        """
        Applies an outcome to the state of its target.

        Args:
            outcome: The latest outcome for a target.

        Returns:
            Optional[Transition]: The transition to notify about, if any.
        """
        now = self._clock()
        name = outcome.target_name
        state = self._states.get(name)

        if state is None:
            self._states[name] = TargetState(is_up=outcome.is_up, last_up=now, last_down=now)
            logger.info(f"Initialized state for {name}: is_up={outcome.is_up}")
            return None

        if not state.is_up and outcome.is_up:
            downtime = now - state.last_down
            state.is_up = True
            state.last_up = now
            state.last_alert = now
            logger.info(f"{name} is back up after {downtime}")
            return Transition(
                kind=TransitionKind.UP,
                target_name=name,
                url=outcome.url,
                message=outcome.message,
                downtime=downtime,
            )

        if state.is_up and not outcome.is_up:
            state.is_up = False
            state.last_down = now
            state.last_alert = now
            logger.info(f"{name} went down: {outcome.message}")
            return Transition(
                kind=TransitionKind.DOWN,
                target_name=name,
                url=outcome.url,
                message=outcome.message,
            )

        if not state.is_up and not outcome.is_up:
            if state.last_alert is None:
                state.last_alert = now
                logger.info(f"{name} is still down, sending delayed alert")
                return Transition(
                    kind=TransitionKind.STILL_DOWN,
                    target_name=name,
                    url=outcome.url,
                    message=outcome.message,
                )
            return None

        return None
