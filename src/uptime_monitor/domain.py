"""
Domain models for the uptime monitoring system.

This module defines the core data structures used throughout the application:
the targets to probe, the outcome of a single probe, the per-target availability
state and the transitions that are worth notifying about.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, NamedTuple, Optional


class HttpMethod(str, Enum):
    """
    Defines supported HTTP methods as a type-safe enumeration.

    Inheriting from 'str' allows enum members to behave like strings,
    making them compatible with libraries expecting string values.
    """

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    OPTIONS = "OPTIONS"


class TargetSpec(NamedTuple):
    """
    Represents a single remote endpoint under periodic observation.

    Instances are immutable; a configuration change produces new instances
    that are picked up by the next probe round.

    Attributes:
        name: Unique name of the target among the configured targets.
        url: The URL to probe.
        method: The HTTP method to use for the request.
        headers: Optional HTTP headers to include with each request.
        expected_status: The exact status code that counts as "up".
        check_content: Optional substring that must appear in the response body.
        timeout: Optional per-target deadline in seconds, overriding the pool default.
    """

    name: str
    url: str
    method: HttpMethod = HttpMethod.GET
    headers: Optional[Dict[str, str]] = None
    expected_status: int = 200
    check_content: Optional[str] = None
    timeout: Optional[float] = None


class ProbeOutcome(NamedTuple):
    """
    The result of one probe execution.

    Attributes:
        target_name: Name of the probed target.
        url: URL of the probed target.
        status_code: Observed HTTP status, 0 if the request never completed.
        elapsed: Seconds elapsed until the response headers arrived (or the failure).
        is_up: The verdict derived from status and optional content match.
        message: A human-readable description of the verdict.
        error: The underlying exception, if any.
        checked_at: Timezone-aware completion timestamp.
    """

    target_name: str
    url: str
    status_code: int
    elapsed: float
    is_up: bool
    message: str
    error: Optional[Exception]
    checked_at: datetime


@dataclass
class TargetState:
    """Mutable per-target availability record, owned by the state machine."""

    is_up: bool
    last_up: datetime
    last_down: datetime
    last_alert: Optional[datetime] = None


class TransitionKind(str, Enum):
    """Kinds of availability changes that produce a notification."""

    DOWN = "down"
    UP = "up"
    STILL_DOWN = "still_down"


class Transition(NamedTuple):
    """
    A notification-worthy decision taken by the availability state machine.

    Attributes:
        kind: What happened to the target.
        target_name: Name of the target.
        url: URL of the target.
        message: The message of the outcome that triggered the transition.
        downtime: Length of the down episode, only set for UP transitions.
    """

    kind: TransitionKind
    target_name: str
    url: str
    message: str
    downtime: Optional[timedelta] = None


class TargetStats(NamedTuple):
    """
    Aggregated statistics for one target over a time window.

    Attributes:
        target_name: Name of the target.
        url: URL from the most recent stored outcome, empty if none.
        total_checks: Number of outcomes in the window.
        successful_checks: Number of "up" outcomes in the window.
        uptime_percent: successful_checks / total_checks * 100, 0.0 without checks.
        avg_response_time_ms: Average response time in whole milliseconds.
        last_check: Timestamp of the most recent outcome in the window.
        last_is_up: Verdict of the most recent outcome, None without checks.
    """

    target_name: str
    url: str
    total_checks: int
    successful_checks: int
    uptime_percent: float
    avg_response_time_ms: int
    last_check: Optional[datetime]
    last_is_up: Optional[bool]
