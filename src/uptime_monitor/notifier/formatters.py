"""
Plain-text message bodies shared by the notification backends.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from uptime_monitor.domain import TargetStats

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_duration(duration: Optional[timedelta]) -> str:
    """
    Renders a duration as '1h 2m 3s', dropping leading zero units.

    >>> format_duration(timedelta(seconds=3723))
    '1h 2m 3s'
    """
    if duration is None:
        return "unknown"

    total_seconds = max(0, int(duration.total_seconds()))
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts: List[str] = []
    if days:
        parts.append(f"{days}d")
    if days or hours:
        parts.append(f"{hours}h")
    if days or hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


def _now(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).strftime(TIME_FORMAT)


def down_subject(target_name: str) -> str:
    return f"[DOWN] {target_name} is not responding as expected"


def up_subject(target_name: str) -> str:
    return f"[UP] {target_name} is back online"


def summary_subject() -> str:
    return "Uptime summary report"


def format_down_message(
    target_name: str, url: str, message: str, now: Optional[datetime] = None
) -> str:
    return (
        "Website Down Alert\n\n"
        f"Website: {target_name}\n"
        f"URL: {url}\n"
        "Status: DOWN\n"
        f"Message: {message}\n"
        f"Time: {_now(now)}"
    )


def format_up_message(
    target_name: str, url: str, downtime: Optional[timedelta], now: Optional[datetime] = None
) -> str:
    return (
        "Website Restored\n\n"
        f"Website: {target_name}\n"
        f"URL: {url}\n"
        "Status: UP\n"
        f"Downtime: {format_duration(downtime)}\n"
        f"Time: {_now(now)}"
    )


def format_summary(stats: List[TargetStats], now: Optional[datetime] = None) -> str:
    lines = ["Summary Report", ""]
    for stat in stats:
        status = "DOWN" if stat.last_is_up is False else "UP"
        lines.append(f"{status}: {stat.target_name}")
        lines.append(f"   Uptime: {stat.uptime_percent:.2f}%")
        lines.append(f"   Avg Response: {stat.avg_response_time_ms}ms")
        lines.append(f"   Total Checks: {stat.total_checks}")
        lines.append("")
    lines.append(f"Report time: {_now(now)}")
    return "\n".join(lines)
