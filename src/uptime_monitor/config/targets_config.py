"""
Target list and notification settings.

The monitor reads its targets and notification backends from a YAML file:

    targets:
      - name: api
        url: https://api.example.com/health
        method: GET
        expected_status: 200
        check_content: "OK"
        timeout: 10s
    notifications:
      telegram: {enabled: true, bot_token: "...", chat_id: "..."}  # optional api_url
      email: {enabled: false, smtp_host: smtp.example.com, to: [ops@example.com]}

Every problem is reported as a ValueError before the engine starts.
"""

import logging
import re
from typing import Any, Dict, List, NamedTuple, Optional

import yaml

from uptime_monitor.domain import HttpMethod, TargetSpec
from uptime_monitor.notifier.email_notifier import EmailSettings
from uptime_monitor.notifier.telegram_notifier import TELEGRAM_API_URL

# Module logger
logger = logging.getLogger(__name__)

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class TelegramSettings(NamedTuple):
    enabled: bool = False
    bot_token: str = ""
    chat_id: str = ""
    api_url: str = TELEGRAM_API_URL


class MonitorConfig(NamedTuple):
    """
    Everything loaded from the targets file.

    Attributes:
        targets: The targets to probe, in file order.
        telegram: Telegram backend settings.
        email: SMTP backend settings.
    """

    targets: List[TargetSpec]
    telegram: TelegramSettings = TelegramSettings()
    email: EmailSettings = EmailSettings()


def parse_duration(value: Any) -> float:
    """
    Converts a duration to seconds.

    Accepts a plain number of seconds or a string such as "500ms", "10s",
    "5m" or "1h".

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _DURATION_PATTERN.match(value)
        if match:
            amount, unit = match.groups()
            return float(amount) * _DURATION_UNITS[unit or "s"]
    raise ValueError(f"Invalid duration: {value!r}")


def _parse_target(index: int, raw: Any) -> TargetSpec:
    if not isinstance(raw, dict):
        raise ValueError(f"Target #{index + 1} must be a mapping.")

    name = str(raw.get("name") or "").strip()
    if not name:
        raise ValueError(f"Target #{index + 1} has no name.")
    url = str(raw.get("url") or "").strip()
    if not url:
        raise ValueError(f"Target '{name}' has no url.")

    method_name = str(raw.get("method") or HttpMethod.GET.value).upper()
    try:
        method = HttpMethod(method_name)
    except ValueError:
        raise ValueError(f"Target '{name}' has an unknown method: {method_name}") from None

    expected_status = raw.get("expected_status", 200)
    if (
        isinstance(expected_status, bool)
        or not isinstance(expected_status, int)
        or not 100 <= expected_status <= 599
    ):
        raise ValueError(f"Target '{name}' has an invalid expected_status: {expected_status!r}")

    timeout: Optional[float] = None
    if raw.get("timeout") is not None:
        try:
            timeout = parse_duration(raw["timeout"])
        except ValueError as e:
            raise ValueError(f"Target '{name}': {e}") from None
        if timeout <= 0:
            raise ValueError(f"Target '{name}' has a non-positive timeout.")

    headers = raw.get("headers") or None
    if headers is not None:
        if not isinstance(headers, dict):
            raise ValueError(f"Target '{name}' headers must be a mapping.")
        headers = {str(key): str(value) for key, value in headers.items()}

    check_content = raw.get("check_content")
    if "retry" in raw:
        logger.debug(f"Target '{name}': retry is not supported and will be ignored")

    return TargetSpec(
        name=name,
        url=url,
        method=method,
        headers=headers,
        expected_status=expected_status,
        check_content=str(check_content) if check_content else None,
        timeout=timeout,
    )


def _parse_telegram(raw: Dict[str, Any]) -> TelegramSettings:
    settings = TelegramSettings(
        enabled=bool(raw.get("enabled", False)),
        bot_token=str(raw.get("bot_token") or ""),
        chat_id=str(raw.get("chat_id") or ""),
        api_url=str(raw.get("api_url") or TELEGRAM_API_URL),
    )
    if settings.enabled and not (settings.bot_token and settings.chat_id):
        raise ValueError("Telegram notifications need both bot_token and chat_id.")
    return settings


def _parse_email(raw: Dict[str, Any]) -> EmailSettings:
    recipients = raw.get("to") or []
    if isinstance(recipients, str):
        recipients = [recipients]

    settings = EmailSettings(
        enabled=bool(raw.get("enabled", False)),
        smtp_host=str(raw.get("smtp_host") or ""),
        smtp_port=int(raw.get("smtp_port", 587)),
        username=str(raw.get("username") or ""),
        password=str(raw.get("password") or ""),
        from_address=str(raw.get("from") or raw.get("username") or ""),
        to=[str(address) for address in recipients],
        use_tls=bool(raw.get("use_tls", True)),
    )
    if settings.enabled:
        if not settings.smtp_host:
            raise ValueError("Email notifications need an smtp_host.")
        if not (settings.username and settings.password):
            raise ValueError("Email notifications need a username and a password.")
        if not settings.to:
            raise ValueError("Email notifications need at least one recipient.")
    return settings


def parse_monitor_config(raw: Any) -> MonitorConfig:
    """
    Builds a MonitorConfig from the decoded YAML document.

    Raises:
        ValueError: If the document is not a valid monitor configuration.
    """
    if not isinstance(raw, dict):
        raise ValueError("The targets file must contain a mapping.")

    raw_targets = raw.get("targets") or []
    if not isinstance(raw_targets, list) or not raw_targets:
        raise ValueError("At least one target must be configured.")

    targets = [_parse_target(index, item) for index, item in enumerate(raw_targets)]
    seen = set()
    for target in targets:
        if target.name in seen:
            raise ValueError(f"Duplicate target name: {target.name}")
        seen.add(target.name)

    notifications = raw.get("notifications") or {}
    if not isinstance(notifications, dict):
        raise ValueError("notifications must be a mapping.")

    return MonitorConfig(
        targets=targets,
        telegram=_parse_telegram(notifications.get("telegram") or {}),
        email=_parse_email(notifications.get("email") or {}),
    )


def load_monitor_config(path: str) -> MonitorConfig:
    """
    Reads and validates the targets file.

    Args:
        path: Path of the YAML file.

    Raises:
        ValueError: If the file is missing, is not valid YAML, or fails validation.
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as err:
        raise ValueError(f"Targets file not found: {path}") from err
    except yaml.YAMLError as err:
        raise ValueError(f"Invalid YAML in targets file {path}: {err}") from err

    config = parse_monitor_config(raw)
    logger.info(f"Loaded {len(config.targets)} targets from {path}")
    return config
