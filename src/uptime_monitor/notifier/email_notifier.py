"""Email notification backend - sends alerts via SMTP."""

import asyncio
import logging
import smtplib
import ssl
from datetime import timedelta
from email.mime.text import MIMEText
from typing import List, NamedTuple

from uptime_monitor.contracts import Notifier
from uptime_monitor.domain import TargetStats
from uptime_monitor.notifier import formatters

logger = logging.getLogger(__name__)


class EmailSettings(NamedTuple):
    """SMTP configuration for sending emails."""

    enabled: bool = False
    smtp_host: str = ""
    smtp_port: int = 587
    username: str = ""
    password: str = ""
    from_address: str = ""
    to: List[str] = []
    use_tls: bool = True
    timeout: float = 30.0


class EmailNotifier(Notifier):
    """
    Sends plain-text alert emails.

    smtplib is blocking, so every delivery runs in a worker thread.
    """

    def __init__(self, settings: EmailSettings) -> None:
        self._settings = settings

    @property
    def name(self) -> str:
        return "email"

    def is_enabled(self) -> bool:
        return bool(self._settings.enabled and self._settings.smtp_host and self._settings.to)

    async def send_down(self, target_name: str, url: str, message: str) -> None:
        await self._send(
            formatters.down_subject(target_name),
            formatters.format_down_message(target_name, url, message),
        )

    async def send_up(self, target_name: str, url: str, downtime: timedelta) -> None:
        await self._send(
            formatters.up_subject(target_name),
            formatters.format_up_message(target_name, url, downtime),
        )

    async def send_summary(self, stats: List[TargetStats]) -> None:
        await self._send(formatters.summary_subject(), formatters.format_summary(stats))

    async def _send(self, subject: str, body: str) -> None:
        await asyncio.to_thread(self._send_blocking, subject, body)

    def _build_message(self, subject: str, body: str) -> MIMEText:
        settings = self._settings
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = settings.from_address or settings.username
        msg["To"] = ", ".join(settings.to)
        return msg

    def _send_blocking(self, subject: str, body: str) -> None:
        """
        Delivers one message.

        Raises:
            smtplib.SMTPException: If the server rejects the connection or message.
            OSError: If the server cannot be reached.
        """
        settings = self._settings
        msg = self._build_message(subject, body)
        from_addr = settings.from_address or settings.username

        logger.debug(f"Connecting to {settings.smtp_host}:{settings.smtp_port} (tls={settings.use_tls})...")
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.timeout) as server:
            if settings.use_tls:
                server.starttls(context=ssl.create_default_context())
            if settings.username and settings.password:
                server.login(settings.username, settings.password)
            server.sendmail(from_addr, list(settings.to), msg.as_string())

        logger.info(f"Email sent to {len(settings.to)} recipient(s): {subject}")
