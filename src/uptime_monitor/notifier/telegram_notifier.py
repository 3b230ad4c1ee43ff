"""Telegram notification backend using the Bot API."""

import logging
from datetime import timedelta
from typing import List, Optional

import aiohttp

from uptime_monitor.contracts import Notifier
from uptime_monitor.domain import TargetStats
from uptime_monitor.notifier import formatters

# Module logger
logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

_MARKDOWN_SPECIAL = ("\\", "_", "*", "[", "`")


def escape_markdown(text: str) -> str:
    """Escapes the characters that Telegram's legacy Markdown mode interprets."""
    for char in _MARKDOWN_SPECIAL:
        text = text.replace(char, f"\\{char}")
    return text


class TelegramNotifier(Notifier):
    """Delivers alerts via the Telegram Bot API (Markdown parse mode)."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        session: Optional[aiohttp.ClientSession] = None,
        api_url: str = TELEGRAM_API_URL,
        timeout: float = 10.0,
    ) -> None:
        self._token = bot_token
        self._chat_id = chat_id
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def name(self) -> str:
        return "telegram"

    def is_enabled(self) -> bool:
        return bool(self._token and self._chat_id)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def send_down(self, target_name: str, url: str, message: str) -> None:
        text = formatters.format_down_message(
            escape_markdown(target_name), escape_markdown(url), escape_markdown(message)
        )
        await self._send_message(text)

    async def send_up(self, target_name: str, url: str, downtime: timedelta) -> None:
        text = formatters.format_up_message(
            escape_markdown(target_name), escape_markdown(url), downtime
        )
        await self._send_message(text)

    async def send_summary(self, stats: List[TargetStats]) -> None:
        escaped = [stat._replace(target_name=escape_markdown(stat.target_name)) for stat in stats]
        await self._send_message(formatters.format_summary(escaped))

    async def _send_message(self, text: str) -> None:
        """
        Posts a message to the configured chat.

        Raises:
            aiohttp.ClientError: If the request fails or Telegram rejects it.
        """
        payload = {"chat_id": self._chat_id, "text": text, "parse_mode": "Markdown"}
        session = self._get_session()
        async with session.post(
            f"{self._api_url}/bot{self._token}/sendMessage",
            json=payload,
            timeout=aiohttp.ClientTimeout(total=self._timeout),
        ) as response:
            response.raise_for_status()
        logger.debug(f"Telegram message sent to chat {self._chat_id}")

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
