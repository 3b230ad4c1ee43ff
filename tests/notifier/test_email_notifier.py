"""
Unit tests for the EmailNotifier class.

smtplib.SMTP is patched, so no connection is ever opened.
"""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from uptime_monitor.notifier.email_notifier import EmailNotifier, EmailSettings


@pytest.fixture
def settings() -> EmailSettings:
    return EmailSettings(
        enabled=True,
        smtp_host="smtp.example.com",
        smtp_port=587,
        username="monitor",
        password="secret",
        from_address="monitor@example.com",
        to=["ops@example.com", "dev@example.com"],
        use_tls=True,
    )


def test_is_enabled_requires_host_and_recipients(settings: EmailSettings) -> None:
    assert EmailNotifier(settings).is_enabled() is True
    assert EmailNotifier(settings._replace(enabled=False)).is_enabled() is False
    assert EmailNotifier(settings._replace(smtp_host="")).is_enabled() is False
    assert EmailNotifier(settings._replace(to=[])).is_enabled() is False


@pytest.mark.asyncio
async def test_send_down_delivers_message_over_starttls(settings: EmailSettings) -> None:
    """
    Tests the SMTP conversation: STARTTLS, login and one sendmail to all recipients.
    """
    # Arrange
    notifier = EmailNotifier(settings)

    with patch("uptime_monitor.notifier.email_notifier.smtplib.SMTP") as smtp_class:
        server = MagicMock()
        smtp_class.return_value.__enter__.return_value = server

        # Act
        await notifier.send_down("api", "https://api.example.com", "request failed")

    # Assert
    smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=settings.timeout)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("monitor", "secret")
    from_addr, recipients, message = server.sendmail.call_args[0]
    assert from_addr == "monitor@example.com"
    assert recipients == ["ops@example.com", "dev@example.com"]
    assert "Subject: [DOWN] api is not responding as expected" in message


@pytest.mark.asyncio
async def test_send_up_without_tls_or_credentials(settings: EmailSettings) -> None:
    # Arrange
    notifier = EmailNotifier(settings._replace(use_tls=False, username="", password=""))

    with patch("uptime_monitor.notifier.email_notifier.smtplib.SMTP") as smtp_class:
        server = MagicMock()
        smtp_class.return_value.__enter__.return_value = server

        # Act
        await notifier.send_up("api", "https://api.example.com", timedelta(seconds=30))

    # Assert
    server.starttls.assert_not_called()
    server.login.assert_not_called()
    server.sendmail.assert_called_once()


@pytest.mark.asyncio
async def test_smtp_failure_propagates(settings: EmailSettings) -> None:
    """
    Tests that delivery errors reach the caller, which is the dispatcher.
    """
    # Arrange
    notifier = EmailNotifier(settings)

    with patch(
        "uptime_monitor.notifier.email_notifier.smtplib.SMTP",
        side_effect=OSError("unreachable"),
    ):
        # Act / Assert
        with pytest.raises(OSError):
            await notifier.send_down("api", "https://api.example.com", "request failed")


def test_build_message_headers(settings: EmailSettings) -> None:
    # Act
    msg = EmailNotifier(settings)._build_message("subject", "body")

    # Assert
    assert msg["Subject"] == "subject"
    assert msg["From"] == "monitor@example.com"
    assert msg["To"] == "ops@example.com, dev@example.com"
