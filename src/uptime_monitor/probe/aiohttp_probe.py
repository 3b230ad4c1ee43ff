"""
HTTP probe implementation using the aiohttp library.

This module provides an implementation of the TargetProber interface that uses
the aiohttp library to perform HTTP requests. It handles timing, error handling,
status verification and optional content matching of response bodies.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import aiohttp

from uptime_monitor.contracts import TargetProber
from uptime_monitor.domain import ProbeOutcome, TargetSpec

# Module logger
logger = logging.getLogger(__name__)

MESSAGE_CREATE_FAILED = "failed to create request"
MESSAGE_REQUEST_FAILED = "request failed"
MESSAGE_READ_FAILED = "failed to read response body"


def has_content(content: str, body: bytes) -> bool:
    """
    Checks whether a response body contains the configured substring.

    Args:
        content: The substring that must appear in the body.
        body: The raw response body.

    Returns:
        bool: True if the UTF-8 encoding of the substring appears in the body.
    """
    return content.encode("utf-8") in body


class AiohttpProbe(TargetProber):
    """
    A concrete implementation of TargetProber using the aiohttp library.

    This class handles the entire lifecycle of a single HTTP check. It never
    raises for network problems: every failure is encoded in the returned
    ProbeOutcome with a down verdict. It uses a shared aiohttp ClientSession
    for optimal performance.
    """

    def __init__(self, worker_id: str, session: aiohttp.ClientSession) -> None:
        """
        Initializes the probe with a shared aiohttp ClientSession.

        Args:
            worker_id: A unique identifier for this worker instance.
            session: An active aiohttp.ClientSession to be used for requests.
        """
        self._worker_id: str = worker_id
        self._session: aiohttp.ClientSession = session

    async def probe(self, target: TargetSpec, timeout: float) -> ProbeOutcome:
        """
        Performs one HTTP request against the target and derives a verdict.

        The status code must match the target's expected status exactly. If a
        content check is configured and the status check passed, the full body
        is read and must contain the configured substring.

        Args:
            target: The target to check.
            timeout: Deadline in seconds covering connect, headers and body.

        Returns:
            ProbeOutcome: The outcome of the check.
        """
        logger.debug(f"Starting probe for target {target.name}: {target.url}")
        start_time: float = time.monotonic()
        elapsed: Optional[float] = None

        try:
            async with self._session.request(
                target.method,
                target.url,
                headers=target.headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                elapsed = time.monotonic() - start_time
                status_code: int = response.status

                if status_code == target.expected_status:
                    is_up = True
                    message = f"Status {status_code} (as expected)"
                else:
                    is_up = False
                    message = f"Status {status_code} (expected {target.expected_status})"

                # Only check the content if the status check passed
                if target.check_content and is_up:
                    try:
                        body: bytes = await response.read()
                    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                        logger.warning(f"Failed to read body of {target.url}: {e!r}")
                        return self._outcome(
                            target, status_code, elapsed, False, MESSAGE_READ_FAILED, e
                        )

                    if not has_content(target.check_content, body):
                        is_up = False
                        message = f"Content check failed: '{target.check_content}' not found"

        except aiohttp.InvalidURL as e:
            logger.warning(f"Cannot build request for {target.name}: {e!r}")
            return self._outcome(
                target, 0, time.monotonic() - start_time, False, MESSAGE_CREATE_FAILED, e
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning(f"Request to {target.url} failed: {e!r}")
            return self._outcome(
                target, 0, time.monotonic() - start_time, False, MESSAGE_REQUEST_FAILED, e
            )
        except ValueError as e:
            # Malformed headers or method are rejected while the request is built
            logger.warning(f"Cannot build request for {target.name}: {e!r}")
            return self._outcome(
                target, 0, time.monotonic() - start_time, False, MESSAGE_CREATE_FAILED, e
            )

        logger.debug(
            f"Probed {target.url} in {elapsed:.3f}s with status {status_code}: {message}"
        )
        return self._outcome(target, status_code, elapsed, is_up, message, None)

    @staticmethod
    def _outcome(
        target: TargetSpec,
        status_code: int,
        elapsed: float,
        is_up: bool,
        message: str,
        error: Optional[Exception],
    ) -> ProbeOutcome:
        return ProbeOutcome(
            target_name=target.name,
            url=target.url,
            status_code=status_code,
            elapsed=elapsed,
            is_up=is_up,
            message=message,
            error=error,
            checked_at=datetime.now(timezone.utc),
        )
