"""
HTTP client configuration module for the uptime monitoring system.

This module creates the aiohttp session shared by every probe.
"""

import logging

import aiohttp

from uptime_monitor.config.monitoring_context import MonitoringContext

# Module logger
logger = logging.getLogger(__name__)

USER_AGENT = "uptime-monitor/1.0"


def get_http_session(context: MonitoringContext) -> aiohttp.ClientSession:
    """
    Create the HTTP client session used by the probes.

    The connector is sized to the number of workers, so no probe waits on
    another for a free connection.

    Args:
        context: Configuration context containing HTTP client settings.

    Returns:
        aiohttp.ClientSession: A configured HTTP client session.
    """
    connector = aiohttp.TCPConnector(limit=context.worker_number)
    logger.debug(f"Creating HTTP session with a connection limit of {context.worker_number}")
    return aiohttp.ClientSession(connector=connector, headers={"User-Agent": USER_AGENT})
