"""
Main entry point for the uptime monitoring application.

This module initializes and runs the uptime monitoring system. It sets up logging,
loads the targets file, creates the HTTP session, the result sink and the
notification backends, starts the engine and handles graceful shutdown when the
application receives SIGINT or SIGTERM.
"""

import asyncio
import logging
import signal
import sys
from typing import List, Optional

import aiohttp
import asyncpg

from uptime_monitor.config import MonitoringContext, get_context, validate_context
from uptime_monitor.config.db_config import initiate_db_pool
from uptime_monitor.config.http_config import get_http_session
from uptime_monitor.config.logging_config import configure_logging
from uptime_monitor.config.targets_config import MonitorConfig, load_monitor_config
from uptime_monitor.contracts import Notifier, ResultSink
from uptime_monitor.engine import MonitoringEngine
from uptime_monitor.housekeeping import Housekeeper
from uptime_monitor.notifier.dispatcher import NotificationDispatcher
from uptime_monitor.notifier.email_notifier import EmailNotifier
from uptime_monitor.notifier.telegram_notifier import TelegramNotifier
from uptime_monitor.probe.aiohttp_probe import AiohttpProbe
from uptime_monitor.processor.alerting_processor import AlertingProcessor
from uptime_monitor.processor.logging_processor import LoggingProcessor
from uptime_monitor.processor.persistence_processor import PersistenceProcessor
from uptime_monitor.sink.asyncpg_sink import PostgresResultSink
from uptime_monitor.sink.memory_sink import InMemoryResultSink


def build_notifiers(config: MonitorConfig) -> List[Notifier]:
    """
    Creates the notification backends enabled in the targets file.

    The Telegram backend owns its session, so alerts never wait on the probe
    session's connection limit.
    """
    notifiers: List[Notifier] = []
    if config.telegram.enabled:
        notifiers.append(
            TelegramNotifier(
                bot_token=config.telegram.bot_token,
                chat_id=config.telegram.chat_id,
                api_url=config.telegram.api_url,
            )
        )
    if config.email.enabled:
        notifiers.append(EmailNotifier(config.email))
    return notifiers


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Not available on Windows event loops, KeyboardInterrupt still applies
            pass


async def main(context: MonitoringContext, stop_event: Optional[asyncio.Event] = None) -> None:
    """
    Set up and run the uptime monitoring application.

    This function initializes all components of the monitoring system:
    1. Loads the targets and notification settings
    2. Creates the HTTP session shared by the probes
    3. Creates the result sink (PostgreSQL or in-memory)
    4. Creates the processors and starts the engine and housekeeping
    5. Waits for a stop request and shuts everything down in order

    Args:
        context: Configuration context containing all application settings.
        stop_event: Set to request shutdown, defaults to one bound to SIGINT and SIGTERM.

    Returns:
        None
    """
    logger: logging.Logger = logging.getLogger(__name__)
    logger.info("Starting application...")
    worker_id: str = context.worker_id

    config: MonitorConfig = load_monitor_config(context.targets_file)
    logger.info(f"loaded: {len(config.targets)} targets")

    if stop_event is None:
        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)

    # Initialize HTTP session for making requests
    http_session: aiohttp.ClientSession = get_http_session(context)
    logger.info("configured: http_session")

    db_pool: Optional[asyncpg.pool.Pool] = None
    sink: ResultSink
    if context.storage == "postgres":
        db_pool = await initiate_db_pool(context)
        logger.info("initialized: db_pool")
        postgres_sink = PostgresResultSink(pool=db_pool)
        await postgres_sink.initialize()
        sink = postgres_sink
    else:
        sink = InMemoryResultSink()
    logger.info(f"configured: {context.storage} result sink")

    dispatcher = NotificationDispatcher(build_notifiers(config))
    logger.info(f"configured: {len(dispatcher.enabled_notifiers())} notifiers")

    engine = MonitoringEngine(
        worker_id=worker_id,
        targets=config.targets,
        prober=AiohttpProbe(worker_id=worker_id, session=http_session),
        processors=[
            LoggingProcessor(),
            PersistenceProcessor(sink=sink),
            AlertingProcessor(dispatcher=dispatcher),
        ],
        num_workers=context.worker_number,
        interval=context.interval,
        default_timeout=context.default_timeout,
        queue_size=context.queue_size or None,
        drain_timeout=context.drain_timeout,
    )
    housekeeper = Housekeeper(
        sink=sink,
        dispatcher=dispatcher,
        retention_days=context.retention_days,
        purge_interval=context.purge_interval,
        summary_interval=context.summary_interval,
    )

    try:
        logger.info("Engine initialized. Starting monitoring loop...")
        await engine.start()
        await housekeeper.start()
        await stop_event.wait()
        logger.info("Application shutdown requested.")
    except asyncio.CancelledError:
        logger.info("Application shutdown requested.")
    finally:
        # Ensure all resources are properly closed during shutdown
        logger.info("Shutting down resources...")
        await housekeeper.stop()
        await engine.stop()
        await sink.close()
        await dispatcher.close()
        await http_session.close()
        if db_pool:
            await db_pool.close()
        logger.info("Shutdown complete.")


def run(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    try:
        # Parse command-line arguments and environment variables
        uptime_monitor_context: MonitoringContext = get_context(argv)
        validate_context(uptime_monitor_context)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    # Configure logging based on the context
    configure_logging(uptime_monitor_context)

    try:
        asyncio.run(main(uptime_monitor_context))
    except ValueError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        logging.info("Shutdown initiated by user (Ctrl+C).")


if __name__ == "__main__":
    run()
