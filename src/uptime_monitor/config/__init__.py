"""
Configuration module for the uptime monitoring system.

This module provides functionality to parse command-line arguments and environment
variables to create a configuration context for the monitoring system. It defines
default values and help text for all configurable parameters.
"""

import argparse
import os
from typing import Any, List, Optional
from uuid import uuid4

from uptime_monitor.config.constants import (
    DEFAULT_DB_POOL_SIZE,
    DEFAULT_DRAIN_TIMEOUT,
    DEFAULT_DSN,
    DEFAULT_INTERVAL,
    DEFAULT_LOGGING_CONFIG_FILE,
    DEFAULT_LOGGING_TYPE,
    DEFAULT_PURGE_INTERVAL,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_RETENTION_DAYS,
    DEFAULT_STORAGE,
    DEFAULT_SUMMARY_INTERVAL,
    DEFAULT_TARGETS_FILE,
    DEFAULT_TIMEOUT,
    DEFAULT_WORKER_ID_PREFIX,
    DEFAULT_WORKER_NUMBER,
    STORAGE_BACKENDS,
)
from uptime_monitor.config.monitoring_context import MonitoringContext

ENV_PREFIX = "UPTIME_MONITOR_"


def _env(name: str, default: Any) -> Any:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def get_context(argv: Optional[List[str]] = None) -> MonitoringContext:
    """
    Parse command-line arguments and environment variables to create a configuration context.

    For each option, it first checks for a command-line argument, then falls back
    to an UPTIME_MONITOR_* environment variable, and finally uses a default value.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:].

    Returns:
        MonitoringContext: A configuration context object containing all parsed settings.
    """
    parser = argparse.ArgumentParser(
        description="Periodically probes HTTP targets and alerts on availability changes."
    )

    parser.add_argument(
        "-dsn",
        "--dsn",
        type=str,
        default=_env("DSN", DEFAULT_DSN),
        help="Specifies the DSN (connection string) for the PostgreSQL database.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}DSN environment variable.",
    )

    parser.add_argument(
        "-wid",
        "--worker-id",
        type=str,
        default=_env("WORKER_ID", f"{DEFAULT_WORKER_ID_PREFIX}{uuid4()}"),
        help="Specifies the identifier of this monitor instance, stamped on every log record.\n"
        f"If that is also absent, the default value will be {DEFAULT_WORKER_ID_PREFIX}uuid4().",
    )

    parser.add_argument(
        "-tf",
        "--targets-file",
        type=str,
        default=_env("TARGETS_FILE", DEFAULT_TARGETS_FILE),
        help="Path to the YAML file listing targets and notification backends.\n"
        f"If that is also absent, a default value of {DEFAULT_TARGETS_FILE} is used.",
    )

    parser.add_argument(
        "-st",
        "--storage",
        type=str,
        default=_env("STORAGE", DEFAULT_STORAGE),
        help=f"Result storage backend, one of: {', '.join(STORAGE_BACKENDS)}.",
    )

    parser.add_argument(
        "-ps",
        "--db-pool-size",
        type=int,
        default=int(_env("DB_POOL_SIZE", DEFAULT_DB_POOL_SIZE)),
        help="Specifies the maximum number of connections in the database connection pool.\n"
        f"If that is also absent, a default value of {DEFAULT_DB_POOL_SIZE} is used.",
    )

    parser.add_argument(
        "-wn",
        "--worker-number",
        type=int,
        default=int(_env("WORKER_NUMBER", DEFAULT_WORKER_NUMBER)),
        help="Specifies the number of concurrent probes.\n"
        f"If that is also absent, a default value of {DEFAULT_WORKER_NUMBER} is used.",
    )

    parser.add_argument(
        "-qs",
        "--queue-size",
        type=int,
        default=int(_env("QUEUE_SIZE", DEFAULT_QUEUE_SIZE)),
        help="Specifies the capacity of the job queue, 0 for twice the number of workers.",
    )

    parser.add_argument(
        "-iv",
        "--interval",
        type=float,
        default=float(_env("INTERVAL", DEFAULT_INTERVAL)),
        help="Specifies the number of seconds between two probe rounds.\n"
        f"If that is also absent, a default value of {DEFAULT_INTERVAL} seconds is used.",
    )

    parser.add_argument(
        "-to",
        "--default-timeout",
        type=float,
        default=float(_env("DEFAULT_TIMEOUT", DEFAULT_TIMEOUT)),
        help="Specifies the probe deadline in seconds for targets without their own timeout.\n"
        f"If that is also absent, a default value of {DEFAULT_TIMEOUT} seconds is used.",
    )

    parser.add_argument(
        "-dt",
        "--drain-timeout",
        type=float,
        default=float(_env("DRAIN_TIMEOUT", DEFAULT_DRAIN_TIMEOUT)),
        help="Specifies how many seconds pending probes may run during shutdown.",
    )

    parser.add_argument(
        "-rd",
        "--retention-days",
        type=int,
        default=int(_env("RETENTION_DAYS", DEFAULT_RETENTION_DAYS)),
        help="Stored outcomes older than this number of days are purged.",
    )

    parser.add_argument(
        "-pi",
        "--purge-interval",
        type=float,
        default=float(_env("PURGE_INTERVAL", DEFAULT_PURGE_INTERVAL)),
        help="Seconds between two purges of old outcomes, 0 to disable.",
    )

    parser.add_argument(
        "-si",
        "--summary-interval",
        type=float,
        default=float(_env("SUMMARY_INTERVAL", DEFAULT_SUMMARY_INTERVAL)),
        help="Seconds between two summary reports, 0 to disable.",
    )

    parser.add_argument(
        "-lt",
        "--logging-type",
        type=str,
        default=_env("LOGGING_TYPE", DEFAULT_LOGGING_TYPE),
        help="Specifies the logging configuration type to use.\n"
        "Allowed values: dev, prod, custom (case insensitive).\n"
        "For 'custom', the --logging-config-file argument is required.",
    )

    parser.add_argument(
        "-lcf",
        "--logging-config-file",
        type=str,
        default=_env("LOGGING_CONFIG_FILE", DEFAULT_LOGGING_CONFIG_FILE),
        help="Path to custom logging configuration file.\n"
        "Required when --logging-type is set to 'custom'.",
    )

    # Parse the command-line arguments
    args: Any = parser.parse_args(argv)

    return MonitoringContext(
        dsn=args.dsn,
        worker_id=args.worker_id,
        logging_type=args.logging_type,
        logging_config_file=args.logging_config_file,
        targets_file=args.targets_file,
        storage=args.storage.lower(),
        db_pool_size=args.db_pool_size,
        worker_number=args.worker_number,
        queue_size=args.queue_size,
        interval=args.interval,
        default_timeout=args.default_timeout,
        drain_timeout=args.drain_timeout,
        retention_days=args.retention_days,
        purge_interval=args.purge_interval,
        summary_interval=args.summary_interval,
    )


def validate_context(context: MonitoringContext) -> None:
    """
    Rejects settings the engine cannot start with.

    Raises:
        ValueError: If any setting is out of range.
    """
    if context.worker_number < 1:
        raise ValueError("worker_number must be at least 1.")
    if context.queue_size < 0:
        raise ValueError("queue_size must not be negative.")
    if context.interval <= 0:
        raise ValueError("interval must be positive.")
    if context.default_timeout <= 0:
        raise ValueError("default_timeout must be positive.")
    if context.drain_timeout < 0:
        raise ValueError("drain_timeout must not be negative.")
    if context.retention_days < 1:
        raise ValueError("retention_days must be at least 1.")
    if context.purge_interval < 0 or context.summary_interval < 0:
        raise ValueError("purge_interval and summary_interval must not be negative.")
    if context.storage not in STORAGE_BACKENDS:
        raise ValueError(
            f"Invalid storage: {context.storage}. Allowed values are: {', '.join(STORAGE_BACKENDS)}"
        )
