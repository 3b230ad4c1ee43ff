"""
Configuration context for the uptime monitoring system.

This module defines a data structure that holds all configuration parameters
for the monitoring system. It serves as a central point for passing configuration
throughout the application.
"""

from typing import NamedTuple


class MonitoringContext(NamedTuple):
    """
    A data structure containing all configuration parameters for the monitoring system.

    This class is immutable and provides a type-safe way to pass configuration
    throughout the application. It is created by parsing command-line arguments
    and environment variables.

    Attributes:
        dsn: Database connection string for PostgreSQL.
        worker_id: Unique identifier for this monitor instance.
        logging_type: Type of logging configuration to use (dev, prod, or custom).
        logging_config_file: Path to custom logging configuration file (if logging_type is 'custom').
        targets_file: Path to the YAML file listing targets and notification backends.
        storage: Result sink backend, 'postgres' or 'memory'.
        db_pool_size: Maximum number of connections in the database connection pool.
        worker_number: Number of concurrent probe executors.
        queue_size: Capacity of the job queue, 0 for twice the number of executors.
        interval: Seconds between two probe rounds.
        default_timeout: Probe deadline in seconds for targets without their own.
        drain_timeout: Seconds granted to pending probes during shutdown.
        retention_days: Stored outcomes older than this are purged.
        purge_interval: Seconds between two purges, 0 to disable.
        summary_interval: Seconds between two summary reports, 0 to disable.
    """

    dsn: str
    worker_id: str
    logging_type: str
    logging_config_file: str
    targets_file: str
    storage: str
    db_pool_size: int
    worker_number: int
    queue_size: int
    interval: float
    default_timeout: float
    drain_timeout: float
    retention_days: int
    purge_interval: float
    summary_interval: float
