"""
Logging setup for the uptime monitor.

Two dictConfig files ship with the package (dev and prod); a custom one can be
given on the command line. Every record is stamped with the monitor's worker ID.
"""

import json
import logging.config
import os
from typing import Any, Dict

from uptime_monitor.config.monitoring_context import MonitoringContext

PACKAGED_CONFIGS: Dict[str, str] = {
    "dev": "logging-config-dev.json",
    "prod": "logging-config-prod.json",
}


def configure_logging(context: MonitoringContext) -> None:
    """
    Applies the logging configuration selected by the context.

    Args:
        context: Provides logging_type (dev, prod or custom), the custom
            file path and the worker ID.

    Raises:
        ValueError: If the logging type is missing or unknown, or if 'custom'
            is selected without a configuration file.
        RuntimeError: If the configuration file cannot be loaded.
    """
    logging_type: str = context.logging_type.lower()
    if not logging_type:
        raise ValueError("Logging type must be provided.")

    if logging_type in PACKAGED_CONFIGS:
        _load_logging_config(_get_local_package_file_path(PACKAGED_CONFIGS[logging_type]))
    elif logging_type == "custom":
        if not context.logging_config_file:
            raise ValueError("Custom logging configuration file must be provided.")
        _load_logging_config(context.logging_config_file)
    else:
        raise ValueError(
            f"Invalid logging type: {context.logging_type}. Allowed values are: dev, prod, custom"
        )

    # Records from child loggers skip the root logger's filters, so stamp them at the handlers too
    worker_filter = _WorkerIdFilter(worker_id=context.worker_id)
    root_logger = logging.getLogger()
    root_logger.addFilter(worker_filter)
    for handler in root_logger.handlers:
        handler.addFilter(worker_filter)

    logging.debug(f"Logging configured ({logging_type}) for {context.worker_id}.")


def _load_logging_config(config_file: str) -> None:
    """
    Reads a JSON dictConfig file and applies it.

    Raises:
        RuntimeError: If the file is missing, is not JSON, or is rejected by dictConfig.
    """
    try:
        with open(config_file) as f:
            config: Dict[str, Any] = json.load(f)
            logging.config.dictConfig(config)
    except FileNotFoundError as err:
        raise RuntimeError(f"Logging config file not found: {config_file}") from err
    except json.JSONDecodeError as err:
        raise RuntimeError(f"Invalid JSON format in logging config file: {config_file}") from err
    except Exception as err:
        raise RuntimeError(f"Error loading logging config: {str(err)}") from err


def _get_local_package_file_path(config_file: str) -> str:
    return os.path.join(os.path.dirname(__file__), config_file)


class _WorkerIdFilter(logging.Filter):
    """Sets record.worker_id so formatters can reference %(worker_id)s."""

    def __init__(self, worker_id: str) -> None:
        super().__init__()
        self._worker_id: str = worker_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.worker_id = self._worker_id
        return True
