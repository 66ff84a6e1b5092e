"""
Structured logging configuration for recordstore.

Provides JSON-formatted logs with a record_type field for correlating the
save/load steps of one record type.

Environment Variables:
    RECORDSTORE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    RECORDSTORE_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from recordstore.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, record_type="Settings")
    logger.info("Saved record", extra={"locator": "Settings.json"})
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger


class RecordTypeFilter(logging.Filter):
    """
    Logging filter that adds record_type to all log records.

    Ensures all logs have a record_type field, even if not set via LoggerAdapter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "record_type"):
            record.record_type = "N/A"  # type: ignore
        return True


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure root logger with structured logging.

    Reads configuration from environment variables unless given explicitly:
    - RECORDSTORE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - RECORDSTORE_LOG_FORMAT: json, text (default: json)
    """
    log_level = (level or os.getenv("RECORDSTORE_LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.getenv("RECORDSTORE_LOG_FORMAT", "json")).lower()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    numeric_level = level_map.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.addFilter(RecordTypeFilter())

    if log_format == "json":
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(record_type)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s [record_type=%(record_type)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str, record_type: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger with optional record_type for correlation.

    Args:
        name: Logger name (typically __name__)
        record_type: Type name of the record being processed

    Returns:
        LoggerAdapter with record_type in extra fields
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"record_type": record_type or "N/A"})
