"""
Logging for influx-loader

Every loader module logs through ``get_logger(__name__)``. Output is one JSON
object per line by default (python-json-logger); set LOG_FORMAT=text for
plain lines when running interactively.
"""
import logging
import os
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "influx-loader"
PACKAGE_PREFIX = "influx_loader"

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class LoaderJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter stamping each record with a UTC time, level and logger name.

    Anything passed through ``extra=`` (row numbers, batch sizes, durations)
    is emitted as additional keys.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["time"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def _build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "text":
        return logging.Formatter(TEXT_FORMAT)
    return LoaderJsonFormatter("%(message)s")


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Configure a logger with a single stdout handler

    Args:
        name: Logger name
        level: Level name (defaults to env var LOG_LEVEL or INFO)
        format_type: "json" or "text" (defaults to env var LOG_FORMAT or "json")

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(format_type or os.getenv("LOG_FORMAT", "json")))
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Return the named logger, configuring it on first use."""
    logger = logging.getLogger(name)
    return logger if logger.handlers else setup_logger(name)


def set_level(level: str) -> None:
    """
    Apply a level to every loader logger created so far.

    Args:
        level: Level name, e.g. "DEBUG"
    """
    resolved = _resolve_level(level)
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and (
            name == DEFAULT_LOGGER_NAME or name.startswith(PACKAGE_PREFIX)
        ):
            logger.setLevel(resolved)


@contextmanager
def log_operation(operation: str, logger: logging.Logger | None = None, **fields) -> Iterator[None]:
    """
    Log the start and outcome of an operation with its duration

    Usage:
        with log_operation("Loading cpu.csv", logger=logger, database="metrics"):
            pipeline.load_file(path)

    Exceptions are logged and re-raised.
    """
    logger = logger or get_logger()
    logger.info(f"Starting: {operation}", extra=fields)
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed: {operation}",
            extra={**fields, "duration_seconds": round(time.perf_counter() - started, 3),
                   "error_type": type(e).__name__},
        )
        raise
    logger.info(
        f"Completed: {operation}",
        extra={**fields, "duration_seconds": round(time.perf_counter() - started, 3)},
    )
