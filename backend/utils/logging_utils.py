"""
Logging utilities for conversion runs.

Provides a colored console formatter and a timer that reports duration and
record counts for an operation.
"""

import logging
import time
import sys
from datetime import datetime
from typing import Optional, Any


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record):
        color = self.COLORS.get(record.levelname, '') if self.use_color else ''
        reset = self.RESET if self.use_color else ''

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        level_str = f"{color}{record.levelname:8}{reset}"
        location = f"{record.module}.{record.funcName}" if record.funcName != '<module>' else record.module
        message = record.getMessage()

        # Add extra context if available
        extras = []
        if hasattr(record, 'duration_ms'):
            extras.append(f"duration={record.duration_ms:.1f}ms")
        if hasattr(record, 'record_count'):
            extras.append(f"records={record.record_count}")
        if hasattr(record, 'key_count'):
            extras.append(f"keys={record.key_count}")

        extra_str = f" [{', '.join(extras)}]" if extras else ""
        line = f"{timestamp} | {level_str} | {location:30} | {message}{extra_str}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", stream=None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream, stdout by default
    """
    stream = stream or sys.stdout

    # Remove existing handlers
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(use_color=stream.isatty()))
    handler.setLevel(getattr(logging, level.upper()))

    root.setLevel(getattr(logging, level.upper()))
    root.addHandler(handler)

    logging.getLogger('uvicorn').setLevel(logging.INFO)
    logging.getLogger('uvicorn.access').setLevel(logging.INFO)
    logging.getLogger('multipart').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger by name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class LogTimer:
    """
    Context manager for timing operations with automatic logging.

    Usage:
        with LogTimer(logger, "Converting gml to graphml") as timer:
            result = writer.write(records, out)
            timer.set_record_count(result.nodes + result.edges)
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.INFO,
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None
        self.duration_ms: Optional[float] = None
        self.record_count = None
        self.extra_info = {}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000

        extra = {'duration_ms': self.duration_ms}
        if self.record_count is not None:
            extra['record_count'] = self.record_count
        extra.update(self.extra_info)

        if exc_type is not None:
            self.logger.error(
                f"Failed: {self.operation} - {exc_val}",
                extra=extra
            )
        else:
            self.logger.log(
                self.level,
                f"Completed: {self.operation}",
                extra=extra
            )

        return False

    def set_record_count(self, count: int) -> None:
        """Set the number of records processed."""
        self.record_count = count

    def add_info(self, key: str, value: Any) -> None:
        """Add extra info to the completion log."""
        self.extra_info[key] = value
