"""Shared helpers: console logging setup and operation timing."""
from .logging_utils import setup_logging, get_logger, LogTimer, ColoredFormatter

__all__ = ['setup_logging', 'get_logger', 'LogTimer', 'ColoredFormatter']
