"""Logging module for hyperstate."""

from .logger import LinkLogger, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "LinkLogger",
]
