"""Shared utilities."""

from .logger import setup_logger, close_logger

__all__ = [
    "setup_logger",
    "close_logger"
]
