"""Logging configuration for the game."""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Union

ROOT_LOGGER = "tulip_trader"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    return level


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Union[int, str] = logging.INFO,
    log_to_file: bool = False,
    log_dir: str = "logs"
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    The console handler lives on the package root logger so that per-game
    child loggers (``tulip_trader.game.<id>``) share it instead of stacking
    one handler per game. A file handler is attached to the named logger
    itself when requested.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR) as int or name
        log_to_file: Whether to log to file
        log_dir: Directory for log files

    Returns:
        Configured logger
    """
    level = _resolve_level(level)

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    if not root.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
        root.addHandler(console_handler)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # File handler (DEBUG and above)
    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_name = name.replace(".", "_")
        log_file = log_path / f"{safe_name}_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")

    return logger


def close_logger(logger: logging.Logger) -> None:
    """
    Release a per-game logger.

    Closes its file handlers and forgets the logger, so finished games do not
    pile up in the logging registry.
    """
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    if logger.name != ROOT_LOGGER:
        logging.Logger.manager.loggerDict.pop(logger.name, None)
