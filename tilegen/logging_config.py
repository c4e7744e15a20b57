"""
Logging setup for tilegen.

Library modules only create ``logging.getLogger(__name__)`` loggers; scripts
call ``setup_logging`` once at startup to decide where the output goes.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB per file
BACKUP_COUNT = 3


def setup_logging(
    level: int | str = logging.WARNING,
    log_file: Path | str | None = None,
    file_level: int | str = logging.DEBUG,
) -> logging.Logger:
    """
    Configure the ``tilegen`` logger.

    Args:
        level: Level for console output on stderr
        log_file: Optional path for a rotating debug log
        file_level: Level for the log file

    Returns:
        The configured ``tilegen`` logger
    """
    root_logger = logging.getLogger("tilegen")
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt="%(levelname)-8s | %(name)-20s | %(message)s"))
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-20s | %(funcName)-25s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    return root_logger
