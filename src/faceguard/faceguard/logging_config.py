"""
Logging configuration for the kiosk.

Console logging with the kiosk id on every line, plus an optional rotating
file under ``log_dir``.
"""
from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] [kiosk=%(kiosk_id)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class KioskContextFilter(logging.Filter):
    """Add kiosk context to log records."""

    def __init__(self, kiosk_id: str):
        super().__init__()
        self.kiosk_id = kiosk_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.kiosk_id = self.kiosk_id
        return True


def setup_logging(
    kiosk_id: str,
    *,
    level: str = "INFO",
    log_dir: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure the root logger.

    Args:
        kiosk_id: Identifier printed on every log line
        level: Level name (DEBUG, INFO, WARNING, ...)
        log_dir: Directory for ``faceguard.log``; console only when empty
        max_bytes: Size at which the log file rotates
        backup_count: Number of rotated files kept
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    context = KioskContextFilter(kiosk_id)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context)
    root_logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path / "faceguard.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
