# -*- coding: utf-8 -*-
"""
Logging setup.

- <log_dir>/system.log: regular operations (INFO+)
- <log_dir>/error.log: failures with tracebacks (ERROR+)
- console: WARNING+ only
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_NAME = "focuslog"

MAX_BYTES = 2 * 1024 * 1024
BACKUP_COUNT = 3


def setup_logging(
    log_dir: str,
    log_level: int = logging.INFO,
    console_level: int = logging.WARNING,
) -> logging.Logger:
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    system_handler = RotatingFileHandler(
        path / "system.log",
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    system_handler.setLevel(log_level)
    system_handler.setFormatter(file_format)
    logger.addHandler(system_handler)

    error_handler = RotatingFileHandler(
        path / "error.log",
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_format)
    logger.addHandler(error_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if name:
        return logging.getLogger(f"{ROOT_NAME}.{name}")
    return logging.getLogger(ROOT_NAME)
