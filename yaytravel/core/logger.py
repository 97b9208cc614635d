# yaytravel/core/logger.py
"""
Application logger.

Everything logs through ``logger`` ("yaytravel"). INFO and above go to a
rotating file in ``YAYTRAVEL_LOG_DIR`` (default ``./logs``); DEBUG and above
go to the console.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
LOG_FILE_NAME = "yaytravel.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def default_log_dir() -> Path:
    return Path(os.getenv("YAYTRAVEL_LOG_DIR", Path.cwd() / "logs"))


def setup_logger(name: str = "yaytravel", log_dir: Optional[Path] = None) -> logging.Logger:
    """Attach the file and console handlers once; later calls return the logger as is."""
    log = logging.getLogger(name)
    log.setLevel(logging.DEBUG)

    # uvicorn --reload imports this module more than once
    if log.handlers:
        return log

    log_dir = Path(log_dir) if log_dir else default_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG)

    log.addHandler(file_handler)
    log.addHandler(console_handler)
    return log


logger = setup_logger()
