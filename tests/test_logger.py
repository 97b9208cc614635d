"""
Tests for yaytravel/core/logger.py
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from yaytravel.core.logger import LOG_FILE_NAME, logger, setup_logger


@pytest.fixture
def scratch_logger(tmp_path):
    name = f"yaytravel-test-{tmp_path.name}"
    yield name, tmp_path / "logs"
    log = logging.getLogger(name)
    for handler in list(log.handlers):
        handler.close()
        log.removeHandler(handler)


def test_app_logger_writes_under_log_dir():
    assert logger.name == "yaytravel"
    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename).parent == Path(os.path.abspath(os.environ["YAYTRAVEL_LOG_DIR"]))


def test_handler_levels(scratch_logger):
    name, log_dir = scratch_logger
    log = setup_logger(name, log_dir)
    levels = {type(h): h.level for h in log.handlers}
    assert levels == {RotatingFileHandler: logging.INFO, logging.StreamHandler: logging.DEBUG}


def test_setup_twice_keeps_one_set_of_handlers(scratch_logger):
    name, log_dir = scratch_logger
    first = setup_logger(name, log_dir)
    second = setup_logger(name, log_dir)
    assert first is second
    assert len(second.handlers) == 2


def test_info_reaches_file_debug_does_not(scratch_logger):
    name, log_dir = scratch_logger
    log = setup_logger(name, log_dir)
    log.debug("console only")
    log.info("Conversation conv-1 reported TASK_COMPLETE")
    for handler in log.handlers:
        handler.flush()

    text = (log_dir / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "Conversation conv-1 reported TASK_COMPLETE" in text
    assert "console only" not in text
