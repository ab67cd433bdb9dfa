"""Tests for logging setup."""

import logging

import pytest

from visionpress.core.logging_config import ErrorLogger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.captureWarnings(False)


def test_run_log_is_written(tmp_path, restore_root_logger):
    log_file = setup_logging(logging.INFO, log_to_file=True, log_dir=tmp_path)
    logging.getLogger("visionpress.test").info("hello from the test")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert log_file.parent == tmp_path
    assert "hello from the test" in log_file.read_text(encoding="utf-8")


def test_console_only(restore_root_logger):
    assert setup_logging(logging.DEBUG, log_to_file=False) is None
    assert logging.getLogger("LiteLLM").level == logging.DEBUG


def test_error_logger_reraises(caplog):
    with pytest.raises(RuntimeError):
        with ErrorLogger("PDF rendering", logging.getLogger("visionpress.test")):
            raise RuntimeError("disk full")
    assert "PDF rendering failed: RuntimeError: disk full" in caplog.text


def test_error_logger_can_suppress(caplog):
    with ErrorLogger("asset prefetch", reraise=False):
        raise ValueError("bad url")
    assert "asset prefetch failed" in caplog.text
