"""
Logging setup for VisionPress runs.

The console only shows warnings unless verbose; each run also gets its own
rotating log file next to the user config.
"""

import logging
import logging.handlers
import os
import platform
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .constants import APP_NAME, VERSION

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(message)s'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# Third-party loggers that are only interesting when debugging
NOISY_LOGGERS = ("LiteLLM", "httpx", "urllib3", "PIL")


def get_log_dir() -> Path:
    """Directory holding run logs for this platform."""
    system = platform.system()
    if system == "Windows":
        root = Path(os.environ.get('APPDATA', Path.home() / 'AppData' / 'Roaming'))
    elif system == "Darwin":
        root = Path.home() / 'Library' / 'Application Support'
    else:
        root = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))
    return root / APP_NAME / 'logs'


def _console_handler(verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _run_log_handler(log_file: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def setup_logging(log_level=logging.INFO, log_to_file=True, log_dir: Optional[Path] = None):
    """
    Configure the root logger for a CLI run.

    Args:
        log_level: Minimum level recorded (DEBUG also turns on verbose console output)
        log_to_file: Write a per-run log file
        log_dir: Where to put it (default: ``get_log_dir()``)

    Returns:
        Path of the run log, or None when file logging is off
    """
    verbose = log_level <= logging.DEBUG
    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(_console_handler(verbose))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.captureWarnings(True)

    if not log_to_file:
        return None

    log_dir = log_dir or get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"visionpress_{datetime.now():%Y%m%d_%H%M%S}.log"
    root.addHandler(_run_log_handler(log_file, log_level))

    root.info(f"{APP_NAME} {VERSION} on Python {platform.python_version()} ({platform.platform()})")
    root.info(f"Run log: {log_file}")
    return log_file


class ErrorLogger:
    """
    Log a failing step with its name before the exception leaves the block.

    Usage::

        with ErrorLogger("PDF rendering", logger):
            renderer.render(document)
    """

    def __init__(self, operation_name, logger=None, reraise=True):
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger()
        self.reraise = reraise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return False
        self.logger.error(f"{self.operation_name} failed: {exc_type.__name__}: {exc_val}", exc_info=True)
        return not self.reraise
