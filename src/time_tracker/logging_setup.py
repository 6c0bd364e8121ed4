# src/time_tracker/logging_setup.py

"""
Logging for the time tracker.

The console REPL and log output share stderr, so the console handler only
shows this app's records (third-party libraries surface at ERROR). The log
file under the data dir keeps every DEBUG record, including the lock and
storage trail of each task operation.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "time_tracker.log"
APP_LOGGER = "time_tracker"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s [%(threadName)s]: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """Pass time_tracker.* records; everything else (incl. py.warnings) only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == APP_LOGGER or record.name.startswith(APP_LOGGER + "."):
            return True
        return record.levelno >= logging.ERROR


def _reset_root(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def setup_logging(
    *,
    log_dir: str | Path = ".local/time_tracker",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the console and file handlers on the root logger.

    Safe to call again (handlers are replaced, not stacked); cli.main calls
    it once before building the coordinator. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    _reset_root(root)

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
