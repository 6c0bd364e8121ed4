# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from time_tracker.logging_setup import LOG_FILE_NAME, _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("time_tracker", logging.DEBUG))
    assert f.filter(_record("time_tracker.tasks.coordinator", logging.DEBUG))
    assert not f.filter(_record("time_tracker_other", logging.INFO))
    assert not f.filter(_record("urllib3", logging.WARNING))
    assert f.filter(_record("urllib3", logging.ERROR))
    assert not f.filter(_record("py.warnings", logging.WARNING))


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logger) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs")
    assert log_file == tmp_path / "logs" / LOG_FILE_NAME

    logging.getLogger("time_tracker.test").debug("hello from test")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "hello from test" in log_file.read_text("utf-8")

    # Calling again does not stack handlers.
    setup_logging(log_dir=tmp_path / "logs")
    assert len(logging.getLogger().handlers) == 2
