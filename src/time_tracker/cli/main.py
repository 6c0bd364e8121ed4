# src/time_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    console_level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    if not isinstance(console_level, int):
        console_level = logging.INFO

    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Some platforms may not support SIGTERM, etc.
        logger.debug("SIGTERM handler not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled. Nothing to do; press Ctrl+C to stop.")
            try:
                stop_main.wait()
            except KeyboardInterrupt:
                pass
    finally:
        close = getattr(state.task_store, "close", None)
        if close is not None:
            close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
