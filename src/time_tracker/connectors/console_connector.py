# src/time_tracker/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_console_loop(
    state: AppState,
    *,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = _print_ts,
) -> None:
    """
    Interactive REPL over the command registry.

    Reads lines until /exit, /quit, EOF or Ctrl+C. A crashing handler is
    logged and reported; the loop keeps going.
    """
    logger.info("Console connector started.")
    write("[CONSOLE] Type /help for commands. Use /exit to quit.")

    while True:
        try:
            user_input = read_line(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list available commands."

        write(reply)

    logger.info("Console connector finished.")
