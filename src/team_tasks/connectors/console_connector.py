# src/team_tasks/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import DEFAULT_SESSION
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_console_line(state: AppState, line: str, *, session_id: str = DEFAULT_SESSION) -> str:
    """One REPL step without I/O, so it can be driven from tests."""
    def emit(text: str) -> None:
        _print_ts(text)

    try:
        with state.lock:
            reply = command_registry.handle(state, line, session_id=session_id, emit=emit)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    if reply is None:
        return "Commands start with '/'. Use /help to list available commands."
    return reply


def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(state.settings, "app_name", "team-tasks"))
    logger.info("Console connector started.")
    _print_ts(f"[CONSOLE] {app_name}. Use /help for commands, /login to start, /exit to quit.\n")

    while True:
        try:
            user_input = input(f"{app_name}> ").strip()
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

        _print_ts(handle_console_line(state, user_input))

    logger.info("Console connector finished.")
