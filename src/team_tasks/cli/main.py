# src/team_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the deadline monitor in a background thread (optional),
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.deadline_monitor import DeadlineMonitorRunner, start_deadline_monitor_in_background

logger = logging.getLogger(__name__)


def _shutdown(state: AppState, monitor: DeadlineMonitorRunner | None) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if monitor is not None:
        monitor.stop()
        monitor.join(timeout=10.0)
        if monitor.is_alive():
            logger.warning("Deadline monitor did not stop within 10s (a sweep is still running).")

    try:
        state.store.close()
    except Exception:
        logger.exception("Store close failed.")


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (storage=%s)...", settings.app_name, settings.storage_backend)

    state = create_initial_state(settings=settings)
    monitor = start_deadline_monitor_in_background(state)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()
        if settings.console_enabled:
            # Unblock input(); the console loop treats it like Ctrl+C.
            raise KeyboardInterrupt

    try:
        # With the console up, Ctrl+C must reach input() as KeyboardInterrupt.
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not in the main thread, or the platform lacks SIGTERM.
        logger.debug("Signal handlers not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running the deadline monitor only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        _shutdown(state, monitor)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
