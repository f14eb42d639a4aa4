# src/team_tasks/tasks/deadline_monitor.py

from __future__ import annotations

"""
Deadline monitor.

A small polling loop that, every interval:
- fetches pending tasks whose deadline has passed,
- asks the assignment engine for the least-loaded user of the task's domain,
- moves the task to that user if it differs from the current assignee.

Status and deadline are never touched here. One failing task is logged and
skipped; the sweep goes on with the others and the loop keeps its cadence.

Overlap policy: ticks run sequentially on one event loop, so they never
overlap. If a sweep takes longer than the interval, the missed ticks are
skipped (not queued) and the next sweep starts on the next boundary.
"""

import asyncio
import contextlib
import logging
import threading
import time
from dataclasses import dataclass, field

from ..core.ports import TeamStore
from ..core.state import AppState
from .assignment import select_assignee

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Reassignment:
    task_id: int
    from_user_id: int | None
    to_user_id: int


@dataclass(slots=True)
class SweepReport:
    checked: int = 0
    reassigned: list[Reassignment] = field(default_factory=list)
    unchanged: int = 0
    failed: list[int] = field(default_factory=list)
    # Set when the overdue query itself failed (nothing was checked).
    error: str | None = None


def sweep_overdue_tasks(store: TeamStore, *, now_ts: float | None = None) -> SweepReport:
    """
    Run one monitor tick synchronously.

    Never raises: storage failures are logged and reflected in the report.
    """
    if now_ts is None:
        now_ts = time.time()

    report = SweepReport()

    try:
        overdue = store.get_overdue_tasks(now_ts=now_ts)
    except Exception as e:
        logger.exception("get_overdue_tasks failed")
        report.error = f"{type(e).__name__}: {e}"
        return report

    for task in overdue:
        report.checked += 1
        logger.info("Task %s is overdue, attempting reassignment...", task.id)

        try:
            candidate = select_assignee(store, task.domain)
            if candidate is None or candidate == task.assigned_to:
                report.unchanged += 1
                continue

            updated = store.update_task_assignment(task.id, candidate)
            if updated is None:
                logger.warning("Task %s disappeared before reassignment", task.id)
                report.unchanged += 1
                continue

            report.reassigned.append(
                Reassignment(task_id=task.id, from_user_id=task.assigned_to, to_user_id=candidate)
            )
            logger.info("Task %s reassigned from user %s to user %s", task.id, task.assigned_to, candidate)
        except Exception:
            logger.exception("Reassignment failed task_id=%s domain=%s", task.id, task.domain)
            report.failed.append(task.id)

    if report.checked:
        logger.info(
            "Deadline sweep: checked=%d reassigned=%d unchanged=%d failed=%d",
            report.checked,
            len(report.reassigned),
            report.unchanged,
            len(report.failed),
        )
    return report


async def run_deadline_monitor(
        store: TeamStore,
        *,
        interval_seconds: float = 60.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Fixed-cadence loop around sweep_overdue_tasks.

    The first sweep runs immediately. To stop, set stop_event or cancel the coroutine/task.
    """
    period = max(0.01, float(interval_seconds))
    next_tick = time.monotonic()

    logger.info("Deadline monitor started (interval=%.2fs).", period)

    while stop_event is None or not stop_event.is_set():
        sweep_overdue_tasks(store)

        next_tick += period
        now = time.monotonic()
        if now > next_tick:
            missed = int((now - next_tick) // period) + 1
            logger.warning(
                "Deadline sweep overran the next tick by %.2fs; skipping %d tick(s)",
                now - next_tick,
                missed,
            )
            next_tick += missed * period

        delay = next_tick - now
        if stop_event is None:
            await asyncio.sleep(delay)
        else:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=delay)

    logger.info("Deadline monitor stopped.")


@dataclass
class DeadlineMonitorRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            # Loop already closed: the thread has finished.
            logger.debug("Deadline monitor loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


def start_deadline_monitor_in_background(state: AppState) -> DeadlineMonitorRunner | None:
    """
    Start the monitor loop in a background thread with its own event loop.

    The console REPL blocks the main thread on input(), so the monitor cannot share it.
    Returns None when the monitor is disabled in settings.
    """
    settings = state.settings
    if not getattr(settings, "monitor_enabled", True):
        logger.info("Deadline monitor disabled, not starting.")
        return None

    interval = float(getattr(settings, "monitor_interval_seconds", 60.0))

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_deadline_monitor(state.store, interval_seconds=interval, stop_event=stop_event)
            )
        except Exception:
            logger.exception("Deadline monitor crashed.")
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="deadline-monitor", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Deadline monitor thread did not initialize properly.")
        return None

    logger.info("Deadline monitor background thread started.")
    return DeadlineMonitorRunner(thread=t, loop=loop, stop_event=stop_event)
