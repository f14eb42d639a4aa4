# tests/test_deadline_monitor.py

from __future__ import annotations

import asyncio
import logging
import time

import pytest

from team_tasks.core.models import TaskStatus
from team_tasks.tasks.deadline_monitor import (
    run_deadline_monitor,
    start_deadline_monitor_in_background,
    sweep_overdue_tasks,
)

from .fakes import FlakyStore, SlowStore, add_task, add_user


def _past() -> float:
    return time.time() - 3600


def test_sole_domain_member_keeps_overdue_task(store) -> None:
    c = add_user(store, "C", domain="Research")
    task = add_task(store, "Research", assigned_to=c.id, deadline_at=_past())

    report = sweep_overdue_tasks(store)

    assert report.checked == 1
    assert report.unchanged == 1
    assert report.reassigned == []
    assert store.get_task(task.id).assigned_to == c.id


def test_overdue_task_moves_to_less_loaded_member(store) -> None:
    a = add_user(store, "A", domain="Design")
    b = add_user(store, "B", domain="Design")
    add_task(store, "Design", assigned_to=a.id)
    add_task(store, "Design", assigned_to=b.id)
    deadline = _past()
    overdue = add_task(store, "Design", assigned_to=b.id, deadline_at=deadline)

    report = sweep_overdue_tasks(store)

    after = store.get_task(overdue.id)
    assert after.assigned_to == a.id
    assert after.status == TaskStatus.PENDING
    assert after.deadline_at == pytest.approx(deadline)
    assert [(r.task_id, r.from_user_id, r.to_user_id) for r in report.reassigned] == [
        (overdue.id, b.id, a.id)
    ]


def test_second_tick_is_a_no_op(store) -> None:
    a = add_user(store, "A", domain="Design")
    b = add_user(store, "B", domain="Design")
    add_task(store, "Design", assigned_to=b.id)
    overdue = add_task(store, "Design", assigned_to=b.id, deadline_at=_past())

    first = sweep_overdue_tasks(store)
    second = sweep_overdue_tasks(store)

    assert len(first.reassigned) == 1
    # A=1, B=1 after the move: the tie resolves to A, who already holds it.
    assert second.reassigned == []
    assert second.unchanged == 1
    assert store.get_task(overdue.id).assigned_to == a.id


def test_overdue_task_alternates_when_each_move_flips_the_load(store) -> None:
    a = add_user(store, "A", domain="Design")
    b = add_user(store, "B", domain="Design")
    task = add_task(store, "Design", assigned_to=b.id, deadline_at=_past())

    owners = []
    for _ in range(3):
        sweep_overdue_tasks(store)
        owners.append(store.get_task(task.id).assigned_to)

    # Load counts every domain task, so the holder is always the busier user.
    assert owners == [a.id, b.id, a.id]


def test_not_due_and_completed_tasks_are_left_alone(store) -> None:
    a = add_user(store, "A", domain="Design")
    b = add_user(store, "B", domain="Design")
    add_task(store, "Design", assigned_to=b.id)
    future = add_task(store, "Design", assigned_to=b.id)
    done = add_task(store, "Design", assigned_to=b.id, deadline_at=_past(), status=TaskStatus.COMPLETED)

    report = sweep_overdue_tasks(store)

    assert report.checked == 0
    assert store.get_task(future.id).assigned_to == b.id
    assert store.get_task(done.id).assigned_to == b.id
    assert a.id not in {t.assigned_to for t in store.list_tasks()}


def test_unassigned_overdue_task_gets_an_owner_once_someone_joins(store) -> None:
    task = add_task(store, "Design", assigned_to=None, deadline_at=_past())

    assert sweep_overdue_tasks(store).unchanged == 1
    assert store.get_task(task.id).assigned_to is None

    a = add_user(store, "A", domain="Design")
    sweep_overdue_tasks(store)
    assert store.get_task(task.id).assigned_to == a.id


def test_one_failing_task_does_not_stop_the_sweep(store) -> None:
    add_user(store, "A", domain="Design")
    b = add_user(store, "B", domain="Design")
    add_user(store, "C", domain="Research")
    d = add_user(store, "D", domain="Research")
    for _ in range(2):
        add_task(store, "Design", assigned_to=b.id)
        add_task(store, "Research", assigned_to=d.id)
    broken = add_task(store, "Design", assigned_to=b.id, deadline_at=_past())
    healthy = add_task(store, "Research", assigned_to=d.id, deadline_at=_past())

    flaky = FlakyStore(store, fail_assignment_for={broken.id})
    report = sweep_overdue_tasks(flaky, now_ts=time.time())

    assert report.checked == 2
    assert report.failed == [broken.id]
    assert [r.task_id for r in report.reassigned] == [healthy.id]
    assert store.get_task(broken.id).assigned_to == b.id
    assert store.get_task(healthy.id).assigned_to != d.id


def test_failing_overdue_query_is_reported_not_raised(store) -> None:
    flaky = FlakyStore(store, fail_overdue_query=True)

    report = sweep_overdue_tasks(flaky)

    assert report.checked == 0
    assert report.error is not None
    assert "database is down" in report.error


def test_task_vanishing_mid_sweep_is_not_a_failure(store) -> None:
    add_user(store, "A", domain="Design")
    b = add_user(store, "B", domain="Design")
    add_task(store, "Design", assigned_to=b.id)
    task = add_task(store, "Design", assigned_to=b.id, deadline_at=_past())

    flaky = FlakyStore(store, vanish_on_assignment={task.id})
    report = sweep_overdue_tasks(flaky)

    assert report.failed == []
    assert report.unchanged == 1
    assert report.reassigned == []


def test_deadline_equal_to_now_is_not_overdue(store) -> None:
    add_user(store, "A", domain="Design")
    now = time.time()
    add_task(store, "Design", assigned_to=None, deadline_at=now)

    assert sweep_overdue_tasks(store, now_ts=now).checked == 0


@pytest.mark.asyncio
async def test_monitor_loop_sweeps_until_stopped(store) -> None:
    a = add_user(store, "A", domain="Design")
    b = add_user(store, "B", domain="Design")
    add_task(store, "Design", assigned_to=b.id)
    task = add_task(store, "Design", assigned_to=b.id, deadline_at=_past())

    stop = asyncio.Event()
    runner = asyncio.create_task(run_deadline_monitor(store, interval_seconds=0.01, stop_event=stop))

    await asyncio.sleep(0.05)
    stop.set()
    await asyncio.wait_for(runner, timeout=2.0)

    assert store.get_task(task.id).assigned_to == a.id


@pytest.mark.asyncio
async def test_monitor_loop_can_be_cancelled(store) -> None:
    runner = asyncio.create_task(run_deadline_monitor(store, interval_seconds=0.01))

    await asyncio.sleep(0.03)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner


@pytest.mark.asyncio
async def test_monitor_loop_survives_storage_outage(store) -> None:
    flaky = FlakyStore(store, fail_overdue_query=True)
    stop = asyncio.Event()
    runner = asyncio.create_task(run_deadline_monitor(flaky, interval_seconds=0.01, stop_event=stop))

    await asyncio.sleep(0.03)
    assert not runner.done()

    stop.set()
    await asyncio.wait_for(runner, timeout=2.0)


@pytest.mark.asyncio
async def test_overrunning_sweeps_skip_missed_ticks(store, caplog) -> None:
    slow = SlowStore(store, delay=0.03)
    stop = asyncio.Event()

    with caplog.at_level(logging.WARNING, logger="team_tasks.tasks.deadline_monitor"):
        runner = asyncio.create_task(run_deadline_monitor(slow, interval_seconds=0.01, stop_event=stop))
        await asyncio.sleep(0.1)
        stop.set()
        await asyncio.wait_for(runner, timeout=2.0)

    assert any("skipping" in r.getMessage() for r in caplog.records)
    # Sequential ticks: each sweep blocks for 30ms, so only a handful can fit.
    assert 1 <= slow.sweeps <= 5


def test_background_runner_reassigns_and_stops(state) -> None:
    state.settings.monitor_enabled = True
    state.settings.monitor_interval_seconds = 0.01

    a = add_user(state.store, "A", domain="Design")
    b = add_user(state.store, "B", domain="Design")
    add_task(state.store, "Design", assigned_to=b.id)
    task = add_task(state.store, "Design", assigned_to=b.id, deadline_at=_past())

    runner = start_deadline_monitor_in_background(state)
    assert runner is not None
    try:
        deadline = time.monotonic() + 2.0
        while time.monotonic() < deadline:
            if state.store.get_task(task.id).assigned_to == a.id:
                break
            time.sleep(0.01)
    finally:
        runner.stop()
        runner.join(timeout=2.0)

    assert state.store.get_task(task.id).assigned_to == a.id
    assert not runner.is_alive()


def test_background_runner_disabled(state) -> None:
    state.settings.monitor_enabled = False
    assert start_deadline_monitor_in_background(state) is None
