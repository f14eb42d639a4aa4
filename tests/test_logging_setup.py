# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from team_tasks.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("team_tasks.tasks.deadline_monitor", logging.DEBUG, True),
        ("team_tasks", logging.INFO, True),
        ("py.warnings", logging.WARNING, True),
        ("py.warnings", logging.INFO, False),
        ("urllib3", logging.WARNING, False),
        ("urllib3", logging.ERROR, True),
        ("team_tasks_other", logging.INFO, False),
    ],
)
def test_console_noise_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown
