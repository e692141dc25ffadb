# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from explainable_todo.cli.bootstrap import create_initial_state
from explainable_todo.core.state import AppState
from explainable_todo.explain.engine import ExplanationEngine
from explainable_todo.explain.events import EventLevel
from explainable_todo.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeTimerScheduler


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def timers(clock: FakeClock) -> FakeTimerScheduler:
    return FakeTimerScheduler(clock)


@pytest.fixture()
def engine(clock: FakeClock) -> ExplanationEngine:
    """Engine with every level visible, so views show the whole log."""
    return ExplanationEngine(clock=clock)


@pytest.fixture()
def store(engine: ExplanationEngine, timers: FakeTimerScheduler, clock: FakeClock) -> TaskStore:
    return TaskStore(engine, timers, clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="test",
        log_level="DEBUG",
        data_dir=tmp_path,
        log_to_file=False,
        console_enabled=False,
        component_label="TodoApp",
        max_log_events=0,
        levels_enabled={level: True for level in EventLevel},
        echo_events=False,
        auto_archive_delay_seconds=10.0,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, timers: FakeTimerScheduler) -> AppState:
    """AppState wired like the real app, but with deterministic timers."""
    return create_initial_state(settings=settings, timers=timers)
