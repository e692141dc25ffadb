# src/explainable_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- builds the explanation engine (log, filters, optional logging sink),
- wires the task store to a timer backend,
- starts ambient interaction capture on the in-process interaction bus.
"""

from __future__ import annotations

import contextlib
import logging

from ..config import get_settings
from ..core.ports import TimerScheduler
from ..core.state import AppState
from ..explain.engine import ExplanationEngine
from ..explain.interactions import InteractionBus
from ..explain.sinks import LoggingEventSink
from ..tasks.task_scheduler import AsyncioTimerScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, timers: TimerScheduler | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and the timer backend injectable makes the app easier to
    test. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    sinks = [LoggingEventSink()] if getattr(settings, "echo_events", False) else []
    engine = ExplanationEngine(
        levels_enabled=getattr(settings, "levels_enabled", None),
        max_events=getattr(settings, "max_log_events", 0) or None,
        sinks=sinks,
    )

    task_store = TaskStore(
        engine,
        timers or AsyncioTimerScheduler(),
        component=getattr(settings, "component_label", "TodoApp"),
        auto_archive_delay=getattr(settings, "auto_archive_delay_seconds", 10.0),
    )

    interactions = InteractionBus()
    engine.attach_interactions(interactions)

    return AppState(
        settings=settings,
        engine=engine,
        task_store=task_store,
        interactions=interactions,
    )


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    with contextlib.suppress(Exception):
        state.task_store.close()
    with contextlib.suppress(Exception):
        state.engine.close()
    logger.debug("State shut down (events logged: %d)", len(state.engine.log))
