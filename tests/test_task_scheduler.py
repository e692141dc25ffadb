# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio

import pytest

from explainable_todo.explain.engine import ExplanationEngine
from explainable_todo.explain.events import ActionType, EventLevel
from explainable_todo.tasks.task_models import Task
from explainable_todo.tasks.task_scheduler import AsyncioTimerScheduler, AutoArchiveTimers
from explainable_todo.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeTimerScheduler


def _auto_archive_events(engine: ExplanationEngine):
    return [
        e
        for e in engine.log.events
        if e.level == EventLevel.SEMANTIC and e.action_type == ActionType.AUTO and "Auto-archived" in e.description
    ]


def test_completed_task_is_auto_archived_after_delay(
    store: TaskStore, engine: ExplanationEngine, timers: FakeTimerScheduler
) -> None:
    task_id = store.add_task("ship release")
    store.toggle_complete(task_id)

    assert store.pending_auto_archive_ids() == {task_id}
    assert len(timers.live) == 1

    timers.advance(9.5)
    assert store.get(task_id).archived is False
    assert _auto_archive_events(engine) == []

    timers.advance(0.5)
    assert store.get(task_id).archived is True
    assert store.pending_auto_archive_ids() == set()

    (event,) = _auto_archive_events(engine)
    assert event.description == "Auto-archived task after 10s"
    assert event.details["auto"] is True
    assert event.details["id"] == task_id
    assert event.details["elapsed_ms"] == 10000

    syntactic = engine.log.events[-2]
    assert syntactic.level == EventLevel.SYNTACTIC
    assert syntactic.action_type == ActionType.AUTO


def test_scheduling_and_cancelling_are_not_logged(
    store: TaskStore, engine: ExplanationEngine, timers: FakeTimerScheduler
) -> None:
    task_id = store.add_task("ship release")
    n = len(engine.log)

    store.toggle_complete(task_id)
    store.toggle_complete(task_id)

    # exactly the two explained toggles, nothing about timers
    descriptions = [e.description for e in engine.log.events[n:]]
    assert descriptions == ["State update", "Marked task complete", "State update", "Marked task incomplete"]


def test_uncompleting_cancels_pending_archive(
    store: TaskStore, engine: ExplanationEngine, timers: FakeTimerScheduler
) -> None:
    task_id = store.add_task("ship release")
    store.toggle_complete(task_id)
    timers.advance(5)
    store.toggle_complete(task_id)

    assert store.pending_auto_archive_ids() == set()
    assert timers.live == []
    assert timers.handles[0].cancelled

    timers.advance(30)
    assert store.get(task_id).archived is False
    assert _auto_archive_events(engine) == []


def test_recompleting_keeps_a_single_timer(store: TaskStore, timers: FakeTimerScheduler) -> None:
    task_id = store.add_task("ship release")
    store.toggle_complete(task_id)
    timers.advance(4)
    store.toggle_complete(task_id)
    store.toggle_complete(task_id)

    assert len(timers.live) == 1
    timers.advance(9)
    assert store.get(task_id).archived is False
    timers.advance(1)
    assert store.get(task_id).archived is True


@pytest.mark.parametrize("action", ["archive", "delete", "empty"])
def test_transitions_leave_no_dangling_timer(
    store: TaskStore, engine: ExplanationEngine, timers: FakeTimerScheduler, action: str
) -> None:
    task_id = store.add_task("ship release")
    store.toggle_complete(task_id)

    if action == "archive":
        store.archive_task(task_id)
    elif action == "delete":
        store.delete_task(task_id)
    else:
        store.archive_task(task_id)
        store.empty_archive()

    assert store.pending_auto_archive_ids() == set()
    assert timers.live == []

    timers.advance(60)
    assert _auto_archive_events(engine) == []


def test_restore_after_auto_archive_does_not_rearm(
    store: TaskStore, engine: ExplanationEngine, timers: FakeTimerScheduler
) -> None:
    task_id = store.add_task("ship release")
    store.toggle_complete(task_id)
    timers.advance(10)

    store.restore_task(task_id)
    task = store.get(task_id)
    assert task.archived is False
    assert task.completed is True
    assert store.pending_auto_archive_ids() == set()

    timers.advance(60)
    assert len(_auto_archive_events(engine)) == 1


def test_empty_archive_only_touches_archived_tasks(
    store: TaskStore, engine: ExplanationEngine, timers: FakeTimerScheduler
) -> None:
    archived = [store.add_task(f"old {i}") for i in range(3)]
    active = [store.add_task(f"new {i}") for i in range(2)]
    for task_id in archived:
        store.archive_task(task_id)
    for task_id in active:
        store.toggle_complete(task_id)

    assert store.empty_archive() == 3

    assert {t.id for t in store.tasks} == set(active)
    assert store.pending_auto_archive_ids() == set(active)
    assert len(timers.live) == 2

    sem = engine.log.events[-1]
    assert sem.description == "Emptied archive"
    assert sem.details["count"] == 3
    assert set(sem.details["ids"]) == set(archived)


def test_close_cancels_everything(store: TaskStore, timers: FakeTimerScheduler) -> None:
    for text in ("a", "b"):
        store.toggle_complete(store.add_task(text))
    assert len(timers.live) == 2

    store.close()
    assert timers.live == []
    assert store.pending_auto_archive_ids() == set()


def test_reconcile_cancels_stale_entries() -> None:
    clock = FakeClock()
    scheduler = FakeTimerScheduler(clock)
    table = AutoArchiveTimers(scheduler)
    for task_id in ("done", "undone", "archived", "gone", "forced"):
        table.schedule(task_id, 10, lambda: None, now=clock())

    tasks = [
        Task(id="done", text="a", completed=True),
        Task(id="undone", text="b", completed=False),
        Task(id="archived", text="c", completed=True, archived=True),
        Task(id="forced", text="d", completed=True),
    ]
    cancelled = table.reconcile(tasks, force=["forced"])

    assert set(cancelled) == {"undone", "archived", "gone", "forced"}
    assert table.pending_ids() == {"done"}
    assert len(scheduler.live) == 1


@pytest.mark.asyncio
async def test_asyncio_timer_backend_auto_archives() -> None:
    engine = ExplanationEngine()
    store = TaskStore(engine, AsyncioTimerScheduler(), auto_archive_delay=0.01)

    task_id = store.add_task("ping")
    store.toggle_complete(task_id)
    await asyncio.sleep(0.1)

    assert store.get(task_id).archived is True
    assert store.pending_auto_archive_ids() == set()
    assert len(_auto_archive_events(engine)) == 1
