# src/explainable_todo/tasks/task_store.py

from __future__ import annotations

import functools
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import replace

from ..core.ports import TimerScheduler
from ..explain.engine import ExplanationEngine
from ..explain.events import ActionType, Event, EventLevel
from ..explain.explainable import ExplainableState
from .similarity import is_near_duplicate
from .task_models import MoveDirection, Task, TaskList
from .task_scheduler import AutoArchiveTimers

logger = logging.getLogger(__name__)

AUTO_ARCHIVE_DELAY_SECONDS = 10.0


def _new_task_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """
    In-memory to-do list whose every transition is explained.

    All list mutations go through ExplainableState.set_state(), so each one
    produces a syntactic "State update" event followed by a semantic event.

    Preconditions (unknown id, task not in the expected state) are benign:
    they arise naturally when a timer races a user action, so the transition
    is skipped silently (no event, no exception).

    Timers:
    - completing a task arms a one-shot auto-archive after `auto_archive_delay`;
    - every transition ends with AutoArchiveTimers.reconcile(), which cancels
      the timers the new list no longer warrants (un-completed, archived,
      deleted, restored, emptied).
    """

    def __init__(
        self,
        engine: ExplanationEngine,
        timers: TimerScheduler,
        *,
        component: str = "TodoApp",
        auto_archive_delay: float = AUTO_ARCHIVE_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = _new_task_id,
    ) -> None:
        self._engine = engine
        self._component = component
        self._state: ExplainableState[TaskList] = ExplainableState(engine.log, (), component)
        self._timers = AutoArchiveTimers(timers)
        self._delay = max(0.0, float(auto_archive_delay))
        self._clock = clock
        self._id_factory = id_factory
        logger.info("TaskStore ready component=%s auto_archive_delay=%.1fs", component, self._delay)

    def close(self) -> None:
        """Cancel every pending auto-archive (shutdown)."""
        n = self._timers.cancel_all()
        if n:
            logger.info("TaskStore closed, cancelled %d pending auto-archive timer(s)", n)

    # ---- read surface ----

    @property
    def tasks(self) -> TaskList:
        return self._state.state

    @property
    def explainable(self) -> ExplainableState[TaskList]:
        return self._state

    @property
    def auto_archive_delay(self) -> float:
        return self._delay

    def get(self, task_id: str) -> Task | None:
        for t in self._state.state:
            if t.id == task_id:
                return t
        return None

    def active_tasks(self) -> list[Task]:
        return [t for t in self._state.state if not t.archived]

    def archived_tasks(self) -> list[Task]:
        return [t for t in self._state.state if t.archived]

    @property
    def archived_count(self) -> int:
        return sum(1 for t in self._state.state if t.archived)

    def pending_auto_archive_ids(self) -> set[str]:
        return self._timers.pending_ids()

    def subscribe(self, listener: Callable[[TaskList], None]) -> Callable[[], None]:
        return self._state.subscribe(listener)

    # ---- helpers ----

    def _reconcile(self, *, force: tuple[str, ...] = ()) -> None:
        cancelled = self._timers.reconcile(self._state.state, force=force)
        if cancelled:
            logger.debug("Reconciled auto-archive timers, cancelled=%s", cancelled)

    @staticmethod
    def _patch(task_id: str, **changes) -> Callable[[TaskList], TaskList]:
        def _apply(prev: TaskList) -> TaskList:
            return tuple(replace(t, **changes) if t.id == task_id else t for t in prev)

        return _apply

    def _skip(self, op: str, task_id: str, reason: str = "not found") -> None:
        logger.debug("%s skipped task_id=%s (%s)", op, task_id, reason)

    # ---- transitions ----

    def add_task(self, text: str) -> str | None:
        """
        Add a task, or merge into a near-duplicate (active or archived).

        Returns the id of the created or matched task; None for blank input.
        """
        if text is not None and not isinstance(text, str):
            raise TypeError(f"task text must be a string, got {type(text).__name__}")
        trimmed = (text or "").strip()
        if not trimmed:
            return None

        match = next((t for t in self._state.state if is_near_duplicate(t.text, trimmed)), None)
        if match is not None:
            # An observation, not a state change: no syntactic counterpart.
            self._engine.log_event(
                "Add task (duplicate detected)",
                self._component,
                {"text": trimmed, "matched_id": match.id},
                ActionType.USER,
                EventLevel.SEMANTIC,
            )

            if trimmed != match.text:
                self._state.set_state(
                    self._patch(match.id, text=trimmed),
                    "Updated existing task name",
                    {"id": match.id, "previous_text": match.text, "new_text": trimmed, "auto": True},
                )

            if match.archived:
                self._state.set_state(
                    self._patch(match.id, archived=False),
                    "Restored implicitly via duplicate match",
                    {"id": match.id, "auto": True},
                )

            self._reconcile()
            logger.info("Add merged into existing task_id=%s", match.id)
            return match.id

        task = Task(id=self._id_factory(), text=trimmed)
        self._state.set_state(lambda prev: (task, *prev), f"Added task: {trimmed}", {"task": task})
        self._reconcile()
        logger.info("Task added task_id=%s", task.id)
        return task.id

    def toggle_complete(self, task_id: str) -> Event | None:
        task = self.get(task_id)
        if task is None:
            self._skip("toggle_complete", task_id)
            return None

        completed = not task.completed
        event = self._state.set_state(
            self._patch(task_id, completed=completed),
            "Marked task complete" if completed else "Marked task incomplete",
            {"id": task_id},
        )

        if completed and not task.archived:
            self._timers.schedule(
                task_id,
                self._delay,
                functools.partial(self._fire_auto_archive, task_id),
                now=self._clock(),
            )
        self._reconcile()
        return event

    def _fire_auto_archive(self, task_id: str) -> None:
        entry = self._timers.pop(task_id)
        if entry is None:
            self._skip("auto-archive", task_id, "timer no longer pending")
            return
        elapsed_ms = int(round((self._clock() - entry.scheduled_at) * 1000))
        self.archive_task(task_id, auto=True, elapsed_ms=elapsed_ms)

    def archive_task(self, task_id: str, *, auto: bool = False, elapsed_ms: int | None = None) -> Event | None:
        task = self.get(task_id)
        if task is None:
            self._skip("archive", task_id)
            self._reconcile()
            return None
        if task.archived:
            self._skip("archive", task_id, "already archived")
            return None

        details: dict[str, object] = {"id": task_id, "auto": bool(auto)}
        if auto:
            details["elapsed_ms"] = elapsed_ms
            description = f"Auto-archived task after {self._delay:g}s"
        else:
            description = "Archived task"

        event = self._state.set_state(self._patch(task_id, archived=True), description, details)
        self._reconcile(force=() if auto else (task_id,))
        return event

    def restore_task(self, task_id: str) -> Event | None:
        task = self.get(task_id)
        if task is None or not task.archived:
            self._skip("restore", task_id, "not found" if task is None else "not archived")
            return None

        event = self._state.set_state(self._patch(task_id, archived=False), "Restored task", {"id": task_id})
        self._reconcile(force=(task_id,))
        return event

    def delete_task(self, task_id: str) -> Event | None:
        if self.get(task_id) is None:
            self._skip("delete", task_id)
            self._reconcile(force=(task_id,))
            return None

        event = self._state.set_state(
            lambda prev: tuple(t for t in prev if t.id != task_id),
            "Deleted permanently",
            {"id": task_id},
        )
        self._reconcile(force=(task_id,))
        return event

    def empty_archive(self) -> int:
        archived_ids = tuple(t.id for t in self._state.state if t.archived)
        if not archived_ids:
            logger.debug("empty_archive skipped (archive is empty)")
            return 0

        self._state.set_state(
            lambda prev: tuple(t for t in prev if not t.archived),
            "Emptied archive",
            {"count": len(archived_ids), "ids": list(archived_ids)},
        )
        self._reconcile(force=archived_ids)
        logger.info("Archive emptied count=%d", len(archived_ids))
        return len(archived_ids)

    def move_task(self, task_id: str, direction: MoveDirection | str) -> Event | None:
        direction = MoveDirection.parse(direction)
        tasks = list(self._state.state)
        index = next((i for i, t in enumerate(tasks) if t.id == task_id), -1)
        if index < 0:
            self._skip("move", task_id)
            return None

        if direction == MoveDirection.UP:
            new_index = max(0, index - 1)
        else:
            new_index = min(len(tasks) - 1, index + 1)
        if new_index == index:
            return None

        item = tasks.pop(index)
        tasks.insert(new_index, item)
        event = self._state.set_state(
            tuple(tasks),
            f"Reordered task {direction.value}",
            {"id": task_id, "from": index, "to": new_index, "direction": direction.value},
        )
        self._reconcile()
        return event
