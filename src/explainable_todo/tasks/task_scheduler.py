# src/explainable_todo/tasks/task_scheduler.py

from __future__ import annotations

"""
Auto-archive timers.

- AutoArchiveTimers: keyed table task id -> pending one-shot timer. At most one
  entry per task. TaskStore calls reconcile() at the end of every transition,
  which cancels every entry the new task list no longer warrants.
- AsyncioTimerScheduler: TimerScheduler port on top of the running asyncio loop,
  so timer callbacks run on the same thread as every other transition.

Scheduling and cancelling are bookkeeping only: nothing here writes explain
events. Only the archive a timer triggers is explained (by TaskStore).
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..core.ports import TimerHandle, TimerScheduler
from .task_models import Task

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PendingArchive:
    handle: TimerHandle
    scheduled_at: float


class AutoArchiveTimers:
    def __init__(self, scheduler: TimerScheduler) -> None:
        self._scheduler = scheduler
        self._pending: dict[str, PendingArchive] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._pending

    def pending_ids(self) -> set[str]:
        return set(self._pending)

    def get(self, task_id: str) -> PendingArchive | None:
        return self._pending.get(task_id)

    def schedule(self, task_id: str, delay: float, callback: Callable[[], None], *, now: float) -> None:
        """Arm a one-shot timer for task_id, replacing any pending one."""
        self.cancel(task_id)
        handle = self._scheduler.call_later(max(0.0, float(delay)), callback)
        self._pending[task_id] = PendingArchive(handle=handle, scheduled_at=now)
        logger.debug("Auto-archive scheduled task_id=%s delay=%.1fs", task_id, delay)

    def pop(self, task_id: str) -> PendingArchive | None:
        """Remove an entry without cancelling it (used by the firing callback itself)."""
        return self._pending.pop(task_id, None)

    def cancel(self, task_id: str) -> bool:
        entry = self._pending.pop(task_id, None)
        if entry is None:
            return False
        entry.handle.cancel()
        logger.debug("Auto-archive cancelled task_id=%s", task_id)
        return True

    def cancel_all(self) -> int:
        n = 0
        for task_id in list(self._pending):
            if self.cancel(task_id):
                n += 1
        return n

    def reconcile(self, tasks: Iterable[Task], *, force: Iterable[str] = ()) -> list[str]:
        """
        Cancel every pending timer whose task is gone, archived, not completed,
        or explicitly listed in `force`. Returns the cancelled ids.
        """
        if not self._pending:
            return []

        by_id = {t.id: t for t in tasks}
        forced = set(force)
        cancelled: list[str] = []

        for task_id in list(self._pending):
            task = by_id.get(task_id)
            stale = (
                task_id in forced
                or task is None
                or task.archived
                or not task.completed
            )
            if stale and self.cancel(task_id):
                cancelled.append(task_id)

        return cancelled


class AsyncioTimerScheduler:
    """TimerScheduler backed by loop.call_later (the loop is looked up lazily)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, self._guard, callback)

    @staticmethod
    def _guard(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Timer callback failed")
