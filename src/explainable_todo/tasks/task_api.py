# src/explainable_todo/tasks/task_api.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


@dataclass(frozen=True, slots=True)
class TaskCounts:
    total: int
    active: int
    completed: int
    archived: int
    pending_auto_archive: int


def short_id(task_id: str) -> str:
    return task_id[:SHORT_ID_LEN]


def find_task(store: TaskStore, ref: str | None) -> Task | None:
    """
    Resolve a user-typed reference: exact id first, then a unique id prefix.
    Ambiguous or unknown references resolve to None.
    """
    ref = (ref or "").strip().lower()
    if not ref:
        return None

    exact = store.get(ref)
    if exact is not None:
        return exact

    matches = [t for t in store.tasks if t.id.lower().startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        logger.debug("Ambiguous task reference %r (%d matches)", ref, len(matches))
    return None


def task_counts(store: TaskStore) -> TaskCounts:
    tasks = store.tasks
    return TaskCounts(
        total=len(tasks),
        active=sum(1 for t in tasks if not t.archived),
        completed=sum(1 for t in tasks if t.completed and not t.archived),
        archived=store.archived_count,
        pending_auto_archive=len(store.pending_auto_archive_ids()),
    )
