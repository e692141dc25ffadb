# src/explainable_todo/cli/render.py

"""Plain-text rendering of the task list and of the projected explain log."""

from __future__ import annotations

import contextlib
from collections.abc import Iterable
from datetime import datetime

from ..explain.events import Event, LogLevel
from ..explain.projector import EventNode
from ..tasks.task_api import short_id
from ..tasks.task_models import Task

LEVEL_LABELS: dict[LogLevel, str] = {
    LogLevel.DEBUG: "Lexical",
    LogLevel.INFO: "Syntactic",
    LogLevel.NOTICE: "Semantic",
}


def format_time(ts: float) -> str:
    with contextlib.suppress(OverflowError, OSError, ValueError):
        return datetime.fromtimestamp(ts).astimezone().strftime("%H:%M:%S")
    return str(ts)


def level_label(event: Event) -> str:
    return LEVEL_LABELS.get(event.log_level, event.log_level.value.capitalize())


def event_hint(event: Event) -> str | None:
    """
    Short extra context for lexical events; None when it would only repeat
    the component or the description.
    """
    details = event.details or {}
    aria = details.get("aria_label")
    snippet = details.get("text_snippet")
    if aria and (event.component == aria or aria in event.description):
        return None
    if snippet and (snippet in event.component or snippet in event.description):
        return None
    if details.get("key"):
        return f"Key {details['key']}"
    return aria or snippet or None


def render_event(event: Event, *, indent: str = "") -> str:
    line = f"{indent}{format_time(event.timestamp)} [{event.component}] {event.description}"
    hint = event_hint(event)
    if hint:
        line += f" ({hint})"
    return f"{line}  <{level_label(event)}|{event.action_type.value}>"


def render_log_view(nodes: Iterable[EventNode], *, limit: int | None = None) -> str:
    nodes = list(nodes)
    if limit is not None and limit > 0:
        nodes = nodes[:limit]
    if not nodes:
        return "Explanation log is empty (or every event is filtered out)."

    lines: list[str] = []
    for node in nodes:
        lines.append(render_event(node.event))
        for child in node.children:
            lines.append(render_event(child, indent="    | "))
    return "\n".join(lines)


def render_task(task: Task, index: int) -> str:
    box = "[x]" if task.completed else "[ ]"
    return f"{index:>2}. {box} {task.text}  ({short_id(task.id)})"


def render_tasks(tasks: Iterable[Task], *, title: str, empty: str) -> str:
    tasks = list(tasks)
    if not tasks:
        return f"{title}: {empty}"
    lines = [f"{title}:"]
    lines.extend(render_task(t, i) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)
