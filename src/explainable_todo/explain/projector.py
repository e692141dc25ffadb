# src/explainable_todo/explain/projector.py

from __future__ import annotations

"""
Log view projection.

Pure derivation from the flat event log to what a presentation layer shows:
1. group: lexical events hang under the semantic event they point to,
   roots newest first, children chronological;
2. level filter: hidden levels are dropped (roots first, then children);
3. task focus: only events referencing a task id survive, plus roots that
   still have a surviving child.

The log itself is never touched; LogViewProjector only caches the result
until the log, the visibility map or the focus id changes.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .events import Event, EventLevel, references_task
from .log_store import EventLog


@dataclass(frozen=True, slots=True)
class EventNode:
    event: Event
    children: tuple[Event, ...] = ()


def group_events(events: Iterable[Event]) -> list[EventNode]:
    """Group a chronological event sequence into roots (newest first) with children."""
    known: dict[str, list[Event]] = {}
    roots: list[Event] = []

    for event in events:
        known[event.id] = []
        if event.parent_id and event.parent_id in known:
            known[event.parent_id].append(event)
        else:
            roots.append(event)

    return [EventNode(event=root, children=tuple(known[root.id])) for root in reversed(roots)]


def filter_by_level(nodes: Iterable[EventNode], levels_enabled: Mapping[EventLevel, bool]) -> list[EventNode]:
    out: list[EventNode] = []
    for node in nodes:
        if not levels_enabled.get(node.event.level, False):
            continue
        children = tuple(c for c in node.children if levels_enabled.get(c.level, False))
        out.append(EventNode(event=node.event, children=children))
    return out


def focus_on_task(nodes: Iterable[EventNode], task_id: str) -> list[EventNode]:
    out: list[EventNode] = []
    for node in nodes:
        children = tuple(c for c in node.children if references_task(c, task_id))
        if children or references_task(node.event, task_id):
            out.append(EventNode(event=node.event, children=children))
    return out


def project(
    events: Iterable[Event],
    levels_enabled: Mapping[EventLevel, bool],
    focus_task_id: str | None = None,
) -> list[EventNode]:
    nodes = filter_by_level(group_events(events), levels_enabled)
    if focus_task_id:
        nodes = focus_on_task(nodes, focus_task_id)
    return nodes


@dataclass(slots=True)
class ViewFilters:
    """Presentation state: level visibility + optional task focus. Never touches the log."""

    levels_enabled: dict[EventLevel, bool] = field(
        default_factory=lambda: {level: True for level in EventLevel}
    )
    focus_task_id: str | None = None
    version: int = 0

    def toggle_level(self, level: EventLevel | str) -> bool:
        lvl = EventLevel.parse(level)
        self.levels_enabled[lvl] = not self.levels_enabled.get(lvl, False)
        self.version += 1
        return self.levels_enabled[lvl]

    def set_level(self, level: EventLevel | str, enabled: bool) -> None:
        lvl = EventLevel.parse(level)
        if self.levels_enabled.get(lvl) == bool(enabled):
            return
        self.levels_enabled[lvl] = bool(enabled)
        self.version += 1

    def set_focus_task_id(self, task_id: str | None) -> None:
        task_id = task_id or None
        if task_id == self.focus_task_id:
            return
        self.focus_task_id = task_id
        self.version += 1


class LogViewProjector:
    """Memoized projection keyed on (log version, filters version)."""

    def __init__(self, log: EventLog, filters: ViewFilters) -> None:
        self._log = log
        self._filters = filters
        self._key: tuple[int, int] | None = None
        self._cached: tuple[EventNode, ...] = ()

    def view(self) -> list[EventNode]:
        key = (self._log.version, self._filters.version)
        if key != self._key:
            self._cached = tuple(
                project(
                    self._log.events,
                    self._filters.levels_enabled,
                    self._filters.focus_task_id,
                )
            )
            self._key = key
        return list(self._cached)
