# src/explainable_todo/explain/events.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any


class EventLevel(StrEnum):
    """
    Granularity tier of an explain event.

    - lexical: raw physical interaction (click, key press)
    - syntactic: mechanical state mutation, independent of why it happened
    - semantic: inferred intent behind a mutation; anchors later lexical events
    """

    LEXICAL = "lexical"
    SYNTACTIC = "syntactic"
    SEMANTIC = "semantic"

    @classmethod
    def parse(cls, raw: str | EventLevel) -> EventLevel:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown event level: {raw!r}") from None


class ActionType(StrEnum):
    USER = "user"
    AUTO = "auto"  # timer or system rule


class LogLevel(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"


DEFAULT_LOG_LEVELS: dict[EventLevel, LogLevel] = {
    EventLevel.LEXICAL: LogLevel.DEBUG,
    EventLevel.SYNTACTIC: LogLevel.INFO,
    EventLevel.SEMANTIC: LogLevel.NOTICE,
}


@dataclass(frozen=True, slots=True)
class Event:
    id: str
    seq: int
    timestamp: float

    component: str
    level: EventLevel
    action_type: ActionType
    description: str

    details: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    parent_id: str | None = None
    log_level: LogLevel = LogLevel.INFO

    @property
    def is_auto(self) -> bool:
        return self.action_type == ActionType.AUTO


def freeze_details(value: Any) -> Any:
    """
    Read-only copy of an event payload: mappings become MappingProxyType,
    lists and tuples become tuples, sets become frozensets. Other objects
    (frozen Tasks, scalars) are kept as they are.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze_details(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_details(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze_details(v) for v in value)
    return value


def _payload_id(payload: Any) -> Any:
    if payload is None:
        return None
    if isinstance(payload, Mapping):
        return payload.get("id")
    return getattr(payload, "id", None)


def references_task(event: Event, task_id: str) -> bool:
    """
    True if the event's details carry `task_id` either directly (details["id"])
    or through a nested task payload (details["task"].id).
    """
    details = event.details
    if not details:
        return False
    if details.get("id") == task_id:
        return True
    return _payload_id(details.get("task")) == task_id
