# src/explainable_todo/explain/log_store.py

from __future__ import annotations

import logging
import time
import uuid
from collections import deque
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from ..core.ports import EventSink
from .events import DEFAULT_LOG_LEVELS, ActionType, Event, EventLevel, LogLevel, freeze_details

logger = logging.getLogger(__name__)

Listener = Callable[[Event], None]


class EventLog:
    """
    Append-only, insertion-ordered explain log.

    The log owns the "current semantic parent": every semantic event becomes
    the parent of lexical events logged after it, until the next semantic
    event replaces it. Syntactic and semantic events never carry a parent.

    With max_events set the log is a ring buffer: the oldest events are
    evicted first and ordering of the retained ones is unchanged.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        max_events: int | None = None,
        sinks: tuple[EventSink, ...] | list[EventSink] = (),
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        maxlen = max_events if max_events and max_events > 0 else None
        self._events: deque[Event] = deque(maxlen=maxlen)
        self._index: dict[str, Event] = {}
        self._clock = clock
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._seq = 0
        self._last_ts = 0.0
        self._current_parent: str | None = None
        self._sinks: list[EventSink] = list(sinks)
        self._listeners: list[Listener] = []

    # ---- read surface ----

    @property
    def current_parent(self) -> str | None:
        return self._current_parent

    @property
    def version(self) -> int:
        """Grows with every append (eviction never lowers it)."""
        return self._seq

    @property
    def events(self) -> tuple[Event, ...]:
        """Chronological (insertion) order."""
        return tuple(self._events)

    def newest_first(self) -> list[Event]:
        return list(reversed(self._events))

    def get(self, event_id: str) -> Event | None:
        return self._index.get(event_id)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(tuple(self._events))

    # ---- observers ----

    def add_sink(self, sink: EventSink) -> None:
        self._sinks.append(sink)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- append ----

    def _next_timestamp(self) -> float:
        now = float(self._clock())
        # Clocks can step backwards (NTP); keep timestamps non-decreasing.
        if now < self._last_ts:
            now = self._last_ts
        self._last_ts = now
        return now

    def log_event(
        self,
        description: str,
        component: str,
        details: Mapping[str, Any] | None = None,
        action_type: ActionType | str = ActionType.USER,
        level: EventLevel | str = EventLevel.SEMANTIC,
        parent_id: str | None = None,
        *,
        log_level: LogLevel | str | None = None,
    ) -> Event:
        """
        Build an event, append it and return it.

        parent_id is an explicit override for lexical events; without it the
        current semantic parent is used. It is ignored for other levels.
        """
        level = EventLevel.parse(level)
        action_type = ActionType(action_type)

        parent = (parent_id or self._current_parent) if level == EventLevel.LEXICAL else None
        resolved_log_level = LogLevel(log_level) if log_level else DEFAULT_LOG_LEVELS[level]

        self._seq += 1
        event = Event(
            id=self._id_factory(),
            seq=self._seq,
            timestamp=self._next_timestamp(),
            component=str(component),
            level=level,
            action_type=action_type,
            description=str(description),
            details=freeze_details(details or {}),
            parent_id=parent,
            log_level=resolved_log_level,
        )

        if level == EventLevel.SEMANTIC:
            self._current_parent = event.id

        if self._events.maxlen is not None and len(self._events) == self._events.maxlen:
            evicted = self._events[0]
            self._index.pop(evicted.id, None)
        self._events.append(event)
        self._index[event.id] = event

        self._deliver(event)
        return event

    def _deliver(self, event: Event) -> None:
        for sink in list(self._sinks):
            try:
                sink.emit(event)
            except Exception:
                logger.exception("Event sink %r failed for event %s", sink, event.id)

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Event log listener failed for event %s", event.id)
