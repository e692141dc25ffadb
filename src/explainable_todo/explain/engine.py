# src/explainable_todo/explain/engine.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from ..core.ports import EventSink, InteractionSource
from .events import ActionType, Event, EventLevel, LogLevel
from .interactions import AmbientInteractionLogger
from .log_store import EventLog
from .projector import EventNode, LogViewProjector, ViewFilters

logger = logging.getLogger(__name__)


class ExplanationEngine:
    """
    The explainability engine as seen by the rest of the app.

    Owns one EventLog (and therefore one causal-parent slot), the presentation
    filters, the cached log view and the ambient interaction logger. Several
    engines can coexist (e.g. one per test) without sharing any state.
    """

    def __init__(
        self,
        *,
        log: EventLog | None = None,
        levels_enabled: Mapping[EventLevel, bool] | None = None,
        clock: Callable[[], float] = time.time,
        max_events: int | None = None,
        sinks: tuple[EventSink, ...] | list[EventSink] = (),
    ) -> None:
        self.log = log if log is not None else EventLog(clock=clock, max_events=max_events, sinks=sinks)
        levels = {level: True for level in EventLevel}
        if levels_enabled is not None:
            levels.update({EventLevel.parse(k): bool(v) for k, v in levels_enabled.items()})
        self.filters = ViewFilters(levels_enabled=levels)
        self._projector = LogViewProjector(self.log, self.filters)
        self._ambient: AmbientInteractionLogger | None = None
        self._view_listeners: list[Callable[[], None]] = []
        self.log.subscribe(lambda _event: self._notify_view())

    # ---- logging ----

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
        return self.log.log_event(
            description,
            component,
            details,
            action_type,
            level,
            parent_id,
            log_level=log_level,
        )

    @property
    def events(self) -> tuple[Event, ...]:
        return self.log.events

    @property
    def current_parent(self) -> str | None:
        return self.log.current_parent

    # ---- presentation state ----

    @property
    def levels_enabled(self) -> dict[EventLevel, bool]:
        return dict(self.filters.levels_enabled)

    @property
    def focus_task_id(self) -> str | None:
        return self.filters.focus_task_id

    def toggle_level(self, level: EventLevel | str) -> bool:
        enabled = self.filters.toggle_level(level)
        self._notify_view()
        return enabled

    def set_level(self, level: EventLevel | str, enabled: bool) -> None:
        before = self.filters.version
        self.filters.set_level(level, enabled)
        if self.filters.version != before:
            self._notify_view()

    def set_levels_enabled(self, levels: Mapping[EventLevel | str, bool]) -> None:
        for level, enabled in levels.items():
            self.set_level(level, enabled)

    def set_focus_task_id(self, task_id: str | None) -> None:
        before = self.filters.version
        self.filters.set_focus_task_id(task_id)
        if self.filters.version != before:
            self._notify_view()

    # ---- derived view ----

    def view(self) -> list[EventNode]:
        return self._projector.view()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Listener is called (without arguments) whenever view() may have changed."""
        self._view_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._view_listeners:
                self._view_listeners.remove(listener)

        return _unsubscribe

    def _notify_view(self) -> None:
        for listener in list(self._view_listeners):
            try:
                listener()
            except Exception:
                logger.exception("View listener failed")

    # ---- ambient capture lifecycle ----

    def attach_interactions(self, source: InteractionSource) -> AmbientInteractionLogger:
        """Start ambient lexical capture on `source` (once per engine)."""
        if self._ambient is not None:
            return self._ambient
        self._ambient = AmbientInteractionLogger(self, source)
        self._ambient.attach()
        return self._ambient

    def close(self) -> None:
        if self._ambient is not None:
            self._ambient.detach()
            self._ambient = None
