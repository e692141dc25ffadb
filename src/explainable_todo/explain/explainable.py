# src/explainable_todo/explain/explainable.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from .events import ActionType, Event, EventLevel
from .log_store import EventLog

logger = logging.getLogger(__name__)

T = TypeVar("T")

StateListener = Callable[[Any], None]


class ExplainableState(Generic[T]):
    """
    Wraps a state value so that every mutation is explained.

    set_state() emits a syntactic "State update" event, commits the new value,
    then emits a semantic event carrying the new snapshot. The semantic event
    becomes the causal parent of the lexical events that follow it.

    Values are expected to be immutable (tuples, frozen dataclasses): the
    snapshot stored in the semantic event is a read-only copy of the committed value.
    """

    def __init__(self, log: EventLog, initial: T, component: str) -> None:
        self._log = log
        self._state = initial
        self._component = component
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> T:
        return self._state

    @property
    def component(self) -> str:
        return self._component

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- raw sub-loggers ----

    def log_lexical(
        self,
        description: str = "Clicked",
        details: Mapping[str, Any] | None = None,
        *,
        coords: tuple[float | None, float | None] | None = None,
        parent_id: str | None = None,
    ) -> Event:
        payload = dict(details or {})
        x, y = coords if coords is not None else (None, None)
        payload["coords"] = {"x": x, "y": y}
        return self._log.log_event(
            description,
            self._component,
            payload,
            ActionType.USER,
            EventLevel.LEXICAL,
            parent_id,
        )

    def log_syntactic(
        self,
        description: str,
        details: Mapping[str, Any] | None = None,
        action_type: ActionType | str = ActionType.USER,
    ) -> Event:
        return self._log.log_event(description, self._component, details, action_type, EventLevel.SYNTACTIC)

    def log_semantic(
        self,
        description: str,
        details: Mapping[str, Any] | None = None,
        action_type: ActionType | str = ActionType.USER,
    ) -> Event:
        return self._log.log_event(description, self._component, details, action_type, EventLevel.SEMANTIC)

    # ---- explained mutation ----

    def set_state(
        self,
        next_state: T | Callable[[T], T],
        semantic_description: str,
        details: Mapping[str, Any] | None = None,
    ) -> Event:
        details = dict(details or {})
        action_type = ActionType.AUTO if details.get("auto") else ActionType.USER

        # Resolve first so a failing transformation leaves no unpaired event.
        resolved = next_state(self._state) if callable(next_state) else next_state

        # The mechanical record always precedes the change itself.
        self.log_syntactic("State update", details, action_type)
        self._state = resolved

        semantic = self.log_semantic(
            semantic_description,
            {"new_state": resolved, **details},
            action_type,
        )

        for listener in list(self._listeners):
            try:
                listener(resolved)
            except Exception:
                logger.exception("State listener failed (%s)", self._component)

        return semantic
