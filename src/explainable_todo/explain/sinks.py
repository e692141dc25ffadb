# src/explainable_todo/explain/sinks.py

from __future__ import annotations

import logging

from ..logging_setup import EVENTS_LOGGER_NAME, NOTICE
from .events import Event, LogLevel

_PY_LEVELS: dict[LogLevel, int] = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: NOTICE,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LoggingEventSink:
    """Forward explain events to Python logging, at the level matching event.log_level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(EVENTS_LOGGER_NAME)

    def emit(self, event: Event) -> None:
        self._logger.log(
            _PY_LEVELS.get(event.log_level, logging.INFO),
            "%s/%s [%s] %s id=%s parent=%s",
            event.level.value,
            event.action_type.value,
            event.component,
            event.description,
            event.id,
            event.parent_id,
        )
