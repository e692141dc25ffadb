# src/explainable_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the timer backend, the input surface and event sinks swappable
and makes testing easier (see tests/fakes.py).
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..explain.events import Event


class TimerHandle(Protocol):
    """A pending one-shot callback that can be cancelled before it fires."""

    def cancel(self) -> None: ...


class TimerScheduler(Protocol):
    """
    One-shot deferred callbacks.

    Callbacks must run on the same thread/loop as every other state transition,
    so a timer never interleaves with a transition in progress.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


InteractionListener = Callable[[Any], None]


class InteractionSource(Protocol):
    """
    Input surface that emits raw interactions ("click", "keydown").

    The console connector uses an in-process InteractionBus; a GUI would adapt
    its native event system to this port.
    """

    def add_listener(self, kind: str, listener: InteractionListener) -> None: ...
    def remove_listener(self, kind: str, listener: InteractionListener) -> None: ...


class EventSink(Protocol):
    """Observer receiving every appended explain event (e.g. Python logging)."""

    def emit(self, event: Event) -> None: ...
