# src/explainable_todo/explain/interactions.py

from __future__ import annotations

"""
Ambient interaction logging.

Listens to every raw click and key press on an InteractionSource and records
them as lexical events. The events attach to whatever semantic event is open
in the log at that moment; nothing here decides what the interaction meant.

Label derivation mirrors what an accessibility tree offers:
- accessible label (aria-label, else the text of the aria-labelledby element),
- a short text snippet of the target,
- a structural descriptor: "<component|role|tag>#<id>.<class1>.<class2>".
Every derivation step degrades to None / "unknown" instead of raising.
"""

import logging
import re
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from ..core.ports import InteractionListener, InteractionSource
from .events import ActionType, Event, EventLevel

if TYPE_CHECKING:
    from .engine import ExplanationEngine

logger = logging.getLogger(__name__)

SNIPPET_MAX = 60
_WS_RE = re.compile(r"\s+")

ElementResolver = Callable[[str], Any]


class InteractionKind(StrEnum):
    CLICK = "click"
    KEYDOWN = "keydown"


@dataclass(slots=True)
class InteractionTarget:
    """Minimal description of an interactive element (what a DOM node would expose)."""

    tag_name: str | None = None
    element_id: str | None = None
    class_name: str | None = None
    role: str | None = None
    data_component: str | None = None
    aria_label: str | None = None
    aria_labelledby: str | None = None
    text_content: str | None = None


@dataclass(frozen=True, slots=True)
class InteractionEvent:
    kind: InteractionKind
    target: Any = None

    # pointer
    x: float | None = None
    y: float | None = None

    # keyboard
    key: str | None = None
    code: str | None = None
    ctrl: bool = False
    meta: bool = False
    alt: bool = False
    shift: bool = False
    active_target: Any = None


# ---- label derivation ----


def summarize_target(target: Any) -> str:
    if target is None or isinstance(target, (str, bytes, int, float, bool)):
        return "unknown"
    try:
        el_id = getattr(target, "element_id", None)
        id_part = f"#{el_id}" if el_id else ""

        class_name = getattr(target, "class_name", None)
        class_part = ""
        if isinstance(class_name, str):
            classes = [c for c in class_name.split() if c][:2]
            if classes:
                class_part = "." + ".".join(classes)

        base = (
            getattr(target, "data_component", None)
            or getattr(target, "role", None)
            or getattr(target, "tag_name", None)
            or "node"
        )
        return f"{base}{id_part}{class_part}"
    except Exception:
        logger.debug("summarize_target failed", exc_info=True)
        return "unknown"


def accessible_label(target: Any, resolve_element: ElementResolver | None = None) -> str | None:
    if target is None:
        return None
    try:
        label = getattr(target, "aria_label", None)
        if label:
            return str(label)

        labelled_by = getattr(target, "aria_labelledby", None)
        if labelled_by and resolve_element is not None:
            ref = resolve_element(labelled_by)
            text = getattr(ref, "text_content", None) if ref is not None else None
            if isinstance(text, str) and text.strip():
                return text.strip()
    except Exception:
        logger.debug("accessible_label failed", exc_info=True)
    return None


def text_snippet(target: Any) -> str | None:
    if target is None:
        return None
    try:
        raw = getattr(target, "text_content", None) or ""
        text = _WS_RE.sub(" ", str(raw).strip())
        if not text:
            return None
        return f"{text[: SNIPPET_MAX - 3]}..." if len(text) > SNIPPET_MAX else text
    except Exception:
        logger.debug("text_snippet failed", exc_info=True)
        return None


# ---- in-process source ----


class InteractionBus:
    """
    In-process InteractionSource.

    Connectors call dispatch() for every raw interaction; registered elements
    double as the aria-labelledby lookup table.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[InteractionListener]] = defaultdict(list)
        self._elements: dict[str, InteractionTarget] = {}

    def add_listener(self, kind: str, listener: InteractionListener) -> None:
        self._listeners[str(kind)].append(listener)

    def remove_listener(self, kind: str, listener: InteractionListener) -> None:
        listeners = self._listeners.get(str(kind), [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, kind: str) -> int:
        return len(self._listeners.get(str(kind), []))

    def register_element(self, target: InteractionTarget) -> InteractionTarget:
        if target.element_id:
            self._elements[target.element_id] = target
        return target

    def get_element_by_id(self, element_id: str) -> InteractionTarget | None:
        return self._elements.get(element_id)

    def dispatch(self, event: InteractionEvent) -> None:
        for listener in list(self._listeners.get(event.kind.value, [])):
            listener(event)


# ---- the logger ----


class AmbientInteractionLogger:
    """Registers click/keydown capture on a source once and logs lexical events."""

    def __init__(
        self,
        engine: ExplanationEngine,
        source: InteractionSource,
        *,
        resolve_element: ElementResolver | None = None,
    ) -> None:
        self._engine = engine
        self._source = source
        if resolve_element is None:
            resolve_element = getattr(source, "get_element_by_id", None)
        self._resolve = resolve_element
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return
        self._source.add_listener(InteractionKind.CLICK.value, self._on_click)
        self._source.add_listener(InteractionKind.KEYDOWN.value, self._on_keydown)
        self._attached = True
        logger.debug("Ambient interaction logger attached to %r", self._source)

    def detach(self) -> None:
        if not self._attached:
            return
        self._source.remove_listener(InteractionKind.CLICK.value, self._on_click)
        self._source.remove_listener(InteractionKind.KEYDOWN.value, self._on_keydown)
        self._attached = False
        logger.debug("Ambient interaction logger detached")

    def __enter__(self) -> AmbientInteractionLogger:
        self.attach()
        return self

    def __exit__(self, *exc: object) -> None:
        self.detach()

    def _on_click(self, event: InteractionEvent) -> Event | None:
        try:
            target = getattr(event, "target", None)
            summary = summarize_target(target)
            label = accessible_label(target, self._resolve)
            snippet = text_snippet(target)

            if label:
                description = "Click"
            elif snippet:
                description = f"Click {snippet}"
            else:
                description = "Click"

            details = {
                "coords": {"x": getattr(event, "x", None), "y": getattr(event, "y", None)},
                "target_summary": summary,
                "aria_label": label,
                "text_snippet": snippet,
            }
            return self._engine.log_event(
                description, label or summary, details, ActionType.USER, EventLevel.LEXICAL
            )
        except Exception:
            logger.debug("Click capture failed", exc_info=True)
            return None

    def _on_keydown(self, event: InteractionEvent) -> Event | None:
        try:
            target = getattr(event, "active_target", None) or getattr(event, "target", None)
            summary = summarize_target(target)
            label = accessible_label(target, self._resolve)
            snippet = text_snippet(target)
            key = getattr(event, "key", None)

            details = {
                "key": key,
                "code": getattr(event, "code", None),
                "ctrl": bool(getattr(event, "ctrl", False)),
                "meta": bool(getattr(event, "meta", False)),
                "alt": bool(getattr(event, "alt", False)),
                "shift": bool(getattr(event, "shift", False)),
                "target_summary": summary,
                "aria_label": label,
                "text_snippet": snippet,
            }
            return self._engine.log_event(
                f"Keydown {key}", label or summary, details, ActionType.USER, EventLevel.LEXICAL
            )
        except Exception:
            logger.debug("Keydown capture failed", exc_info=True)
            return None
