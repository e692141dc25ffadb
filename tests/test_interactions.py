# tests/test_interactions.py

from __future__ import annotations

from explainable_todo.explain.engine import ExplanationEngine
from explainable_todo.explain.events import ActionType, EventLevel
from explainable_todo.explain.interactions import (
    AmbientInteractionLogger,
    InteractionBus,
    InteractionEvent,
    InteractionKind,
    InteractionTarget,
    summarize_target,
    text_snippet,
)

from .fakes import ExplodingTarget


def _click(target, x=12, y=34) -> InteractionEvent:
    return InteractionEvent(kind=InteractionKind.CLICK, target=target, x=x, y=y)


def _attached(engine: ExplanationEngine) -> InteractionBus:
    bus = InteractionBus()
    engine.attach_interactions(bus)
    return bus


def test_click_with_accessible_label(engine: ExplanationEngine) -> None:
    bus = _attached(engine)
    bus.dispatch(_click(InteractionTarget(tag_name="button", aria_label="Archive", text_content="Archive")))

    (event,) = engine.log.events
    assert event.level == EventLevel.LEXICAL
    assert event.action_type == ActionType.USER
    assert event.description == "Click"
    assert event.component == "Archive"
    assert event.details["coords"] == {"x": 12, "y": 34}
    assert event.details["aria_label"] == "Archive"
    assert event.details["target_summary"] == "button"


def test_click_falls_back_to_snippet_then_structure(engine: ExplanationEngine) -> None:
    bus = _attached(engine)
    bus.dispatch(_click(InteractionTarget(tag_name="span", text_content="  Buy \n  milk ")))
    bus.dispatch(
        _click(InteractionTarget(tag_name="li", role="listitem", element_id="row-1", class_name="task  done extra"))
    )

    with_snippet, bare = engine.log.events
    assert with_snippet.description == "Click Buy milk"
    assert with_snippet.component == "span"
    assert bare.description == "Click"
    assert bare.component == "listitem#row-1.task.done"


def test_labelledby_is_resolved_through_the_bus(engine: ExplanationEngine) -> None:
    bus = _attached(engine)
    bus.register_element(InteractionTarget(element_id="lbl", text_content="  Show archive "))
    bus.dispatch(_click(InteractionTarget(tag_name="button", aria_labelledby="lbl")))

    (event,) = engine.log.events
    assert event.component == "Show archive"
    assert event.description == "Click"


def test_keydown_prefers_active_element(engine: ExplanationEngine) -> None:
    bus = _attached(engine)
    focused = InteractionTarget(tag_name="input", aria_label="Task input")
    bus.dispatch(
        InteractionEvent(
            kind=InteractionKind.KEYDOWN,
            target=InteractionTarget(tag_name="body"),
            active_target=focused,
            key="Enter",
            code="Enter",
            shift=True,
        )
    )

    (event,) = engine.log.events
    assert event.description == "Keydown Enter"
    assert event.component == "Task input"
    assert event.details["key"] == "Enter"
    assert event.details["shift"] is True
    assert event.details["ctrl"] is False


def test_lexical_events_link_to_open_semantic_event(engine: ExplanationEngine) -> None:
    bus = _attached(engine)
    sem = engine.log_event("Added task: a", "TodoApp")
    bus.dispatch(_click(InteractionTarget(tag_name="button")))

    assert engine.log.events[-1].parent_id == sem.id


def test_malformed_targets_degrade_instead_of_raising(engine: ExplanationEngine) -> None:
    bus = _attached(engine)
    bus.dispatch(_click(ExplodingTarget()))
    bus.dispatch(_click(None))
    bus.dispatch(InteractionEvent(kind=InteractionKind.KEYDOWN, target="not an element", key="a"))

    exploding, missing, keydown = engine.log.events
    assert exploding.component == "unknown"
    assert exploding.description == "Click"
    assert exploding.details["aria_label"] is None
    assert missing.component == "unknown"
    assert keydown.description == "Keydown a"


def test_snippet_is_truncated() -> None:
    long_text = "word " * 30
    snippet = text_snippet(InteractionTarget(text_content=long_text))
    assert len(snippet) == 60
    assert snippet.endswith("...")
    assert summarize_target(InteractionTarget()) == "node"


def test_capture_registers_once_and_detaches(engine: ExplanationEngine) -> None:
    bus = InteractionBus()
    ambient = engine.attach_interactions(bus)
    assert engine.attach_interactions(bus) is ambient
    ambient.attach()
    assert bus.listener_count("click") == 1
    assert bus.listener_count("keydown") == 1

    engine.close()
    assert not ambient.attached
    assert bus.listener_count("click") == 0
    bus.dispatch(_click(InteractionTarget(tag_name="button")))
    assert len(engine.log) == 0


def test_logger_is_a_context_manager(engine: ExplanationEngine) -> None:
    bus = InteractionBus()
    with AmbientInteractionLogger(engine, bus):
        bus.dispatch(_click(InteractionTarget(tag_name="button")))
    bus.dispatch(_click(InteractionTarget(tag_name="button")))
    assert len(engine.log) == 1
