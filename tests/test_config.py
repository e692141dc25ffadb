# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from explainable_todo.config import Settings, parse_levels
from explainable_todo.explain.events import EventLevel


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "XTODO_AUTO_ARCHIVE_DELAY",
        "XTODO_LEVELS",
        "XTODO_MAX_LOG_EVENTS",
        "XTODO_COMPONENT_LABEL",
        "XTODO_DATA_DIR",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.auto_archive_delay_seconds == 10.0
    assert s.component_label == "TodoApp"
    assert s.max_log_events == 0
    assert s.levels_enabled == {
        EventLevel.LEXICAL: False,
        EventLevel.SYNTACTIC: True,
        EventLevel.SEMANTIC: True,
    }
    assert s.data_dir == Path(".local/explainable_todo")


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XTODO_AUTO_ARCHIVE_DELAY", "2.5")
    monkeypatch.setenv("XTODO_LEVELS", "lexical, semantic")
    monkeypatch.setenv("XTODO_MAX_LOG_EVENTS", "-3")
    monkeypatch.setenv("XTODO_ECHO_EVENTS", "off")
    monkeypatch.setenv("XTODO_COMPONENT_LABEL", "Board")

    s = Settings.from_env()
    assert s.auto_archive_delay_seconds == 2.5
    assert s.levels_enabled[EventLevel.LEXICAL] is True
    assert s.levels_enabled[EventLevel.SYNTACTIC] is False
    assert s.max_log_events == 0
    assert s.echo_events is False
    assert s.component_label == "Board"


def test_bad_numbers_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XTODO_AUTO_ARCHIVE_DELAY", "soon")
    monkeypatch.setenv("XTODO_MAX_LOG_EVENTS", "many")
    s = Settings.from_env()
    assert s.auto_archive_delay_seconds == 10.0
    assert s.max_log_events == 0


def test_parse_levels_ignores_unknown_names() -> None:
    assert parse_levels(["SEMANTIC", "pragmatic"]) == {
        EventLevel.LEXICAL: False,
        EventLevel.SYNTACTIC: False,
        EventLevel.SEMANTIC: True,
    }
