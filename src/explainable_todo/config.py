# src/explainable_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is persisted: paths are only used for the debug log file.
- Tests build Settings (or a SimpleNamespace) directly instead of reading env.

Environment variables (all optional):
- XTODO_APP_NAME             display name (default: explainable-todo)
- XTODO_LOG_LEVEL            console log level (default: INFO)
- XTODO_DATA_DIR             local directory for the log file (default: .local/explainable_todo)
- XTODO_LOG_TO_FILE          write a full debug log file (default: true)
- XTODO_CONSOLE_ENABLED      run the console REPL (default: true)
- XTODO_COMPONENT_LABEL      component label of task events (default: TodoApp)
- XTODO_AUTO_ARCHIVE_DELAY   seconds before a completed task is auto-archived (default: 10)
- XTODO_MAX_LOG_EVENTS       ring-buffer size of the event log, 0 = unbounded (default: 0)
- XTODO_LEVELS               event levels visible at startup (default: "syntactic semantic")
- XTODO_ECHO_EVENTS          forward explain events to Python logging (default: true)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .explain.events import EventLevel

ENV_PREFIX = "XTODO"

DEFAULT_LEVELS = ("syntactic", "semantic")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def parse_levels(names: list[str]) -> dict[EventLevel, bool]:
    """Turn a list of level names into a full visibility map (unknown names are ignored)."""
    wanted = {n.strip().lower() for n in names}
    return {level: level.value in wanted for level in EventLevel}


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path
    log_to_file: bool

    # ---- Connectors ----
    console_enabled: bool

    # ---- Explainability ----
    component_label: str
    max_log_events: int
    levels_enabled: dict[EventLevel, bool]
    echo_events: bool

    # ---- Tasks ----
    auto_archive_delay_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "explainable-todo").strip() or "explainable-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/explainable_todo"))
        log_to_file = _env_bool(_k("LOG_TO_FILE"), True)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        component_label = _env(_k("COMPONENT_LABEL"), "TodoApp").strip() or "TodoApp"
        max_log_events = max(0, _env_int(_k("MAX_LOG_EVENTS"), 0))
        levels_enabled = parse_levels(_env_list(_k("LEVELS"), list(DEFAULT_LEVELS)))
        echo_events = _env_bool(_k("ECHO_EVENTS"), True)

        # Negative delays make no sense for a timer.
        auto_archive_delay_seconds = max(0.0, _env_float(_k("AUTO_ARCHIVE_DELAY"), 10.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            log_to_file=log_to_file,
            console_enabled=console_enabled,
            component_label=component_label,
            max_log_events=max_log_events,
            levels_enabled=levels_enabled,
            echo_events=echo_events,
            auto_archive_delay_seconds=auto_archive_delay_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
