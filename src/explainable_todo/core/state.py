# src/explainable_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..explain.engine import ExplanationEngine
from ..explain.interactions import InteractionBus
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Everything a connector needs, wired once in cli/bootstrap.py.

    settings is typed as Any so tests can pass a SimpleNamespace.
    """

    settings: Any
    engine: ExplanationEngine
    task_store: TaskStore
    interactions: InteractionBus
