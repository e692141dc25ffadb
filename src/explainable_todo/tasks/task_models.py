# src/explainable_todo/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class MoveDirection(StrEnum):
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, raw: str | MoveDirection) -> MoveDirection:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid move direction: {raw!r} (expected 'up' or 'down')") from None


@dataclass(frozen=True, slots=True)
class Task:
    """
    One to-do item.

    Frozen: transitions build new Task values with dataclasses.replace(), so a
    list snapshot stored in an explain event never changes afterwards.
    """

    id: str
    text: str
    completed: bool = False
    archived: bool = False


TaskList = tuple[Task, ...]
