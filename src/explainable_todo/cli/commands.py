# src/explainable_todo/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.state import AppState
from ..explain.events import EventLevel
from ..explain.interactions import InteractionEvent, InteractionKind, InteractionTarget
from ..tasks.task_api import find_task, short_id, task_counts
from ..tasks.task_models import MoveDirection
from .render import render_log_view, render_tasks

CommandHandler = Callable[[AppState, list[str]], str]
# Derives a button's accessible label from the state it is clicked in (state may be None).
ControlLabel = str | Callable[[AppState | None, list[str]], str | None]

logger = logging.getLogger(__name__)

CONSOLE_INPUT = InteractionTarget(
    tag_name="input",
    element_id="task-input",
    role="textbox",
    data_component="ConsoleInput",
    aria_label="Task input",
)


@dataclass(slots=True, frozen=True)
class _Command:
    handler: CommandHandler
    help_text: str
    # Accessible label of the UI button this command stands for (None: typed input only).
    control_label: ControlLabel | None = None
    # Pass everything after the command name as a single argument, whitespace intact.
    raw_args: bool = False


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /add, /log, ...)."""

    def __init__(self) -> None:
        self._commands: dict[str, _Command] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        control_label: ControlLabel | None = None,
        raw_args: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        cmd = _Command(handler=handler, help_text=help_text, control_label=control_label, raw_args=raw_args)
        self._commands[key] = cmd
        self._help[key] = help_text
        for alias in aliases:
            self._commands[alias.lower()] = cmd

    @staticmethod
    def _split(line: str) -> tuple[str, list[str], str] | None:
        """(name, whitespace-split args, raw remainder) of a "/name args" line."""
        if not line.startswith("/"):
            return None
        parts = line[1:].split(maxsplit=1)
        if not parts:
            return None
        rest = parts[1].strip() if len(parts) > 1 else ""
        return parts[0].lower(), rest.split(), rest

    def interaction_for(self, line: str, state: AppState | None = None) -> InteractionEvent:
        """
        The raw interaction a submitted line stands for: a click on the command's
        button when it has one, otherwise Enter pressed in the task input.
        """
        split = self._split(line)
        cmd = self._commands.get(split[0]) if split else None
        label = cmd.control_label if cmd is not None else None
        if callable(label):
            label = label(state, split[1])
        if label:
            target = InteractionTarget(tag_name="button", role="button", aria_label=label)
            return InteractionEvent(kind=InteractionKind.CLICK, target=target)

        target = InteractionTarget(
            tag_name=CONSOLE_INPUT.tag_name,
            element_id=CONSOLE_INPUT.element_id,
            role=CONSOLE_INPUT.role,
            data_component=CONSOLE_INPUT.data_component,
            aria_label=CONSOLE_INPUT.aria_label,
            text_content=line,
        )
        return InteractionEvent(kind=InteractionKind.KEYDOWN, target=target, key="Enter", code="Enter")

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        split = self._split(line)
        if split is None:
            return "Empty command. Use /help to list available commands."

        name, args, rest = split
        cmd = self._commands.get(name)
        if cmd is None:
            logger.debug("Unknown command: /%s", name)
            return f"Unknown command: /{name}. Use /help to list available commands."

        if cmd.raw_args:
            args = [rest] if rest else []
        return cmd.handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("A line without a leading '/' adds it as a task.")
        return "\n".join(lines)


registry = CommandRegistry()


def _resolve(state: AppState, args: list[str]):
    if not args:
        return None, "Missing task reference (use the short id shown by /list)."
    task = find_task(state.task_store, args[0])
    if task is None:
        return None, f"No task matches {args[0]!r}."
    return task, None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    text = " ".join(args)
    before = {t.id for t in state.task_store.tasks}
    task_id = state.task_store.add_task(text)
    if task_id is None:
        return "Nothing to add."
    task = state.task_store.get(task_id)
    label = task.text if task else text
    if task_id in before:
        return f"Merged into existing task ({short_id(task_id)}): {label}"
    return f"Added ({short_id(task_id)}): {label}"


def done_label(state: AppState | None, args: list[str]) -> str:
    """The completion button reads "Mark complete" or "Mark incomplete" depending on the task."""
    task = find_task(state.task_store, args[0]) if state is not None and args else None
    return "Mark incomplete" if task is not None and task.completed else "Mark complete"


def cmd_done(state: AppState, args: list[str]) -> str:
    task, err = _resolve(state, args)
    if task is None:
        return err
    state.task_store.toggle_complete(task.id)
    updated = state.task_store.get(task.id)
    if updated is None or not updated.completed:
        return f"Marked incomplete: {task.text}"
    if task.id in state.task_store.pending_auto_archive_ids():
        delay = state.task_store.auto_archive_delay
        return f"Completed: {updated.text} (auto-archives in {delay:g}s)"
    return f"Completed: {updated.text}"


def cmd_archive(state: AppState, args: list[str]) -> str:
    task, err = _resolve(state, args)
    if task is None:
        return err
    if state.task_store.archive_task(task.id) is None:
        return f"Already archived: {task.text}"
    return f"Archived: {task.text}"


def cmd_restore(state: AppState, args: list[str]) -> str:
    task, err = _resolve(state, args)
    if task is None:
        return err
    if state.task_store.restore_task(task.id) is None:
        return f"Not archived: {task.text}"
    return f"Restored: {task.text}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    task, err = _resolve(state, args)
    if task is None:
        return err
    state.task_store.delete_task(task.id)
    return f"Deleted permanently: {task.text}"


def cmd_empty(state: AppState, args: list[str]) -> str:
    n = state.task_store.empty_archive()
    if n == 0:
        return "Archive is already empty."
    return f"Emptied archive ({n} task(s) removed)."


def _move(state: AppState, args: list[str], direction: MoveDirection) -> str:
    task, err = _resolve(state, args)
    if task is None:
        return err
    if state.task_store.move_task(task.id, direction) is None:
        return f"Cannot move {direction.value}: {task.text}"
    return f"Moved {direction.value}: {task.text}"


def cmd_up(state: AppState, args: list[str]) -> str:
    return _move(state, args, MoveDirection.UP)


def cmd_down(state: AppState, args: list[str]) -> str:
    return _move(state, args, MoveDirection.DOWN)


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list          -> active tasks
    /list archive  -> archived tasks
    """
    store = state.task_store
    if args and args[0].lower() in ("archive", "archived"):
        return render_tasks(store.archived_tasks(), title="Archive", empty="empty")
    return render_tasks(store.active_tasks(), title="Tasks", empty="nothing to do") + (
        f"\n(archived: {store.archived_count})"
    )


def cmd_log(state: AppState, args: list[str]) -> str:
    limit: int | None = None
    if args:
        try:
            limit = int(args[0])
        except ValueError:
            return "Usage: /log [limit]"
    return render_log_view(state.engine.view(), limit=limit)


def cmd_level(state: AppState, args: list[str]) -> str:
    """
    /level            -> show level visibility
    /level <name>     -> toggle lexical | syntactic | semantic
    """
    engine = state.engine
    if args:
        try:
            engine.toggle_level(args[0])
        except ValueError:
            return "Usage: /level lexical | syntactic | semantic"

    flags = engine.levels_enabled
    parts = [f"{lvl.value}={'on' if flags.get(lvl) else 'off'}" for lvl in EventLevel]
    return "Levels: " + ", ".join(parts)


def cmd_focus(state: AppState, args: list[str]) -> str:
    """
    /focus <ref>  -> only show events about this task
    /focus off    -> clear the focus
    """
    engine = state.engine
    if not args:
        current = engine.focus_task_id
        return f"Focus: {short_id(current)}" if current else "Focus: none"

    if args[0].lower() in ("off", "none", "clear"):
        engine.set_focus_task_id(None)
        return "Task focus cleared."

    task, err = _resolve(state, args)
    if task is None:
        return err
    engine.set_focus_task_id(task.id)
    return f"Focusing log on: {task.text}"


def cmd_status(state: AppState, args: list[str]) -> str:
    counts = task_counts(state.task_store)
    engine = state.engine
    flags = engine.levels_enabled
    levels = ", ".join(lvl.value for lvl in EventLevel if flags.get(lvl)) or "none"
    return (
        "Status:\n"
        f"  Tasks: {counts.active} active ({counts.completed} completed), {counts.archived} archived\n"
        f"  Pending auto-archive: {counts.pending_auto_archive}\n"
        f"  Events logged: {len(engine.log)}\n"
        f"  Visible levels: {levels}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <text>.", control_label="Add task", raw_args=True
)
registry.register(
    "done", cmd_done, help_text="Toggle completion: /done <ref>.", aliases=["toggle"], control_label=done_label
)
registry.register("archive", cmd_archive, help_text="Archive a task: /archive <ref>.", control_label="Archive")
registry.register("restore", cmd_restore, help_text="Restore an archived task: /restore <ref>.", control_label="Restore")
registry.register(
    "delete", cmd_delete, help_text="Delete a task permanently: /delete <ref>.", control_label="Delete permanently"
)
registry.register("empty", cmd_empty, help_text="Delete every archived task.", control_label="Empty archive")
registry.register("up", cmd_up, help_text="Move a task up: /up <ref>.", control_label="Move up")
registry.register("down", cmd_down, help_text="Move a task down: /down <ref>.", control_label="Move down")
registry.register("list", cmd_list, help_text="Show tasks: /list | /list archive.", aliases=["ls"])
registry.register("log", cmd_log, help_text="Show the explanation log: /log [limit].")
registry.register("level", cmd_level, help_text="Toggle a log level: /level lexical|syntactic|semantic.")
registry.register("focus", cmd_focus, help_text="Focus the log on a task: /focus <ref> | /focus off.")
registry.register("status", cmd_status, help_text="Show counts and log settings.")
