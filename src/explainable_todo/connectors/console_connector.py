# src/explainable_todo/connectors/console_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import CommandRegistry
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("/exit", "/quit")


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str, registry: CommandRegistry | None = None) -> str | None:
    """
    Process one submitted console line on the caller's thread.

    The raw interaction is dispatched first, so its lexical event attaches to
    the semantic event that was open before this command ran.
    """
    registry = registry or command_registry
    line = line.strip()
    if not line:
        return None

    state.interactions.dispatch(registry.interaction_for(line, state))

    if not line.startswith("/"):
        line = f"/add {line}"

    try:
        return registry.handle(state, line)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


class _LineReader:
    """
    Reads console lines on a daemon thread, one per request, and hands them to
    the loop through an asyncio.Queue.

    input() cannot be interrupted, so the thread is never joined: cancelling the
    loop task returns immediately and the blocked read dies with the process.
    None on the queue means EOF.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, read_line: Callable[[str], str], prompt: str) -> None:
        self._loop = loop
        self._read_line = read_line
        self._prompt = prompt
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._wanted = threading.Event()
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name="console-reader", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        self._stopped.set()
        self._wanted.set()

    async def next_line(self) -> str | None:
        self._wanted.set()
        return await self._queue.get()

    def _post(self, item: str | None) -> None:
        # The loop may already be closed when a read finishes after shutdown.
        with contextlib.suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._queue.put_nowait, item)

    def _run(self) -> None:
        while True:
            self._wanted.wait()
            self._wanted.clear()
            if self._stopped.is_set():
                return
            try:
                item: str | None = self._read_line(self._prompt)
            except EOFError:
                item = None
            except Exception:
                logger.exception("Console read failed.")
                item = None
            if self._stopped.is_set():
                return
            self._post(item)
            if item is None:
                return


async def run_console_loop(
    state: AppState,
    *,
    read_line: Callable[[str], str] = input,
) -> None:
    """
    Console REPL.

    Lines are read on a daemon thread (see _LineReader); every command is
    executed on the loop thread, where auto-archive timers fire too.
    Ctrl+C under asyncio.run arrives here as task cancellation.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    reader = _LineReader(asyncio.get_running_loop(), read_line, ">>> ")
    reader.start()

    try:
        while True:
            raw = await reader.next_line()
            if raw is None:
                logger.info("Console EOF received, exiting.")
                break

            user_input = raw.strip()
            if not user_input:
                continue

            if user_input.lower() in EXIT_COMMANDS:
                logger.info("Console exit command received.")
                break

            reply = handle_line(state, user_input)
            if reply is not None:
                _print_ts(reply)
    except asyncio.CancelledError:
        logger.info("Console cancelled, exiting.")
        print()
        raise
    finally:
        reader.close()

    logger.info("Console connector finished.")
