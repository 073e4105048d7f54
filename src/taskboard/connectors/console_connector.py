# src/taskboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..board.text_view import render_board
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = ">>> "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def _run_command(state: AppState, line: str) -> None:
    try:
        reply = await command_registry.handle(state, line, emit=_print_ts)
    except Exception:
        logger.exception("Command handler crashed: %r", line)
        reply = "Internal error while handling a command."
    if reply is None:
        reply = "Commands start with '/'. Use /help to list available commands."
    _print_ts(reply)


async def run_console_loop(state: AppState) -> None:
    """
    Interactive text board.

    Input is read in a worker thread; each command runs as its own asyncio task,
    so a slow gateway call never blocks the next command (moves on different
    tasks proceed concurrently). Pending commands are awaited on exit.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type /help for commands, /exit to quit.\n")
    _print_ts("\n" + render_board(state.board.snapshot()))

    running: set[asyncio.Task[None]] = set()

    while True:
        try:
            line = (await asyncio.to_thread(input, PROMPT)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        task = asyncio.create_task(_run_command(state, line))
        running.add(task)
        task.add_done_callback(running.discard)

    if running:
        _print_ts(f"Waiting for {len(running)} pending command(s)...")
        await asyncio.gather(*running, return_exceptions=True)

    logger.info("Console connector finished.")
