# src/taskboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..board.text_view import (
    describe_counts,
    describe_filters,
    render_board,
    render_notifications,
    short_id,
)
from ..core.dates import parse_day
from ..core.state import AppState
from ..tasks.task_models import DateRange, TaskStatus
from ..tasks.task_moves import MoveOutcome, MoveResult
from ..tasks.task_store import MutationOutcome

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str] | str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str] | str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, /mv, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            result = await result
        return str(result)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def resolve_task_id(state: AppState, token: str) -> str:
    """
    Accept a full id or a unique prefix of one (the board shows 8-char ids).
    Unknown or ambiguous tokens are returned unchanged; the store reports them.
    """
    token = token.strip()
    ids = [t.id for t in state.board.store.tasks]
    if token in ids:
        return token
    matches = [i for i in ids if i.startswith(token)]
    if len(matches) == 1:
        return matches[0]
    return token


def _split_title_description(words: list[str]) -> tuple[str, str | None]:
    text = " ".join(words)
    if "|" in text:
        title, description = text.split("|", 1)
        return title.strip(), description.strip()
    return text.strip(), None


def _describe_mutation(outcome: MutationOutcome, ok_text: str) -> str:
    if outcome.failure is not None:
        return f"Error: {outcome.failure.message}"
    return ok_text


def _describe_move(outcome: MoveOutcome) -> str:
    if outcome.result is MoveResult.NOOP:
        return "Task is already in that column."
    if outcome.result is MoveResult.SETTLED and outcome.to_status is not None:
        return f"Task moved to {outcome.to_status.column_title}."
    message = outcome.failure.message if outcome.failure is not None else "Failed to move task"
    return f"Error: {message}"


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_board(state: AppState, args: list[str]) -> str:
    return render_board(state.board.snapshot())


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    failure = await state.board.refresh()
    if failure is not None:
        return f"Error: {failure.message}"
    return render_board(state.board.snapshot())


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title> [| description]
    /add @in_progress <title> [| description]   -> create directly in a column
    """
    status = TaskStatus.PENDING
    if args and args[0].startswith("@"):
        try:
            status = TaskStatus.parse(args[0][1:])
        except ValueError as e:
            return str(e)
        args = args[1:]

    title, description = _split_title_description(args)
    outcome = await state.board.create_task(title, description or "", status)
    return _describe_mutation(outcome, "Task created.")


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> <title> [| description]"""
    if len(args) < 2:
        return "Usage: /edit <id> <title> [| description]"
    task_id = resolve_task_id(state, args[0])
    title, description = _split_title_description(args[1:])
    outcome = await state.board.edit_task(task_id, title=title, description=description)
    return _describe_mutation(outcome, "Task updated.")


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id>"
    outcome = await state.board.delete_task(resolve_task_id(state, args[0]))
    return _describe_mutation(outcome, "Task deleted.")


async def cmd_mv(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/mv <id> <status>: same path as a drag-and-drop onto the column."""
    if len(args) < 2:
        return "Usage: /mv <id> <todo|in_progress|completed>"
    try:
        target = TaskStatus.parse(" ".join(args[1:]))
    except ValueError as e:
        return str(e)

    task_id = resolve_task_id(state, args[0])
    if not state.board.begin_drag(task_id):
        task = state.board.store.get(task_id)
        if task is not None:
            return "This task is still being moved. Please wait."

    if emit:
        emit(f"Moving task {short_id(task_id)} to {target.column_title}...")
    outcome = await state.board.drop_on_column(task_id, target)
    return _describe_move(outcome)


async def cmd_toggle(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /toggle <id>"
    outcome = await state.board.toggle_task(resolve_task_id(state, args[0]))
    return _describe_move(outcome)


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter <status>  -> toggle a status filter
    /filter clear     -> remove all filters (status and date range)
    """
    if not args:
        return describe_filters(state.board.filter_state)
    if args[0].lower() in ("clear", "off", "none"):
        state.board.clear_filters()
        return "Filters cleared."
    try:
        status = TaskStatus.parse(" ".join(args))
    except ValueError as e:
        return str(e)
    fs = state.board.toggle_status_filter(status)
    on = status in fs.active_statuses
    return f"Filter {status.column_title}: {'ON' if on else 'OFF'}"


def cmd_range(state: AppState, args: list[str]) -> str:
    """
    /range <from> [to]  -> show tasks created in [from, to] (YYYY-MM-DD)
    /range clear        -> remove date range
    """
    if not args:
        return "Usage: /range <YYYY-MM-DD> [YYYY-MM-DD] | /range clear"
    if args[0].lower() in ("clear", "off", "none"):
        state.board.set_date_range(None)
        return "Date range cleared."
    try:
        date_from = parse_day(args[0])
        date_to = parse_day(args[1]) if len(args) > 1 else None
    except ValueError:
        return "Dates must look like YYYY-MM-DD."
    state.board.set_date_range(DateRange(date_from=date_from, date_to=date_to))
    end = date_to.isoformat() if date_to else "..."
    return f"Date range: {date_from.isoformat()}..{end}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    return describe_counts(state.board.snapshot().counts)


def cmd_notes(state: AppState, args: list[str]) -> str:
    return render_notifications(state.board.snapshot())


def cmd_dismiss(state: AppState, args: list[str]) -> str:
    if not args:
        state.board.notifications.clear()
        return "Notifications cleared."
    try:
        nid = int(args[0].lstrip("#"))
    except ValueError:
        return "Usage: /dismiss [n]"
    return "Dismissed." if state.board.dismiss_notification(nid) else f"No notification #{nid}."


async def cmd_retry(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /retry <n>"
    try:
        nid = int(args[0].lstrip("#"))
    except ValueError:
        return "Usage: /retry <n>"
    try:
        await state.board.retry_notification(nid)
    except KeyError:
        return f"No notification #{nid}."
    except ValueError as e:
        return str(e)
    return render_board(state.board.snapshot())


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("board", cmd_board, help_text="Show the board.", aliases=["b", "ls"])
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the store.", aliases=["r"])
registry.register("add", cmd_add, help_text="Create a task: /add [@status] <title> [| description].")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> <title> [| description].")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["del"])
registry.register("mv", cmd_mv, help_text="Move a task to a column: /mv <id> <status>.", aliases=["move"])
registry.register("toggle", cmd_toggle, help_text="Toggle To-do <-> Completed: /toggle <id>.")
registry.register("filter", cmd_filter, help_text="Toggle a status filter: /filter <status> | clear.")
registry.register("range", cmd_range, help_text="Created-date range: /range <from> [to] | clear.")
registry.register("stats", cmd_stats, help_text="Show task counts per column.")
registry.register("notes", cmd_notes, help_text="Show notifications.")
registry.register("dismiss", cmd_dismiss, help_text="Dismiss notification n (all when omitted).")
registry.register("retry", cmd_retry, help_text="Retry the action behind notification n.")
