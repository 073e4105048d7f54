# src/taskboard/board/text_view.py

"""Plain-text rendering of a BoardSnapshot (used by the console connector)."""

from __future__ import annotations

from datetime import datetime

from ..core.dates import format_relative
from ..tasks.task_models import FilterState, MovePhase, TaskStatus
from .controller import BoardSnapshot
from .notifications import NotificationLevel

SHORT_ID_LEN = 8


def short_id(task_id: str) -> str:
    return task_id[:SHORT_ID_LEN]


def describe_filters(filter_state: FilterState) -> str:
    if not filter_state.is_active():
        return "Filters: none"
    parts: list[str] = []
    if filter_state.active_statuses:
        names = [s.column_title for s in TaskStatus if s in filter_state.active_statuses]
        parts.append("status=" + ", ".join(names))
    date_range = filter_state.date_range
    if date_range is not None:
        end = date_range.date_to.isoformat() if date_range.date_to else "..."
        parts.append(f"created={date_range.date_from.isoformat()}..{end}")
    return "Filters: " + "; ".join(parts)


def describe_counts(counts: dict[str, int]) -> str:
    parts = [f"Total: {counts.get('total', 0)}"]
    for status in TaskStatus:
        parts.append(f"{status.column_title}: {counts.get(status.value, 0)}")
    return " | ".join(parts)


def render_board(snapshot: BoardSnapshot, *, now: datetime | None = None) -> str:
    if snapshot.loading and not snapshot.loaded:
        return "Loading tasks..."

    lines: list[str] = [describe_counts(snapshot.counts), describe_filters(snapshot.filter_state), ""]

    for status in TaskStatus:
        tasks = snapshot.columns.get(status, [])
        lines.append(f"== {status.column_title} ({len(tasks)}) ==")
        if not tasks:
            lines.append("  No tasks currently")
        for task in tasks:
            badge = ""
            record = snapshot.move_states.get(task.id)
            if record is not None:
                badge = " [moving...]" if record.phase is MovePhase.PENDING else " [moved]"
            lines.append(
                f"  [{short_id(task.id)}] {task.title}{badge}  - {format_relative(task.created_at, now)}"
            )
            if task.description:
                lines.append(f"      {task.description}")
        lines.append("")

    if snapshot.notifications:
        lines.append(render_notifications(snapshot))

    return "\n".join(lines).rstrip()


def render_notifications(snapshot: BoardSnapshot) -> str:
    if not snapshot.notifications:
        return "No notifications."
    lines = ["Notifications:"]
    for n in snapshot.notifications:
        tag = "ERROR" if n.level is NotificationLevel.ERROR else "INFO"
        hint = f" (/retry {n.id})" if n.retryable else ""
        lines.append(f"  #{n.id} {tag} {n.title}: {n.message}{hint}")
    return "\n".join(lines)
