# src/taskboard/tasks/task_filters.py

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import tzinfo

from ..core.dates import local_day
from .task_models import FilterState, Task, TaskStatus

BOARD_COLUMNS: tuple[TaskStatus, ...] = tuple(TaskStatus)


def _empty_columns() -> dict[TaskStatus, list[Task]]:
    return {status: [] for status in BOARD_COLUMNS}


def derive_columns(
    tasks: Sequence[Task],
    filter_state: FilterState,
    *,
    tz: tzinfo | None = None,
) -> dict[TaskStatus, list[Task]]:
    """
    Group tasks into board columns.

    Stages, per column:
    1. status: with a non-empty active_statuses set, columns outside it are empty;
    2. date range: created_at's local day must fall in [date_from, date_to]
       (or on/after date_from when the range is open-ended);
    3. order: input order is kept (the store hands tasks over newest first).

    An inverted range yields empty columns rather than an error.
    Pure: no I/O, inputs are not modified.
    """
    columns = _empty_columns()

    date_range = filter_state.date_range
    if date_range is not None and date_range.is_inverted():
        return columns

    active = filter_state.active_statuses

    for task in tasks:
        column = columns.get(task.status)
        if column is None:
            continue
        if active and task.status not in active:
            continue
        if date_range is not None and not date_range.contains(local_day(task.created_at, tz)):
            continue
        column.append(task)

    return columns


def count_by_status(tasks: Iterable[Task]) -> dict[str, int]:
    """Per-status totals for the stats panel, plus "total"."""
    counts = {status.value: 0 for status in BOARD_COLUMNS}
    total = 0
    for task in tasks:
        counts[task.status.value] = counts.get(task.status.value, 0) + 1
        total += 1
    counts["total"] = total
    return counts
