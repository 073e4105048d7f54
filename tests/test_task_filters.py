# tests/test_task_filters.py

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

from taskboard.tasks.task_filters import BOARD_COLUMNS, count_by_status, derive_columns
from taskboard.tasks.task_models import DateRange, FilterState, TaskStatus

from .fakes import make_task

PLUS_TWO = timezone(timedelta(hours=2))


def _ids(columns, status: TaskStatus) -> list[str]:
    return [t.id for t in columns[status]]


def _sample():
    return [
        make_task("p1", TaskStatus.PENDING, created_at=datetime(2024, 3, 3, 9, 0, tzinfo=UTC)),
        make_task("i1", TaskStatus.IN_PROGRESS, created_at=datetime(2024, 3, 2, 9, 0, tzinfo=UTC)),
        make_task("c1", TaskStatus.COMPLETED, created_at=datetime(2024, 3, 1, 9, 0, tzinfo=UTC)),
        make_task("p2", TaskStatus.PENDING, created_at=datetime(2024, 2, 28, 9, 0, tzinfo=UTC)),
    ]


def test_no_filter_places_every_task_exactly_once() -> None:
    tasks = _sample()
    columns = derive_columns(tasks, FilterState(), tz=UTC)

    assert list(columns) == list(BOARD_COLUMNS)
    placed = [t.id for status in BOARD_COLUMNS for t in columns[status]]
    assert sorted(placed) == sorted(t.id for t in tasks)
    for status in BOARD_COLUMNS:
        assert all(t.status is status for t in columns[status])


def test_columns_keep_input_order() -> None:
    columns = derive_columns(_sample(), FilterState(), tz=UTC)
    assert _ids(columns, TaskStatus.PENDING) == ["p1", "p2"]


def test_filtered_columns_are_subsets_of_unfiltered() -> None:
    tasks = _sample()
    full = derive_columns(tasks, FilterState(), tz=UTC)
    states = [
        FilterState(active_statuses=frozenset({TaskStatus.PENDING})),
        FilterState(date_range=DateRange(date(2024, 3, 2))),
        FilterState(
            active_statuses=frozenset({TaskStatus.PENDING, TaskStatus.COMPLETED}),
            date_range=DateRange(date(2024, 3, 1), date(2024, 3, 2)),
        ),
    ]
    for fs in states:
        columns = derive_columns(tasks, fs, tz=UTC)
        for status in BOARD_COLUMNS:
            assert set(_ids(columns, status)) <= set(_ids(full, status))


def test_status_filter_suppresses_other_columns() -> None:
    tasks = [make_task("p", TaskStatus.PENDING)]
    fs = FilterState(active_statuses=frozenset({TaskStatus.COMPLETED}))

    columns = derive_columns(tasks, fs, tz=UTC)

    assert all(columns[s] == [] for s in BOARD_COLUMNS)


def test_status_filter_keeps_active_columns() -> None:
    fs = FilterState(active_statuses=frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}))
    columns = derive_columns(_sample(), fs, tz=UTC)

    assert _ids(columns, TaskStatus.PENDING) == []
    assert _ids(columns, TaskStatus.IN_PROGRESS) == ["i1"]
    assert _ids(columns, TaskStatus.COMPLETED) == ["c1"]


def test_inverted_range_yields_empty_columns() -> None:
    fs = FilterState(date_range=DateRange(date(2024, 3, 5), date(2024, 3, 1)))
    columns = derive_columns(_sample(), fs, tz=UTC)
    assert all(columns[s] == [] for s in BOARD_COLUMNS)


def test_open_ended_range_keeps_tasks_on_or_after_from() -> None:
    fs = FilterState(date_range=DateRange(date(2024, 3, 2)))
    columns = derive_columns(_sample(), fs, tz=UTC)

    assert _ids(columns, TaskStatus.PENDING) == ["p1"]
    assert _ids(columns, TaskStatus.IN_PROGRESS) == ["i1"]
    assert _ids(columns, TaskStatus.COMPLETED) == []


def test_range_end_day_is_inclusive() -> None:
    late = make_task("late", created_at=datetime(2024, 3, 1, 23, 59, 59, tzinfo=UTC))
    fs = FilterState(date_range=DateRange(date(2024, 3, 1), date(2024, 3, 1)))

    columns = derive_columns([late], fs, tz=UTC)

    assert _ids(columns, TaskStatus.PENDING) == ["late"]


def test_range_compares_local_calendar_days() -> None:
    # 23:30 UTC on March 1st is already March 2nd at UTC+2.
    task = make_task("t", created_at=datetime(2024, 3, 1, 23, 30, tzinfo=UTC))
    fs = FilterState(date_range=DateRange(date(2024, 3, 2), date(2024, 3, 2)))

    assert _ids(derive_columns([task], fs, tz=UTC), TaskStatus.PENDING) == []
    assert _ids(derive_columns([task], fs, tz=PLUS_TWO), TaskStatus.PENDING) == ["t"]


def test_derive_columns_does_not_modify_input() -> None:
    tasks = _sample()
    before = list(tasks)
    derive_columns(tasks, FilterState(active_statuses=frozenset({TaskStatus.PENDING})), tz=UTC)
    assert tasks == before


def test_filter_state_toggle_and_clear() -> None:
    fs = FilterState()
    assert not fs.is_active()

    fs = fs.toggle_status(TaskStatus.COMPLETED)
    assert fs.active_statuses == {TaskStatus.COMPLETED}
    assert fs.is_active()

    fs = fs.toggle_status(TaskStatus.COMPLETED)
    assert fs.active_statuses == frozenset()

    fs = fs.toggle_status(TaskStatus.PENDING).with_date_range(DateRange(date(2024, 1, 1)))
    fs = fs.remove_status(TaskStatus.PENDING)
    assert fs.active_statuses == frozenset()
    assert fs.is_active()
    assert fs.cleared() == FilterState()


def test_count_by_status() -> None:
    counts = count_by_status(_sample())
    assert counts == {"pending": 2, "in_progress": 1, "completed": 1, "total": 4}
