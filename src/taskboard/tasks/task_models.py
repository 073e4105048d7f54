# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Board column a task lives in.

    Declaration order is the board's column order (left to right).
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def column_title(self) -> str:
        return _STATUS_TITLES[self]

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """
        Strict user-input parsing: accepts values, names and column titles
        ("in_progress", "IN_PROGRESS", "in-progress", "In Progress", "todo").

        Raises ValueError for anything else.
        """
        key = (raw or "").strip().lower().replace("-", "_").replace(" ", "_")
        if key in _STATUS_ALIASES:
            return _STATUS_ALIASES[key]
        raise ValueError(f"Unknown status: {raw!r}")


_STATUS_TITLES = {
    TaskStatus.PENDING: "To-do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
}

_STATUS_ALIASES = {
    "pending": TaskStatus.PENDING,
    "todo": TaskStatus.PENDING,
    "to_do": TaskStatus.PENDING,
    "in_progress": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "doing": TaskStatus.IN_PROGRESS,
    "completed": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
}


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    title: str
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    def with_status(self, status: TaskStatus) -> Task:
        return replace(self, status=status)


@dataclass(slots=True, frozen=True)
class TaskPatch:
    """Partial update: only the fields that are not None are sent."""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None

    def is_empty(self) -> bool:
        return self.title is None and self.description is None and self.status is None

    def as_fields(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.title is not None:
            out["title"] = self.title
        if self.description is not None:
            out["description"] = self.description
        if self.status is not None:
            out["status"] = self.status.value
        return out

    def apply_to(self, task: Task, *, updated_at: datetime | None = None) -> Task:
        return replace(
            task,
            title=task.title if self.title is None else self.title,
            description=task.description if self.description is None else self.description,
            status=task.status if self.status is None else self.status,
            updated_at=task.updated_at if updated_at is None else updated_at,
        )


class MovePhase(StrEnum):
    PENDING = "pending"  # update call in flight
    SETTLING = "settling"  # confirmed, busy indicator still shown


@dataclass(slots=True, frozen=True)
class MoveRecord:
    """In-flight drag/drop status change for one task."""

    task_id: str
    from_status: TaskStatus
    to_status: TaskStatus
    phase: MovePhase = MovePhase.PENDING


@dataclass(slots=True, frozen=True)
class DateRange:
    """Inclusive range of local calendar days. Open-ended when date_to is None."""

    date_from: date
    date_to: date | None = None

    def is_inverted(self) -> bool:
        return self.date_to is not None and self.date_from > self.date_to

    def contains(self, day: date) -> bool:
        if day < self.date_from:
            return False
        return self.date_to is None or day <= self.date_to


@dataclass(slots=True, frozen=True)
class FilterState:
    """
    Board filter criteria.

    An empty active_statuses set means "no status filter" (every column shown),
    not "show nothing".
    """

    active_statuses: frozenset[TaskStatus] = field(default_factory=frozenset)
    date_range: DateRange | None = None

    def toggle_status(self, status: TaskStatus) -> FilterState:
        if status in self.active_statuses:
            return replace(self, active_statuses=self.active_statuses - {status})
        return replace(self, active_statuses=self.active_statuses | {status})

    def remove_status(self, status: TaskStatus) -> FilterState:
        return replace(self, active_statuses=self.active_statuses - {status})

    def with_date_range(self, date_range: DateRange | None) -> FilterState:
        return replace(self, date_range=date_range)

    def cleared(self) -> FilterState:
        return FilterState()

    def is_active(self) -> bool:
        return bool(self.active_statuses) or self.date_range is not None
