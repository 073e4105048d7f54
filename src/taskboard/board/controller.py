# src/taskboard/board/controller.py

from __future__ import annotations

"""
Renderer-facing board core.

A renderer pulls a BoardSnapshot each render cycle and calls back with intents
(create/edit/delete/move/filter). The controller routes intents to the
TaskStore or the MoveCoordinator, turns failures into notifications, and
re-pulls canonical state after confirmed mutations when auto_refresh is on.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import tzinfo

from ..core.errors import ErrorKind, Failure
from ..tasks.task_filters import count_by_status, derive_columns
from ..tasks.task_models import DateRange, FilterState, MoveRecord, Task, TaskStatus
from ..tasks.task_moves import MoveCoordinator, MoveOutcome, MoveResult
from ..tasks.task_store import MutationKind, MutationOutcome, TaskStore
from .notifications import Notification, NotificationCenter

logger = logging.getLogger(__name__)

_FAILURE_TITLES = {
    MutationKind.CREATE: "Failed to create task",
    MutationKind.UPDATE: "Failed to update task",
    MutationKind.DELETE: "Failed to delete task",
}


@dataclass(slots=True, frozen=True)
class BoardSnapshot:
    columns: dict[TaskStatus, list[Task]]
    move_states: Mapping[str, MoveRecord]
    filter_state: FilterState
    counts: dict[str, int]
    notifications: tuple[Notification, ...]
    loading: bool
    loaded: bool


class BoardController:
    def __init__(
        self,
        store: TaskStore,
        moves: MoveCoordinator,
        *,
        notifications: NotificationCenter | None = None,
        auto_refresh: bool = True,
        tz: tzinfo | None = None,
    ) -> None:
        self.store = store
        self.moves = moves
        self.notifications = notifications or NotificationCenter()
        self.filter_state = FilterState()
        self._auto_refresh = auto_refresh
        self._tz = tz

    # ---- view ----

    def displayed_tasks(self) -> list[Task]:
        return self.moves.displayed_tasks(self.store.tasks)

    def snapshot(self) -> BoardSnapshot:
        displayed = self.displayed_tasks()
        return BoardSnapshot(
            columns=derive_columns(displayed, self.filter_state, tz=self._tz),
            move_states=self.moves.move_states(),
            filter_state=self.filter_state,
            counts=count_by_status(displayed),
            notifications=self.notifications.items,
            loading=self.store.loading,
            loaded=self.store.loaded,
        )

    # ---- refresh ----

    async def refresh(self) -> Failure | None:
        failure = await self.store.refresh()
        if failure is not None:
            title = "Unable to load tasks" if not self.store.loaded else "Error loading tasks"
            self.notifications.error(title, failure, retry=self.refresh)
        return failure

    async def _settle(self, refresh_required: bool, failure: Failure | None = None) -> None:
        stale = failure is not None and failure.kind.stale
        if self._auto_refresh and (refresh_required or stale):
            await self.refresh()

    def _pending_move_failure(self, task_id: str) -> Failure | None:
        if self.moves.record_for(task_id) is None:
            return None
        return Failure.of(
            ErrorKind.CONFLICT,
            message="This task is still being moved. Please wait.",
            code="MOVE_PENDING",
        )

    async def _finish_mutation(self, outcome: MutationOutcome, success_text: str, retry) -> MutationOutcome:
        if outcome.failure is not None:
            self.notifications.error(
                _FAILURE_TITLES[outcome.kind],
                outcome.failure,
                retry=retry if outcome.failure.retryable else None,
            )
        else:
            self.notifications.info("Success", success_text)
        await self._settle(outcome.refresh_required, outcome.failure)
        return outcome

    # ---- intents: CRUD ----

    async def create_task(
        self,
        title: str,
        description: str = "",
        status: TaskStatus = TaskStatus.PENDING,
    ) -> MutationOutcome:
        outcome = await self.store.create_task(title, description, status)
        return await self._finish_mutation(
            outcome,
            "Task created successfully",
            lambda: self.create_task(title, description, status),
        )

    async def edit_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | None = None,
    ) -> MutationOutcome:
        blocked = self._pending_move_failure(task_id)
        if blocked is not None:
            outcome = MutationOutcome(kind=MutationKind.UPDATE, task_id=task_id, failure=blocked)
            self.notifications.error(_FAILURE_TITLES[MutationKind.UPDATE], blocked)
            return outcome

        outcome = await self.store.update_task(
            task_id, title=title, description=description, status=status
        )
        return await self._finish_mutation(
            outcome,
            "Task updated successfully",
            lambda: self.edit_task(task_id, title=title, description=description, status=status),
        )

    async def delete_task(self, task_id: str) -> MutationOutcome:
        blocked = self._pending_move_failure(task_id)
        if blocked is not None:
            outcome = MutationOutcome(kind=MutationKind.DELETE, task_id=task_id, failure=blocked)
            self.notifications.error(_FAILURE_TITLES[MutationKind.DELETE], blocked)
            return outcome

        outcome = await self.store.delete_task(task_id)
        return await self._finish_mutation(
            outcome, "Task deleted successfully", lambda: self.delete_task(task_id)
        )

    # ---- intents: moves ----

    def begin_drag(self, task_id: str) -> bool:
        return self.moves.begin_drag(task_id)

    def cancel_drag(self, task_id: str) -> None:
        self.moves.cancel_drag(task_id)

    async def _finish_move(self, outcome: MoveOutcome, retry) -> MoveOutcome:
        if outcome.result is MoveResult.SETTLED and outcome.to_status is not None:
            self.notifications.info("Success", f"Task moved to {outcome.to_status.column_title}")
        elif outcome.failure is not None:
            can_retry = outcome.result is MoveResult.ROLLED_BACK and outcome.failure.retryable
            self.notifications.error("Failed to move task", outcome.failure, retry=retry if can_retry else None)
        await self._settle(outcome.refresh_required, outcome.failure)
        return outcome

    async def drop_on_column(self, task_id: str, target: TaskStatus) -> MoveOutcome:
        outcome = await self.moves.drop(task_id, target)
        return await self._finish_move(outcome, lambda: self.drop_on_column(task_id, target))

    async def toggle_task(self, task_id: str) -> MoveOutcome:
        outcome = await self.moves.toggle(task_id)
        return await self._finish_move(outcome, lambda: self.toggle_task(task_id))

    # ---- intents: filters ----

    def toggle_status_filter(self, status: TaskStatus) -> FilterState:
        self.filter_state = self.filter_state.toggle_status(TaskStatus(status))
        return self.filter_state

    def remove_status_filter(self, status: TaskStatus) -> FilterState:
        self.filter_state = self.filter_state.remove_status(TaskStatus(status))
        return self.filter_state

    def set_date_range(self, date_range: DateRange | None) -> FilterState:
        self.filter_state = self.filter_state.with_date_range(date_range)
        return self.filter_state

    def clear_filters(self) -> FilterState:
        self.filter_state = self.filter_state.cleared()
        return self.filter_state

    # ---- intents: notifications ----

    def dismiss_notification(self, notification_id: int) -> bool:
        return self.notifications.dismiss(notification_id)

    async def retry_notification(self, notification_id: int):
        return await self.notifications.retry(notification_id)
