# src/taskboard/tasks/task_moves.py

from __future__ import annotations

"""
Drag/drop move engine.

Per-task state machine:

    Idle -> Dragging -> Dropped(pending) -> Settled | RolledBack -> Idle

- The displayed status flips to the target column as soon as a drop is
  accepted (optimistic), before the gateway is awaited.
- Only one move per task may be in flight; a second drop is rejected
  without contacting the gateway.
- Success confirms the new status in the TaskStore, keeps the busy
  indicator for settle_delay_seconds, then frees the card.
- Failure drops the record at once, so the card shows its canonical
  status again.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from enum import StrEnum
from types import MappingProxyType

from ..core.errors import ErrorKind, Failure
from .task_models import MovePhase, MoveRecord, Task, TaskStatus
from .task_store import MutationKind, TaskStore

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY_SECONDS = 0.3


class MoveState(StrEnum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PENDING = "pending"
    SETTLING = "settling"


class MoveResult(StrEnum):
    NOOP = "noop"  # dropped onto its own column
    REJECTED = "rejected"  # refused client-side, gateway not contacted
    SETTLED = "settled"
    ROLLED_BACK = "rolled_back"


@dataclass(slots=True, frozen=True)
class MoveOutcome:
    task_id: str
    result: MoveResult
    from_status: TaskStatus | None = None
    to_status: TaskStatus | None = None
    failure: Failure | None = None
    refresh_required: bool = False

    @property
    def ok(self) -> bool:
        return self.result in (MoveResult.NOOP, MoveResult.SETTLED)


class MoveCoordinator:
    """
    Owns the transient MoveRecord set and the drag flags.

    While a record exists, the coordinator is the only source of that task's
    displayed status; canonical data in the TaskStore stays untouched until the
    gateway confirms the move.
    """

    def __init__(
        self,
        store: TaskStore,
        *,
        settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS,
    ) -> None:
        self._store = store
        self._settle_delay = max(0.0, float(settle_delay_seconds))
        self._records: dict[str, MoveRecord] = {}
        self._dragging: set[str] = set()

    # ---- queries ----

    def move_states(self) -> Mapping[str, MoveRecord]:
        return MappingProxyType(dict(self._records))

    def record_for(self, task_id: str) -> MoveRecord | None:
        return self._records.get(task_id)

    def state_of(self, task_id: str) -> MoveState:
        record = self._records.get(task_id)
        if record is not None:
            return MoveState.SETTLING if record.phase is MovePhase.SETTLING else MoveState.PENDING
        if task_id in self._dragging:
            return MoveState.DRAGGING
        return MoveState.IDLE

    def is_draggable(self, task_id: str) -> bool:
        return task_id not in self._records

    def displayed_status(self, task: Task) -> TaskStatus:
        record = self._records.get(task.id)
        return record.to_status if record is not None else task.status

    def displayed_tasks(self, tasks: Iterable[Task]) -> list[Task]:
        """Canonical tasks with pending move targets overlaid."""
        out: list[Task] = []
        for task in tasks:
            record = self._records.get(task.id)
            out.append(task if record is None else task.with_status(record.to_status))
        return out

    # ---- drag ----

    def _prune_dragging(self) -> None:
        self._dragging = {i for i in self._dragging if self._store.get(i) is not None}

    def begin_drag(self, task_id: str) -> bool:
        """Idle -> Dragging. Refused for unknown tasks and tasks with a move in flight."""
        self._prune_dragging()
        if task_id in self._records:
            logger.debug("Drag refused: move already pending task_id=%s", task_id)
            return False
        if self._store.get(task_id) is None:
            logger.debug("Drag refused: unknown task_id=%s", task_id)
            return False
        self._dragging.add(task_id)
        return True

    def cancel_drag(self, task_id: str) -> None:
        self._dragging.discard(task_id)

    # ---- drop ----

    async def drop(self, task_id: str, target: TaskStatus) -> MoveOutcome:
        """
        Drop a task onto a column and run the move to completion.

        The optimistic flip happens before the first await, so a concurrent
        render already sees the task in its target column.
        """
        target = TaskStatus(target)
        self._dragging.discard(task_id)

        if task_id in self._records:
            logger.info("Drop rejected: move already pending task_id=%s", task_id)
            return MoveOutcome(
                task_id=task_id,
                result=MoveResult.REJECTED,
                to_status=target,
                failure=Failure.of(
                    ErrorKind.CONFLICT,
                    message="This task is still being moved. Please wait.",
                    code="MOVE_PENDING",
                ),
            )

        task = self._store.get(task_id)
        if task is None:
            logger.info("Drop rejected: unknown task_id=%s", task_id)
            return MoveOutcome(
                task_id=task_id,
                result=MoveResult.REJECTED,
                to_status=target,
                failure=Failure.of(ErrorKind.NOT_FOUND),
                refresh_required=True,
            )

        source = task.status
        if source is target:
            return MoveOutcome(task_id=task_id, result=MoveResult.NOOP, from_status=source, to_status=target)

        record = MoveRecord(task_id=task_id, from_status=source, to_status=target)
        self._records[task_id] = record
        logger.debug("Move pending task_id=%s %s -> %s", task_id, source.value, target.value)

        try:
            outcome = await self._store.apply_local_mutation(
                MutationKind.UPDATE, {"id": task_id, "status": target}
            )
        except BaseException:
            # Cancelled mid-call: the result is unknown, show the canonical status again.
            if self._records.get(task_id) is record:
                del self._records[task_id]
            logger.info("Move abandoned task_id=%s %s -> %s", task_id, source.value, target.value)
            raise

        if outcome.failure is not None:
            self._records.pop(task_id, None)
            logger.info(
                "Move rolled back task_id=%s %s -> %s kind=%s",
                task_id,
                source.value,
                target.value,
                outcome.failure.kind.value,
            )
            return MoveOutcome(
                task_id=task_id,
                result=MoveResult.ROLLED_BACK,
                from_status=source,
                to_status=target,
                failure=outcome.failure,
                refresh_required=outcome.failure.kind.stale,
            )

        settling = replace(record, phase=MovePhase.SETTLING)
        self._records[task_id] = settling
        logger.info("Move settled task_id=%s %s -> %s", task_id, source.value, target.value)

        try:
            if self._settle_delay > 0:
                await asyncio.sleep(self._settle_delay)
        finally:
            if self._records.get(task_id) is settling:
                del self._records[task_id]

        return MoveOutcome(
            task_id=task_id,
            result=MoveResult.SETTLED,
            from_status=source,
            to_status=target,
            refresh_required=outcome.refresh_required,
        )

    async def toggle(self, task_id: str) -> MoveOutcome:
        """Checkbox-style completion: pending -> completed, anything else -> pending."""
        task = self._store.get(task_id)
        if task is None:
            return await self.drop(task_id, TaskStatus.COMPLETED)
        current = self.displayed_status(task)
        target = TaskStatus.COMPLETED if current is TaskStatus.PENDING else TaskStatus.PENDING
        return await self.drop(task_id, target)
