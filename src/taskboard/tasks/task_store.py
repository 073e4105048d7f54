# src/taskboard/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.dates import utc_now
from ..core.errors import Failure, Ok, classify_exception
from ..core.ports import TaskGateway
from .task_models import Task, TaskPatch, TaskStatus

logger = logging.getLogger(__name__)


class MutationKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(slots=True, frozen=True)
class MutationOutcome:
    """
    Result of apply_local_mutation().

    refresh_required is set on every success: the local collection may lag
    behind the remote one (new ids, concurrent external edits) until the
    caller re-pulls it with refresh().
    """

    kind: MutationKind
    task_id: str | None
    failure: Failure | None = None
    refresh_required: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(slots=True, frozen=True)
class _NewTask:
    title: str
    description: str
    status: TaskStatus


def _clean_text(value: Any) -> str:
    return str(value if value is not None else "").strip()


def _parse_status(raw: Any) -> TaskStatus | None:
    if isinstance(raw, TaskStatus):
        return raw
    try:
        return TaskStatus(str(raw))
    except ValueError:
        return None


def _validate_create(payload: Mapping[str, Any]) -> _NewTask | Failure:
    title = _clean_text(payload.get("title"))
    if not title:
        return Failure.validation("Task title is required")
    status = _parse_status(payload.get("status") or TaskStatus.PENDING)
    if status is None:
        return Failure.validation(f"Unknown status: {payload.get('status')!r}")
    return _NewTask(title=title, description=_clean_text(payload.get("description")), status=status)


def _validate_update(payload: Mapping[str, Any]) -> tuple[str, TaskPatch] | Failure:
    task_id = _clean_text(payload.get("id"))
    if not task_id:
        return Failure.validation("Task ID is required")

    title: str | None = None
    if "title" in payload and payload["title"] is not None:
        title = _clean_text(payload["title"])
        if not title:
            return Failure.validation("Task title is required")

    description: str | None = None
    if "description" in payload and payload["description"] is not None:
        description = _clean_text(payload["description"])

    status: TaskStatus | None = None
    if "status" in payload and payload["status"] is not None:
        status = _parse_status(payload["status"])
        if status is None:
            return Failure.validation(f"Unknown status: {payload['status']!r}")

    patch = TaskPatch(title=title, description=description, status=status)
    if patch.is_empty():
        return Failure.validation("Nothing to update")
    return task_id, patch


class TaskStore:
    """
    Canonical in-memory view of the remote task collection.

    - refresh() replaces the collection from the gateway (newest first);
      a failed refresh keeps whatever was loaded before.
    - apply_local_mutation() validates locally, calls the gateway, and only
      touches local rows after a confirmed success.

    There is no lock: an overlapping refresh and mutation both apply,
    whichever resolves last wins. No UI side effects live here.
    """

    def __init__(self, gateway: TaskGateway) -> None:
        self._gateway = gateway
        self._tasks: list[Task] = []
        self._loaded = False
        self.loading = False
        self.last_error: Failure | None = None

    # ---- read API ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- gateway plumbing ----

    async def _call(self, op: str, call: Awaitable[Ok[Any] | Failure]) -> Ok[Any] | Failure:
        try:
            result = await call
        except Exception as e:
            logger.exception("Gateway %s raised %s", op, e.__class__.__name__)
            return classify_exception(e)
        if isinstance(result, Failure):
            logger.info("Gateway %s failed kind=%s code=%s", op, result.kind.value, result.code)
        return result

    # ---- refresh ----

    async def refresh(self) -> Failure | None:
        """
        Replace the collection with the gateway's list, ordered by created_at
        descending (stable for equal timestamps).

        Returns None on success, the classified Failure otherwise.
        """
        self.loading = True
        try:
            result = await self._call("list", self._gateway.list_tasks())
        finally:
            self.loading = False

        if isinstance(result, Failure):
            self.last_error = result
            logger.warning(
                "Refresh failed (%s); keeping %d cached tasks", result.kind.value, len(self._tasks)
            )
            return result

        tasks = list(result.value or [])
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        self._tasks = tasks
        self._loaded = True
        self.last_error = None
        logger.debug("Refresh ok total=%d", len(tasks))
        return None

    # ---- mutations ----

    async def apply_local_mutation(
        self, kind: MutationKind, payload: Mapping[str, Any]
    ) -> MutationOutcome:
        """
        Run one create/update/delete against the gateway.

        Payloads:
        - create: {"title", "description"?, "status"?}
        - update: {"id", and any of "title" / "description" / "status"}
        - delete: {"id"}

        Validation failures return before the gateway is contacted.
        """
        kind = MutationKind(kind)

        if kind is MutationKind.CREATE:
            new = _validate_create(payload)
            if isinstance(new, Failure):
                return MutationOutcome(kind=kind, task_id=None, failure=new)
            result = await self._call(
                "create",
                self._gateway.create_task(
                    title=new.title, description=new.description, status=new.status
                ),
            )
            if isinstance(result, Failure):
                return MutationOutcome(kind=kind, task_id=None, failure=result)
            logger.info("Task created title=%r status=%s", new.title, new.status.value)
            return MutationOutcome(kind=kind, task_id=None, refresh_required=True)

        if kind is MutationKind.UPDATE:
            checked = _validate_update(payload)
            if isinstance(checked, Failure):
                return MutationOutcome(kind=kind, task_id=_clean_text(payload.get("id")) or None, failure=checked)
            task_id, patch = checked
            result = await self._call("update", self._gateway.update_task(task_id, patch))
            if isinstance(result, Failure):
                return MutationOutcome(kind=kind, task_id=task_id, failure=result)
            self._apply_patch(task_id, patch)
            logger.info("Task updated id=%s fields=%s", task_id, sorted(patch.as_fields()))
            return MutationOutcome(kind=kind, task_id=task_id, refresh_required=True)

        task_id = _clean_text(payload.get("id"))
        if not task_id:
            return MutationOutcome(kind=kind, task_id=None, failure=Failure.validation("Task ID is required"))
        result = await self._call("delete", self._gateway.delete_task(task_id))
        if isinstance(result, Failure):
            return MutationOutcome(kind=kind, task_id=task_id, failure=result)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        logger.info("Task deleted id=%s", task_id)
        return MutationOutcome(kind=kind, task_id=task_id, refresh_required=True)

    def _apply_patch(self, task_id: str, patch: TaskPatch) -> None:
        now = utc_now()
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                self._tasks[i] = patch.apply_to(task, updated_at=now)
                return
        # Row is not cached yet (e.g. created elsewhere); next refresh brings it in.
        logger.debug("Updated task id=%s is not in the local collection", task_id)

    async def create_task(
        self,
        title: str,
        description: str = "",
        status: TaskStatus = TaskStatus.PENDING,
    ) -> MutationOutcome:
        return await self.apply_local_mutation(
            MutationKind.CREATE, {"title": title, "description": description, "status": status}
        )

    async def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | None = None,
    ) -> MutationOutcome:
        return await self.apply_local_mutation(
            MutationKind.UPDATE,
            {"id": task_id, "title": title, "description": description, "status": status},
        )

    async def delete_task(self, task_id: str) -> MutationOutcome:
        return await self.apply_local_mutation(MutationKind.DELETE, {"id": task_id})
