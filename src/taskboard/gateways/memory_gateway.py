# src/taskboard/gateways/memory_gateway.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from ..core.dates import utc_now
from ..core.errors import ErrorKind, Failure, Ok
from ..tasks.task_models import Task, TaskPatch, TaskStatus

logger = logging.getLogger(__name__)


class InMemoryTaskGateway:
    """
    Dict-backed gateway for demos and tests.

    Mirrors the remote store's contract: missing rows come back as NOT_FOUND,
    nothing raises for expected outcomes.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._rows: dict[str, Task] = {t.id: t for t in tasks}

    @property
    def rows(self) -> dict[str, Task]:
        return self._rows

    async def list_tasks(self) -> Ok[list[Task]] | Failure:
        return Ok(list(self._rows.values()))

    async def create_task(
        self,
        *,
        title: str,
        description: str,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Ok[None] | Failure:
        now = utc_now()
        task = Task(
            id=str(uuid.uuid4()),
            title=title,
            description=description,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self._rows[task.id] = task
        logger.debug("memory: created id=%s", task.id)
        return Ok()

    async def update_task(self, task_id: str, patch: TaskPatch) -> Ok[None] | Failure:
        task = self._rows.get(task_id)
        if task is None:
            return Failure.of(ErrorKind.NOT_FOUND, code="PGRST116")
        self._rows[task_id] = patch.apply_to(task, updated_at=utc_now())
        return Ok()

    async def delete_task(self, task_id: str) -> Ok[None] | Failure:
        if self._rows.pop(task_id, None) is None:
            return Failure.of(ErrorKind.NOT_FOUND, code="PGRST116")
        return Ok()

    async def aclose(self) -> None:
        return
