# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the board core.

The core depends on Protocols instead of concrete implementations.
This keeps the remote store swappable (in-memory / SQLite / HTTP) and makes testing easier.
"""

from typing import Protocol

from ..tasks.task_models import Task, TaskPatch, TaskStatus
from .errors import Failure, Ok


class TaskGateway(Protocol):
    """
    Remote task repository.

    Every call is a suspension point and returns a tagged result; expected
    failures (missing row, constraint violation, network) come back as Failure.
    Timeout and retry policy belong to the adapter, not to the core.
    """

    async def list_tasks(self) -> Ok[list[Task]] | Failure: ...

    async def create_task(
            self,
            *,
            title: str,
            description: str,
            status: TaskStatus = TaskStatus.PENDING,
    ) -> Ok[None] | Failure: ...

    async def update_task(self, task_id: str, patch: TaskPatch) -> Ok[None] | Failure: ...

    async def delete_task(self, task_id: str) -> Ok[None] | Failure: ...

    async def aclose(self) -> None: ...
