# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the gateway backend (memory / sqlite / rest),
- wires TaskStore, MoveCoordinator and BoardController into AppState.
"""

from __future__ import annotations

import logging

from ..board.controller import BoardController
from ..config import get_settings
from ..core.ports import TaskGateway
from ..core.state import AppState
from ..gateways.memory_gateway import InMemoryTaskGateway
from ..gateways.rest_gateway import RestTaskGateway
from ..gateways.sqlite_gateway import SqliteTaskGateway
from ..tasks.task_models import TaskStatus
from ..tasks.task_moves import MoveCoordinator
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

DEMO_TASKS = (
    ("Write project brief", "Outline goals and scope.", TaskStatus.COMPLETED),
    ("Sketch board layout", "Three columns: To-do, In Progress, Completed.", TaskStatus.IN_PROGRESS),
    ("Hook up the task store", "", TaskStatus.PENDING),
)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_gateway(settings) -> TaskGateway:
    backend = str(getattr(settings, "gateway", "sqlite"))

    if backend == "rest":
        try:
            return RestTaskGateway(
                settings.rest_url,
                settings.rest_api_key or "",
                table=settings.rest_table,
                timeout_seconds=settings.rest_timeout_seconds,
            )
        except ValueError as e:
            # Fallback for demos / local runs without the hosted store.
            logger.warning("%s Falling back to the in-memory gateway.", e)
            return InMemoryTaskGateway()

    if backend == "memory":
        return InMemoryTaskGateway()

    return SqliteTaskGateway(settings.tasks_db_path)


def create_initial_state(*, settings=None, gateway: TaskGateway | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the gateway) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if gateway is None:
        gateway = build_gateway(settings)

    store = TaskStore(gateway)
    moves = MoveCoordinator(store, settle_delay_seconds=settings.settle_delay_seconds)
    board = BoardController(store, moves, auto_refresh=settings.auto_refresh)

    logger.info("Board wired gateway=%s", gateway.__class__.__name__)
    return AppState(settings=settings, gateway=gateway, board=board)


async def seed_demo_tasks(state: AppState) -> int:
    """Insert a few sample tasks when the store is empty. Returns how many were added."""
    await state.board.refresh()
    if len(state.board.store) > 0 or not state.board.store.loaded:
        return 0

    added = 0
    for title, description, status in DEMO_TASKS:
        outcome = await state.board.store.create_task(title, description, status)
        if outcome.ok:
            added += 1
    await state.board.refresh()
    logger.info("Seeded %d demo tasks", added)
    return added
