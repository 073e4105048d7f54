# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.board.controller import BoardController
from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.tasks.task_models import TaskStatus
from taskboard.tasks.task_moves import MoveCoordinator
from taskboard.tasks.task_store import TaskStore

from .fakes import ScriptedGateway, make_task


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        gateway="memory",
        rest_url="",
        rest_api_key=None,
        rest_table="tasks",
        rest_timeout_seconds=1.0,
        settle_delay_seconds=0.0,
        auto_refresh=True,
        console_enabled=False,
        seed_demo=False,
    )


@pytest.fixture()
def gateway() -> ScriptedGateway:
    """Three tasks, one per column, newest first: a (pending), b (in progress), c (completed)."""
    return ScriptedGateway(
        [
            make_task("c", TaskStatus.COMPLETED, age_minutes=30),
            make_task("a", TaskStatus.PENDING, age_minutes=10),
            make_task("b", TaskStatus.IN_PROGRESS, age_minutes=20),
        ]
    )


@pytest.fixture()
def store(gateway: ScriptedGateway) -> TaskStore:
    return TaskStore(gateway)


@pytest.fixture()
def moves(store: TaskStore) -> MoveCoordinator:
    return MoveCoordinator(store, settle_delay_seconds=0.0)


@pytest.fixture()
def board(store: TaskStore, moves: MoveCoordinator) -> BoardController:
    return BoardController(store, moves, auto_refresh=True)


@pytest.fixture()
def state(settings: SimpleNamespace, gateway: ScriptedGateway) -> AppState:
    """AppState wired through the real composition root with the scripted gateway."""
    return create_initial_state(settings=settings, gateway=gateway)
