# tests/test_board_controller.py

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from taskboard.board.controller import BoardController
from taskboard.board.notifications import NotificationCenter, NotificationLevel
from taskboard.core.errors import ErrorKind, Failure
from taskboard.tasks.task_models import DateRange, MovePhase, TaskStatus
from taskboard.tasks.task_moves import MoveResult

from .fakes import ScriptedGateway, spin


def _column_ids(board: BoardController, status: TaskStatus) -> list[str]:
    return [t.id for t in board.snapshot().columns[status]]


@pytest.mark.asyncio
async def test_snapshot_shows_optimistic_column_while_move_pending(
    board: BoardController, gateway: ScriptedGateway
) -> None:
    await board.refresh()
    gate = gateway.hold("update")

    pending = asyncio.create_task(board.drop_on_column("a", TaskStatus.COMPLETED))
    await spin()

    snap = board.snapshot()
    assert [t.id for t in snap.columns[TaskStatus.PENDING]] == []
    assert [t.id for t in snap.columns[TaskStatus.COMPLETED]] == ["a", "c"]
    assert snap.move_states["a"].phase is MovePhase.PENDING
    assert snap.counts["completed"] == 2

    gate.set()
    outcome = await pending

    assert outcome.result is MoveResult.SETTLED
    assert board.snapshot().move_states == {}
    last = board.notifications.items[-1]
    assert last.level is NotificationLevel.INFO
    assert last.message == "Task moved to Completed"


@pytest.mark.asyncio
async def test_failed_move_notifies_with_retry(board: BoardController, gateway: ScriptedGateway) -> None:
    await board.refresh()
    gateway.fail("update", Failure.of(ErrorKind.UNAVAILABLE))

    outcome = await board.drop_on_column("a", TaskStatus.IN_PROGRESS)

    assert outcome.result is MoveResult.ROLLED_BACK
    assert _column_ids(board, TaskStatus.PENDING) == ["a"]
    note = board.notifications.items[-1]
    assert note.level is NotificationLevel.ERROR
    assert note.title == "Failed to move task"
    assert note.retryable

    retried = await board.retry_notification(note.id)

    assert retried.result is MoveResult.SETTLED
    assert board.notifications.get(note.id) is None
    assert _column_ids(board, TaskStatus.IN_PROGRESS) == ["a", "b"]


@pytest.mark.asyncio
async def test_permission_failure_is_not_retryable(board: BoardController, gateway: ScriptedGateway) -> None:
    await board.refresh()
    gateway.fail("update", Failure.of(ErrorKind.PERMISSION_DENIED, code="42501"))

    await board.drop_on_column("a", TaskStatus.IN_PROGRESS)

    note = board.notifications.items[-1]
    assert note.failure is not None
    assert note.failure.kind is ErrorKind.PERMISSION_DENIED
    assert not note.retryable
    with pytest.raises(ValueError):
        await board.retry_notification(note.id)


@pytest.mark.asyncio
async def test_retry_of_unknown_notification_raises_key_error(board: BoardController) -> None:
    with pytest.raises(KeyError):
        await board.retry_notification(999)


@pytest.mark.asyncio
async def test_create_refreshes_and_shows_new_task(board: BoardController) -> None:
    await board.refresh()

    outcome = await board.create_task("Write tests", "", TaskStatus.IN_PROGRESS)

    assert outcome.ok
    titles = [t.title for t in board.snapshot().columns[TaskStatus.IN_PROGRESS]]
    assert titles[0] == "Write tests"
    assert board.notifications.items[-1].message == "Task created successfully"


@pytest.mark.asyncio
async def test_create_validation_failure_notifies_without_retry(
    board: BoardController, gateway: ScriptedGateway
) -> None:
    outcome = await board.create_task("  ")

    assert outcome.failure is not None
    note = board.notifications.items[-1]
    assert note.title == "Failed to create task"
    assert note.message == "Task title is required"
    assert not note.retryable
    assert gateway.ops("create") == []


@pytest.mark.asyncio
async def test_initial_load_failure_is_retryable(board: BoardController, gateway: ScriptedGateway) -> None:
    gateway.fail("list", Failure.of(ErrorKind.UNAVAILABLE))

    failure = await board.refresh()

    assert failure is not None
    note = board.notifications.items[-1]
    assert note.title == "Unable to load tasks"
    assert note.retryable

    assert await board.retry_notification(note.id) is None
    assert board.snapshot().loaded
    assert board.notifications.items == ()


@pytest.mark.asyncio
async def test_stale_update_triggers_refresh(board: BoardController, gateway: ScriptedGateway) -> None:
    await board.refresh()
    del gateway.rows["b"]

    outcome = await board.edit_task("b", title="Gone")

    assert outcome.failure is not None
    assert outcome.failure.kind is ErrorKind.NOT_FOUND
    assert board.store.get("b") is None
    assert gateway.ops("list") == ["list", "list"]


@pytest.mark.asyncio
async def test_no_auto_refresh_when_disabled(store, moves, gateway: ScriptedGateway) -> None:
    board = BoardController(store, moves, auto_refresh=False)
    await board.refresh()

    await board.create_task("Later")

    assert len(board.store) == 3
    assert gateway.ops("list") == ["list"]


@pytest.mark.asyncio
async def test_edit_and_delete_blocked_while_move_pending(
    board: BoardController, gateway: ScriptedGateway
) -> None:
    await board.refresh()
    gate = gateway.hold("update")

    pending = asyncio.create_task(board.drop_on_column("a", TaskStatus.COMPLETED))
    await spin()

    edited = await board.edit_task("a", title="Edited")
    deleted = await board.delete_task("a")

    assert edited.failure.kind is ErrorKind.CONFLICT
    assert deleted.failure.kind is ErrorKind.CONFLICT
    assert gateway.ops("delete") == []
    assert len(gateway.ops("update")) == 1

    gate.set()
    await pending
    assert board.store.get("a").title == "Task a"


@pytest.mark.asyncio
async def test_delete_then_refresh(board: BoardController) -> None:
    await board.refresh()

    outcome = await board.delete_task("c")

    assert outcome.ok
    assert _column_ids(board, TaskStatus.COMPLETED) == []
    assert board.snapshot().counts["total"] == 2


@pytest.mark.asyncio
async def test_filter_intents(board: BoardController) -> None:
    await board.refresh()

    board.toggle_status_filter(TaskStatus.COMPLETED)
    assert _column_ids(board, TaskStatus.PENDING) == []
    assert _column_ids(board, TaskStatus.COMPLETED) == ["c"]

    board.remove_status_filter(TaskStatus.COMPLETED)
    assert _column_ids(board, TaskStatus.PENDING) == ["a"]

    board.set_date_range(DateRange(date(2030, 1, 2), date(2030, 1, 1)))
    snap = board.snapshot()
    assert all(not tasks for tasks in snap.columns.values())
    assert snap.counts["total"] == 3

    board.clear_filters()
    assert not board.filter_state.is_active()
    assert _column_ids(board, TaskStatus.IN_PROGRESS) == ["b"]


def test_notification_center_caps_and_dismisses() -> None:
    center = NotificationCenter(max_items=2)
    first = center.info("Success", "one")
    center.info("Success", "two")
    third = center.error("Oops", Failure.of(ErrorKind.UNKNOWN))

    assert [n.message for n in center.items] == ["two", third.message]
    assert center.get(first.id) is None
    assert center.dismiss(third.id)
    assert not center.dismiss(third.id)
    center.clear()
    assert center.items == ()


@pytest.mark.asyncio
async def test_stale_move_triggers_refresh(board: BoardController, gateway: ScriptedGateway) -> None:
    await board.refresh()
    gateway.fail("update", Failure.of(ErrorKind.NOT_FOUND, code="PGRST116"))

    outcome = await board.drop_on_column("b", TaskStatus.COMPLETED)

    assert outcome.result is MoveResult.ROLLED_BACK
    assert gateway.ops("list") == ["list", "list"]
