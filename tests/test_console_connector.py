# tests/test_console_connector.py

from __future__ import annotations

import builtins

import pytest

from taskboard.connectors.console_connector import run_console_loop


@pytest.mark.asyncio
async def test_console_loop_runs_commands_until_exit(state, monkeypatch, capsys) -> None:
    await state.board.refresh()
    lines = iter(["", "/add Console task", "hello", "/exit"])
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(lines))

    await run_console_loop(state)

    out = capsys.readouterr().out
    assert "Type /help for commands" in out
    assert "Commands start with '/'" in out
    assert any(t.title == "Console task" for t in state.board.store.tasks)


@pytest.mark.asyncio
async def test_console_loop_stops_on_eof(state, monkeypatch) -> None:
    def _eof(prompt: str = "") -> str:
        raise EOFError

    monkeypatch.setattr(builtins, "input", _eof)

    await run_console_loop(state)
