# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskboard.config import Settings

_VARS = (
    "TASKBOARD_GATEWAY",
    "TASKBOARD_REST_URL",
    "TASKBOARD_REST_API_KEY",
    "TASKBOARD_DATA_DIR",
    "TASKBOARD_TASKS_DB_PATH",
    "TASKBOARD_SETTLE_DELAY_SECONDS",
    "TASKBOARD_AUTO_REFRESH",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()
    assert s.gateway == "sqlite"
    assert s.settle_delay_seconds == pytest.approx(0.3)
    assert s.auto_refresh is True
    assert s.tasks_db_path == Path(".local/taskboard") / "tasks.sqlite3"
    assert s.rest_api_key is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKBOARD_GATEWAY", "REST")
    monkeypatch.setenv("TASKBOARD_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKBOARD_SETTLE_DELAY_SECONDS", "-1")
    monkeypatch.setenv("TASKBOARD_AUTO_REFRESH", "off")
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")

    s = Settings.from_env()

    assert s.gateway == "rest"
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.settle_delay_seconds == 0.0
    assert s.auto_refresh is False
    assert s.rest_url == "https://example.supabase.co"
    assert s.rest_api_key == "anon"


def test_unknown_gateway_falls_back_to_sqlite(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKBOARD_GATEWAY", "mongo")
    assert Settings.from_env().gateway == "sqlite"
