# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Tests build their own Settings via Settings.from_env() or SimpleNamespace.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKBOARD"

GATEWAY_BACKENDS = ("memory", "sqlite", "rest")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Console ----
    console_enabled: bool
    seed_demo: bool

    # ---- Gateway ----
    gateway: str
    rest_url: str
    rest_api_key: str | None
    rest_table: str
    rest_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Board behaviour ----
    settle_delay_seconds: float
    auto_refresh: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard") or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        gateway = _env(_k("GATEWAY"), "sqlite").strip().lower()
        if gateway not in GATEWAY_BACKENDS:
            logger.warning("Unknown %s=%r; falling back to sqlite", _k("GATEWAY"), gateway)
            gateway = "sqlite"

        # Accept the hosted store's usual variable names as a fallback.
        rest_url = (_env(_k("REST_URL")) or _env("SUPABASE_URL")).strip()
        rest_api_key = (_env(_k("REST_API_KEY")) or _env("SUPABASE_ANON_KEY")).strip() or None

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
            seed_demo=_env_bool(_k("SEED_DEMO"), False),
            gateway=gateway,
            rest_url=rest_url,
            rest_api_key=rest_api_key,
            rest_table=_env(_k("REST_TABLE"), "tasks") or "tasks",
            rest_timeout_seconds=max(0.5, _env_float(_k("REST_TIMEOUT_SECONDS"), 10.0)),
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            settle_delay_seconds=max(0.0, _env_float(_k("SETTLE_DELAY_SECONDS"), 0.3)),
            auto_refresh=_env_bool(_k("AUTO_REFRESH"), True),
        )


_SETTINGS: Settings | None = None


def _apply_local_overrides(settings: Settings) -> None:
    # Prefer .env for secrets; use config_local.py only for safe overrides.
    try:
        import config_local as _config_local  # type: ignore
    except ImportError:
        return

    for attr, field_name in (
        ("CONSOLE_ENABLED", "console_enabled"),
        ("SEED_DEMO", "seed_demo"),
        ("GATEWAY", "gateway"),
    ):
        if hasattr(_config_local, attr):
            object.__setattr__(settings, field_name, getattr(_config_local, attr))  # type: ignore[misc]


def get_settings() -> Settings:
    """Process-wide settings; .env is loaded on first use, never at import time."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        settings = Settings.from_env()
        _apply_local_overrides(settings)
        _SETTINGS = settings
    return _SETTINGS
