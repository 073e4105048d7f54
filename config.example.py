# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    # Console
    "TASKBOARD_CONSOLE_ENABLED": "Run the interactive text board (true/false, default: true).",
    "TASKBOARD_SEED_DEMO": "Insert sample tasks into an empty store on start (true/false).",
    # Gateway
    "TASKBOARD_GATEWAY": "Task store backend: memory | sqlite | rest (default: sqlite).",
    "TASKBOARD_REST_URL": "Hosted store base URL (fallback: SUPABASE_URL).",
    "TASKBOARD_REST_API_KEY": "Hosted store API key (fallback: SUPABASE_ANON_KEY).",
    "TASKBOARD_REST_TABLE": "Table name behind /rest/v1 (default: tasks).",
    "TASKBOARD_REST_TIMEOUT_SECONDS": "HTTP timeout per request (default: 10).",
    # Paths (gitignored)
    "TASKBOARD_DATA_DIR": "Local data directory (default: .local/taskboard).",
    "TASKBOARD_TASKS_DB_PATH": "SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Board behaviour
    "TASKBOARD_SETTLE_DELAY_SECONDS": "Busy indicator time after a confirmed move (default: 0.3).",
    "TASKBOARD_AUTO_REFRESH": "Reload tasks after confirmed changes (true/false, default: true).",
}
