# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

APP_LOGGER = "taskboard"

# Per-request chatter; the console shows these only at WARNING+.
QUIET_APP_LOGGERS = ("taskboard.gateways.",)

# Third-party loggers capped at WARNING everywhere (file included).
NOISY_LIBRARIES = ("httpx", "httpcore", "asyncio")

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console board readable.

    - taskboard.* passes, except the quiet prefixes (WARNING+ only)
    - everything else (py.warnings, httpx, asyncio, ...) needs ERROR+
    """

    def __init__(self, quiet_prefixes: Iterable[str] = QUIET_APP_LOGGERS) -> None:
        super().__init__()
        self._quiet = tuple(quiet_prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == APP_LOGGER or name.startswith(APP_LOGGER + "."):
            if name.startswith(self._quiet):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def _reset_root(root: logging.Logger) -> None:
    for h in list(root.handlers):
        root.removeHandler(h)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskboard",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    quiet_prefixes: Iterable[str] = QUIET_APP_LOGGERS,
) -> Path:
    """
    Configure root logging once, before the board starts.

    - stderr handler: short format, filtered (the console board prints its own timestamps)
    - <log_dir>/taskboard.log: everything from file_level up, with timestamps

    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taskboard.log"

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    _reset_root(root)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console.addFilter(_ConsoleNoiseFilter(quiet_prefixes))
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
