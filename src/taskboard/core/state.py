# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..board.controller import BoardController
from .ports import TaskGateway


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    gateway: TaskGateway
    board: BoardController
