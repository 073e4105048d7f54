# src/taskboard/board/notifications.py

from __future__ import annotations

import itertools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core.errors import Failure

logger = logging.getLogger(__name__)

RetryAction = Callable[[], Awaitable[Any]]


class NotificationLevel(StrEnum):
    INFO = "info"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Notification:
    id: int
    level: NotificationLevel
    title: str
    message: str
    failure: Failure | None = None
    retry: RetryAction | None = field(default=None, compare=False, repr=False)

    @property
    def retryable(self) -> bool:
        return self.retry is not None


class NotificationCenter:
    """
    Dismissible toast/banner queue for the renderer.

    Keeps at most max_items entries (oldest dropped first).
    """

    def __init__(self, *, max_items: int = 20) -> None:
        self._items: list[Notification] = []
        self._ids = itertools.count(1)
        self._max_items = max(1, int(max_items))

    @property
    def items(self) -> tuple[Notification, ...]:
        return tuple(self._items)

    def get(self, notification_id: int) -> Notification | None:
        for item in self._items:
            if item.id == notification_id:
                return item
        return None

    def _push(self, item: Notification) -> Notification:
        self._items.append(item)
        if len(self._items) > self._max_items:
            del self._items[: len(self._items) - self._max_items]
        return item

    def info(self, title: str, message: str) -> Notification:
        return self._push(
            Notification(id=next(self._ids), level=NotificationLevel.INFO, title=title, message=message)
        )

    def error(self, title: str, failure: Failure, *, retry: RetryAction | None = None) -> Notification:
        logger.debug("Notify error title=%r kind=%s", title, failure.kind.value)
        return self._push(
            Notification(
                id=next(self._ids),
                level=NotificationLevel.ERROR,
                title=title,
                message=failure.message,
                failure=failure,
                retry=retry,
            )
        )

    def dismiss(self, notification_id: int) -> bool:
        before = len(self._items)
        self._items = [n for n in self._items if n.id != notification_id]
        return len(self._items) != before

    def clear(self) -> None:
        self._items.clear()

    async def retry(self, notification_id: int) -> Any:
        """
        Dismiss the notification and re-run its action.

        Raises KeyError for unknown ids and ValueError when the entry has no action.
        """
        item = self.get(notification_id)
        if item is None:
            raise KeyError(notification_id)
        if item.retry is None:
            raise ValueError(f"Notification {notification_id} is not retryable")
        self.dismiss(notification_id)
        return await item.retry()
