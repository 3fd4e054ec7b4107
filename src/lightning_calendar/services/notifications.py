from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Union

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class Notification(str, Enum):
    EVENT_ADD = "eventAdd"
    EVENT_UPDATE = "eventUpdate"
    EVENT_REMOVE = "eventRemove"
    VIEW_CHANGE = "viewChange"


class NotificationRegistry:
    """Per-calendar subscription list with synchronous, ordered dispatch.

    A failing handler is logged and skipped; the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Notification, List[Handler]] = {name: [] for name in Notification}

    def subscribe(self, name: Union[Notification, str], handler: Handler) -> Callable[[], None]:
        if not callable(handler):
            raise TypeError("handler must be callable")
        notification = Notification(name)
        self._handlers[notification].append(handler)

        def _unsubscribe() -> None:
            self.unsubscribe(notification, handler)

        return _unsubscribe

    def unsubscribe(self, name: Union[Notification, str], handler: Handler) -> bool:
        handlers = self._handlers[Notification(name)]
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def emit(self, name: Union[Notification, str], payload: Any) -> int:
        """Deliver ``payload`` to every subscriber; returns how many handlers succeeded."""

        notification = Notification(name)
        delivered = 0
        for handler in list(self._handlers[notification]):
            try:
                handler(payload)
            except Exception:  # noqa: BLE001
                logger.exception("Handler %r for %s failed", handler, notification.value)
                continue
            delivered += 1
        return delivered

    def handler_count(self, name: Union[Notification, str]) -> int:
        return len(self._handlers[Notification(name)])

    def clear(self) -> None:
        for handlers in self._handlers.values():
            handlers.clear()
