"""In-process row change notifications for the booking and post tables."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ChangeAction(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: ChangeAction
    record_id: str


Subscriber = Callable[[ChangeEvent], None]


class ChangeFeed:
    """Fan out change events to subscribers, optionally filtered by table."""

    def __init__(self) -> None:
        self._subscribers: List[tuple[Optional[str], Subscriber]] = []

    def subscribe(self, callback: Subscriber, table: Optional[str] = None) -> Callable[[], None]:
        entry = (table, callback)
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        for table, callback in list(self._subscribers):
            if table is not None and table != event.table:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception("Change subscriber failed for %s %s %s", event.table, event.action.value, event.record_id)

    def clear(self) -> None:
        self._subscribers.clear()


change_feed = ChangeFeed()
