"""User-visible notices."""

from collections.abc import Callable
from typing import Any

import structlog

from org_chart.models import Notice

logger = structlog.get_logger()


class Notifier:
    """Collects notices for the user and forwards them to subscribers.

    The chart has no UI of its own, so notices are recorded in order and
    handed to whatever presentation layer subscribed (the CLI prints them).
    """

    def __init__(self) -> None:
        self.notices: list[Notice] = []
        self._subscribers: list[Callable[[Notice], None]] = []

    def subscribe(self, callback: Callable[[Notice], None]) -> None:
        """Register a callback invoked for every new notice."""
        self._subscribers.append(callback)

    def info(self, title: str, description: str = "", **metadata: Any) -> Notice:
        return self._post(Notice(level="info", title=title, description=description, metadata=metadata))

    def error(self, title: str, description: str = "", **metadata: Any) -> Notice:
        return self._post(Notice(level="error", title=title, description=description, metadata=metadata))

    def clear(self) -> None:
        self.notices.clear()

    def _post(self, notice: Notice) -> Notice:
        logger.debug("Posting notice", level=notice.level, title=notice.title)
        self.notices.append(notice)
        for callback in self._subscribers:
            callback(notice)
        return notice
