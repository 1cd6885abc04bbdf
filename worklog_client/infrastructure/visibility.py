"""In-process page-visibility flag."""

import asyncio
import logging
from collections.abc import Callable

from worklog_client.application.interfaces import VisibilityMonitor, VisibilityObserver

logger = logging.getLogger(__name__)


class PageVisibility(VisibilityMonitor):
    """Visibility toggled by the host (e.g. a UI shell or a signal handler).

    Starts visible. Waiters blocked in ``wait_until_visible`` are released
    as soon as ``set_visible(True)`` is called, and observers hear about
    every actual change.
    """

    def __init__(self, visible: bool = True) -> None:
        self._visible = asyncio.Event()
        self._observers: list[VisibilityObserver] = []
        if visible:
            self._visible.set()

    def is_visible(self) -> bool:
        return self._visible.is_set()

    def set_visible(self, visible: bool) -> None:
        if visible == self.is_visible():
            return
        if visible:
            self._visible.set()
        else:
            self._visible.clear()
        logger.debug("Page %s", "visible" if visible else "hidden")
        for observer in list(self._observers):
            try:
                observer(visible)
            except Exception:
                logger.exception("Visibility observer %r failed", observer)

    async def wait_until_visible(self) -> None:
        await self._visible.wait()

    def add_observer(self, observer: VisibilityObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return remove
