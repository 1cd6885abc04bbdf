"""NoticeBoard — holds the notice currently on screen and dismisses it on a timer."""

import asyncio
import logging
from collections import deque

from worklog_client.application.interfaces import Notifier
from worklog_client.domain.entities import Notice, NoticeLevel

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


class NoticeBoard(Notifier):
    """Single-slot notice display, like the page's one toast element.

    A new notice replaces the current one and restarts the dismissal
    timer. Terminal notices stay until replaced. Every notice is also
    forwarded to ``display`` (if given) and kept in a short history.
    """

    def __init__(self, display: Notifier | None = None, history_size: int = 50) -> None:
        self._display = display
        self._current: Notice | None = None
        self._timer: asyncio.TimerHandle | None = None
        self.history: deque[Notice] = deque(maxlen=history_size)

    @property
    def current(self) -> Notice | None:
        return self._current

    def notify(self, notice: Notice) -> None:
        logger.log(_LOG_LEVELS[notice.level], "Notice: %s", notice.message)
        self._cancel_timer()
        self._current = notice
        self.history.append(notice)
        if self._display is not None:
            self._display.notify(notice)

        if notice.terminal:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.call_later(notice.duration, self._dismiss, notice)

    def dismiss(self) -> None:
        self._cancel_timer()
        self._current = None

    def close(self) -> None:
        self._cancel_timer()

    def _dismiss(self, notice: Notice) -> None:
        self._timer = None
        if self._current is notice:
            self._current = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
