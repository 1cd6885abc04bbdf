"""Abstract page-visibility interface."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

VisibilityObserver = Callable[[bool], Any]


class VisibilityMonitor(ABC):
    """Port answering whether the page is currently visible to the user."""

    @abstractmethod
    def is_visible(self) -> bool:
        ...

    @abstractmethod
    async def wait_until_visible(self) -> None:
        """Return as soon as the page is visible (immediately if it already is)."""
        ...

    @abstractmethod
    def add_observer(self, observer: VisibilityObserver) -> Callable[[], None]:
        """Call ``observer(visible)`` on every change; returns an unsubscribe function."""
        ...
