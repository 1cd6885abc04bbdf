"""Abstract notifier interface — where user-facing notices go."""

from abc import ABC, abstractmethod

from worklog_client.domain.entities import Notice


class Notifier(ABC):
    """Port for showing transient notices (toasts) to the user."""

    @abstractmethod
    def notify(self, notice: Notice) -> None:
        ...
