"""Consumer interfaces for the view layer."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from worklog_client.domain.entities import ConnectionState, WorkLogRecord


class ViewProjector(ABC):
    """Port — renders store snapshots. Must treat the snapshot as read-only."""

    @abstractmethod
    def render(self, snapshot: Sequence[WorkLogRecord]) -> None:
        ...

    def connection_changed(self, state: ConnectionState) -> None:
        """Connection indicator hook; ignored by default."""
