"""Abstract push-channel interface (port)."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from worklog_client.domain.entities import RawEvent


class LiveEventSource(ABC):
    """Port — one long-lived server-push subscription per ``stream()`` call."""

    @abstractmethod
    def stream(self) -> AsyncIterator[RawEvent]:
        """Open the subscription and yield frames until the server closes it.

        Returning normally means the server ended the stream. Leaving the
        iterator early (or cancelling the consuming task) must release the
        underlying connection.

        Raises:
            ChannelError: If the connection cannot be opened or drops.
        """
        ...
