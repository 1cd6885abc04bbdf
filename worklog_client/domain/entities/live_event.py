"""Domain events delivered over the server-push channel.

Each push frame decodes into exactly one of the variants below. A frame
whose payload fails validation becomes a ``RejectedEvent`` instead of
raising, so a single malformed message never tears down the connection.
"""

from dataclasses import dataclass
from enum import Enum

from worklog_client.domain.entities.work_log import WorkLogRecord


class ConnectionState(str, Enum):
    """Lifecycle states of the push connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


@dataclass(frozen=True)
class RawEvent:
    """One undecoded SSE frame: event name plus its data payload."""

    event: str
    data: str
    id: str | None = None


@dataclass(frozen=True)
class ConnectedEvent:
    message: str = ""


@dataclass(frozen=True)
class RecordCreatedEvent:
    record: WorkLogRecord


@dataclass(frozen=True)
class RecordUpdatedEvent:
    record: WorkLogRecord


@dataclass(frozen=True)
class RecordDeletedEvent:
    record_id: int


@dataclass(frozen=True)
class ServerErrorEvent:
    message: str = ""


@dataclass(frozen=True)
class RejectedEvent:
    """A frame that could not be decoded; ``reason`` says why."""

    event: str
    data: str
    reason: str


LiveEvent = (
    ConnectedEvent
    | RecordCreatedEvent
    | RecordUpdatedEvent
    | RecordDeletedEvent
    | ServerErrorEvent
    | RejectedEvent
)
