from .work_log import WorkLogRecord, WorkUrgency
from .query_context import QueryContext, SortDirection, SortField, StatusFilter
from .live_event import (
    ConnectionState,
    RawEvent,
    LiveEvent,
    ConnectedEvent,
    RecordCreatedEvent,
    RecordUpdatedEvent,
    RecordDeletedEvent,
    ServerErrorEvent,
    RejectedEvent,
)
from .notice import Notice, NoticeLevel

__all__ = [
    "WorkLogRecord",
    "WorkUrgency",
    "QueryContext",
    "SortDirection",
    "SortField",
    "StatusFilter",
    "ConnectionState",
    "RawEvent",
    "LiveEvent",
    "ConnectedEvent",
    "RecordCreatedEvent",
    "RecordUpdatedEvent",
    "RecordDeletedEvent",
    "ServerErrorEvent",
    "RejectedEvent",
    "Notice",
    "NoticeLevel",
]
