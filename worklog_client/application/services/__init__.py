from .record_store import RecordStore
from .query_client import FetchOutcome, FetchStatus, QueryClient
from .mutation_client import MutationClient, UpdatePolicy
from .live_update_channel import LiveUpdateChannel
from .notice_board import NoticeBoard
from .view_projection import ProjectedRow, classify_urgency, order_rows, project
from .work_log_controller import WorkLogController

__all__ = [
    "RecordStore",
    "FetchOutcome",
    "FetchStatus",
    "QueryClient",
    "MutationClient",
    "UpdatePolicy",
    "LiveUpdateChannel",
    "NoticeBoard",
    "ProjectedRow",
    "classify_urgency",
    "order_rows",
    "project",
    "WorkLogController",
]
