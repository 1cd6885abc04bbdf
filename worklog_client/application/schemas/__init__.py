from .work_log import (
    WorkLogSchema,
    WorkLogWrite,
    WorkLogPage,
    CreatedResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
    UploadResult,
    parse_work_log_list,
)
from .live_event import decode_live_event

__all__ = [
    "WorkLogSchema",
    "WorkLogWrite",
    "WorkLogPage",
    "CreatedResponse",
    "StatusUpdateRequest",
    "StatusUpdateResponse",
    "UploadResult",
    "parse_work_log_list",
    "decode_live_event",
]
