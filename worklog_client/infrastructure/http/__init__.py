from .work_log_api_client import CLIENT_ID_HEADER, WorkLogApiClient
from .sse_event_source import SSEEventSource, parse_sse_lines

__all__ = [
    "CLIENT_ID_HEADER",
    "WorkLogApiClient",
    "SSEEventSource",
    "parse_sse_lines",
]
