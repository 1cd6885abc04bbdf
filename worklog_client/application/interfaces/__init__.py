from .work_log_gateway import ListParams, WorkLogGateway
from .live_event_source import LiveEventSource
from .notifier import Notifier
from .view_projector import ViewProjector
from .visibility import VisibilityMonitor, VisibilityObserver

__all__ = [
    "ListParams",
    "WorkLogGateway",
    "LiveEventSource",
    "Notifier",
    "ViewProjector",
    "VisibilityMonitor",
    "VisibilityObserver",
]
