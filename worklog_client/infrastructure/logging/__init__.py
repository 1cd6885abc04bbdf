from .colored_notifier import ColoredNotifier
from .log_config import setup_logging

__all__ = ["ColoredNotifier", "setup_logging"]
