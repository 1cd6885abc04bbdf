"""Domain value object for user-facing notices (toast messages)."""

from dataclasses import dataclass
from enum import Enum


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A transient message shown to the user for ``duration`` seconds.

    ``terminal`` marks notices that ask the user to act (e.g. reload the
    page) because the client has given up retrying on its own.
    """

    message: str
    level: NoticeLevel = NoticeLevel.INFO
    duration: float = 1.5
    terminal: bool = False
