"""Colored console notifier — ANSI-colored toasts for terminal sessions.

Color scheme:
    🔵 Blue    — Info
    🟢 Green   — Success / connected
    🟡 Yellow  — Warnings / reconnecting
    🔴 Red     — Errors
"""

import logging

from worklog_client.application.interfaces import Notifier
from worklog_client.domain.entities import ConnectionState, Notice, NoticeLevel


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"


# ── Styles ───────────────────────────────────────────────────────────

_NOTICE_STYLES: dict[NoticeLevel, tuple[str, str, int]] = {
    NoticeLevel.INFO: (_Colors.BLUE, "ℹ️", logging.INFO),
    NoticeLevel.SUCCESS: (_Colors.GREEN, "✅", logging.INFO),
    NoticeLevel.WARNING: (_Colors.YELLOW, "⚠️", logging.WARNING),
    NoticeLevel.ERROR: (_Colors.RED, "❌", logging.ERROR),
}

_STATE_STYLES: dict[ConnectionState, tuple[str, str]] = {
    ConnectionState.CONNECTED: (_Colors.GREEN, "●"),
    ConnectionState.CONNECTING: (_Colors.YELLOW, "◐"),
    ConnectionState.RECONNECTING: (_Colors.YELLOW, "◐"),
    ConnectionState.DISCONNECTED: (_Colors.RED, "○"),
}


class ColoredNotifier(Notifier):
    """Writes notices as color-coded log lines.

    Usage:
        board = NoticeBoard(display=ColoredNotifier())
    """

    def __init__(self, component_name: str = "WorkLogNotices"):
        self._logger = logging.getLogger(component_name)

    def notify(self, notice: Notice) -> None:
        color, icon, level = _NOTICE_STYLES[notice.level]
        formatted = f"{color}{_Colors.BOLD}{icon} {notice.message}{_Colors.RESET}"
        if notice.terminal:
            formatted += f" {_Colors.DIM}(action required){_Colors.RESET}"
        self._logger.log(level, formatted)

    def connection(self, state: ConnectionState) -> None:
        """Log the push-connection indicator."""
        color, dot = _STATE_STYLES[state]
        self._logger.info(f"{color}{dot} live updates: {state.value}{_Colors.RESET}")
