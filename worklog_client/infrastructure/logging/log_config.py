"""Centralized logging configuration.

Applies per-category log levels from Settings so that noisy loggers
(e.g. httpx/httpcore request lines) can be silenced without affecting
the push channel or the rest of the client.

Usage:
    from worklog_client.infrastructure.logging.log_config import setup_logging
    setup_logging()   # Call once at startup (in main.py)
"""

import logging
import sys

from worklog_client.config import Settings, get_settings


# ── Logger-name → Settings-field mapping ────────────────────────────

_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_http": [
        "httpx",
        "httpcore",
        "worklog_client.infrastructure.http.work_log_api_client",
    ],
    "log_level_channel": [
        "worklog_client.application.services.live_update_channel",
        "worklog_client.infrastructure.http.sse_event_source",
    ],
    "log_level_store": [
        "worklog_client.application.services.record_store",
    ],
}


def setup_logging(settings: Settings | None = None) -> None:
    """Configure Python logging levels from client settings."""
    settings = settings or get_settings()
    root_level = _parse_level(settings.log_level)

    root = logging.getLogger()
    root.setLevel(root_level)

    # Scripts and tests may start without any handler
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s — %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        root.addHandler(handler)

    for settings_field, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, settings_field, "INFO"))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured — root=%s, http=%s, channel=%s, store=%s",
        settings.log_level,
        settings.log_level_http,
        settings.log_level_channel,
        settings.log_level_store,
    )


def _parse_level(raw: str) -> int:
    """Convert a level name string to a logging constant, defaulting to INFO."""
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
