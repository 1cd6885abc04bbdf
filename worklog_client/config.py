from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from worklog_client.application.services.mutation_client import UpdatePolicy
from worklog_client.domain.entities import SortDirection, SortField

_PROJECT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Client settings loaded from ``WORKLOG_*`` environment variables."""

    # Backend
    base_url: str = "http://localhost:8080"
    request_timeout: float = 30.0
    upload_timeout: float = 120.0
    sse_path: str = "/api/sse/subscribe"

    # Push channel reconnects
    reconnect_base_delay: float = 2.0
    max_reconnect_attempts: int = 5

    # List view defaults
    default_sort_field: SortField = SortField.WORK_DATETIME
    default_sort_direction: SortDirection = SortDirection.ASC
    page_size: int | None = None

    # After a successful PUT: reload the view, or trust a full-record body
    update_policy: UpdatePolicy = UpdatePolicy.REFETCH

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"              # Root / app-wide
    log_level_http: str = "WARNING"      # httpx / httpcore, outbound HTTP
    log_level_channel: str = "INFO"      # push channel + SSE reader
    log_level_store: str = "WARNING"     # RecordStore mutations

    model_config = {
        "env_prefix": "WORKLOG_",
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
