"""Unit tests for client settings configuration."""

from pathlib import Path

from worklog_client.application.services import UpdatePolicy
from worklog_client.config import Settings
from worklog_client.domain.entities import SortDirection, SortField


def test_settings_uses_project_env_file_independent_of_cwd():
    """Settings should always include the project's .env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_project_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_project_env in normalized
    assert str(Path(".env")) in normalized


def test_settings_defaults_match_push_channel_contract():
    settings = Settings(_env_file=None)

    assert settings.base_url == "http://localhost:8080"
    assert settings.sse_path == "/api/sse/subscribe"
    assert settings.reconnect_base_delay == 2.0
    assert settings.max_reconnect_attempts == 5
    assert settings.update_policy is UpdatePolicy.REFETCH


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("WORKLOG_BASE_URL", "http://plant-7:9000")
    monkeypatch.setenv("WORKLOG_DEFAULT_SORT_FIELD", "carModel")
    monkeypatch.setenv("WORKLOG_DEFAULT_SORT_DIRECTION", "DESC")
    monkeypatch.setenv("WORKLOG_PAGE_SIZE", "50")
    monkeypatch.setenv("WORKLOG_UPDATE_POLICY", "trust_response")

    settings = Settings(_env_file=None)

    assert settings.base_url == "http://plant-7:9000"
    assert settings.default_sort_field is SortField.CAR_MODEL
    assert settings.default_sort_direction is SortDirection.DESC
    assert settings.page_size == 50
    assert settings.update_policy is UpdatePolicy.TRUST_RESPONSE
