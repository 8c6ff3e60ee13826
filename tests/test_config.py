"""Tests for configuration module."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from jobfinder.config import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_default_settings(self) -> None:
        """Test default settings values."""
        # Avoid inheriting developer-local .env values when running tests.
        settings = Settings(_env_file=None)

        assert settings.api_base_url == "http://localhost:3001/api"
        assert settings.api_token is None
        assert settings.request_timeout_s == 30.0
        assert settings.search_debounce_ms == 500
        assert settings.search_debounce_s == 0.5
        assert settings.clear_results_on_error is False
        assert settings.count_query_as_filter is True

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JOBFINDER_API_BASE_URL", "https://jobs.example/api")
        monkeypatch.setenv("JOBFINDER_SEARCH_DEBOUNCE_MS", "250")
        monkeypatch.setenv("JOBFINDER_COUNT_QUERY_AS_FILTER", "false")

        settings = Settings(_env_file=None)

        assert settings.api_base_url == "https://jobs.example/api"
        assert settings.search_debounce_s == 0.25
        assert settings.count_query_as_filter is False

    def test_settings_validation(self) -> None:
        """Timeouts must be positive and debounce delays non-negative."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, request_timeout_s=0)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, search_debounce_ms=-1)

    def test_ensure_directories(self, tmp_path: Path) -> None:
        """Test directory creation."""
        settings = Settings(_env_file=None, log_dir=tmp_path / "logs")

        settings.ensure_directories()

        assert settings.log_dir.exists()

    def test_get_settings_singleton(self) -> None:
        """Test that get_settings returns cached instance."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2
