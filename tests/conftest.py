"""Pytest configuration and shared fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest

import jobfinder.log as log_module
from jobfinder.config import Settings, get_settings
from jobfinder.models.job import JobListing
from tests.test_fakes import FakeJobsApi, make_listing, settings_for_tests


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with a temporary log directory and no debounce delay."""
    return settings_for_tests(tmp_path)


@pytest.fixture
def sample_listings() -> list[JobListing]:
    return [
        make_listing("job-1", "React Developer"),
        make_listing("job-2", "Backend Engineer"),
        make_listing("job-3", "Data Analyst"),
    ]


@pytest.fixture
def api(sample_listings: list[JobListing]) -> FakeJobsApi:
    return FakeJobsApi(listings=sample_listings)


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None]:
    # Avoid picking up developer-local configuration or leaking log context.
    monkeypatch.setenv("JOBFINDER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("JOBFINDER_API_TOKEN", raising=False)
    get_settings.cache_clear()
    log_module._CTX.set(None)
    yield
    get_settings.cache_clear()
    log_module._CTX.set(None)
