"""Client for the remote jobs service."""

from jobfinder.api.client import HttpJobsApi, JobsApi
from jobfinder.api.schemas import (
    ApplicationStatusResponse,
    CreateApplicationRequest,
    QuestionAnswer,
    SearchResponse,
    ToggleResponse,
)


__all__ = [
    "ApplicationStatusResponse",
    "CreateApplicationRequest",
    "HttpJobsApi",
    "JobsApi",
    "QuestionAnswer",
    "SearchResponse",
    "ToggleResponse",
]
