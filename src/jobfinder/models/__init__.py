"""Data models for listings, filters and application state."""

from jobfinder.models.filters import SCALAR_FACETS, SET_FACETS, EffectiveFilter, FacetSelection
from jobfinder.models.job import (
    ApplicationStatus,
    ApplicationStatusEntry,
    ApplicationSummary,
    ContractType,
    ExperienceLevel,
    JobListing,
    StatusState,
    ViewListing,
    WorkModality,
)


__all__ = [
    "SCALAR_FACETS",
    "SET_FACETS",
    "ApplicationStatus",
    "ApplicationStatusEntry",
    "ApplicationSummary",
    "ContractType",
    "EffectiveFilter",
    "ExperienceLevel",
    "FacetSelection",
    "JobListing",
    "StatusState",
    "ViewListing",
    "WorkModality",
]
