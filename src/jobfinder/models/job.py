"""Pydantic models for job listings and application state."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobfinder.errors import ErrorInfo


__all__ = [
    "ApplicationStatus",
    "ApplicationStatusEntry",
    "ApplicationSummary",
    "ContractType",
    "ExperienceLevel",
    "JobListing",
    "StatusState",
    "ViewListing",
    "WorkModality",
]


class ContractType(StrEnum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    INTERNSHIP = "INTERNSHIP"
    VOLUNTEER = "VOLUNTEER"
    FREELANCE = "FREELANCE"


class WorkModality(StrEnum):
    ON_SITE = "ON_SITE"
    REMOTE = "REMOTE"
    HYBRID = "HYBRID"


class ExperienceLevel(StrEnum):
    NO_EXPERIENCE = "NO_EXPERIENCE"
    ENTRY_LEVEL = "ENTRY_LEVEL"
    MID_LEVEL = "MID_LEVEL"
    SENIOR_LEVEL = "SENIOR_LEVEL"


class ApplicationStatus(StrEnum):
    """Lifecycle of a submitted application as reported by the service."""

    PENDING = "PENDING"
    SENT = "SENT"
    UNDER_REVIEW = "UNDER_REVIEW"
    PRE_SELECTED = "PRE_SELECTED"
    REJECTED = "REJECTED"
    HIRED = "HIRED"


class JobListing(BaseModel):
    """A job offer as returned by a search. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque job offer id")
    title: str
    description: str = Field(default="")
    company_name: str = Field(default="Sin especificar")
    company_rating: float = Field(default=4.0)
    location: str = Field(default="")
    sector: str | None = Field(default=None)

    contract_type: ContractType | None = Field(default=None)
    work_modality: WorkModality | None = Field(default=None)
    experience_level: ExperienceLevel | None = Field(default=None)

    salary_min: float | None = Field(default=None)
    salary_max: float | None = Field(default=None)
    currency: str = Field(default="Bs.")

    skills: tuple[str, ...] = Field(default=())
    requirements: tuple[str, ...] = Field(default=())
    benefits: tuple[str, ...] = Field(default=())

    applicants_count: int = Field(default=0)
    views_count: int = Field(default=0)
    featured: bool = Field(default=False)
    published_at: datetime | None = Field(default=None)


class ViewListing(JobListing):
    """A listing joined with the bookmark overlay, ready for rendering."""

    is_favorite: bool = Field(default=False)

    @classmethod
    def from_listing(cls, listing: JobListing, *, is_favorite: bool) -> "ViewListing":
        data = dict(listing)
        data["is_favorite"] = is_favorite
        return cls(**data)


class ApplicationSummary(BaseModel):
    """The part of an application the job cards need."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: ApplicationStatus | str = Field(default=ApplicationStatus.SENT)
    applied_at: datetime | None = Field(default=None)
    job_id: str | None = Field(default=None)

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value: object) -> object:
        # Unknown statuses from newer backends are kept as plain strings.
        try:
            return ApplicationStatus(value)
        except ValueError:
            return value


class StatusState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    RESOLVED = "resolved"
    ERROR = "error"


class ApplicationStatusEntry(BaseModel):
    """Cached "has the current user applied" answer for one job id."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    state: StatusState = Field(default=StatusState.IDLE)
    has_applied: bool = Field(default=False)
    application: ApplicationSummary | None = Field(default=None)
    error: ErrorInfo | None = Field(default=None)

    @property
    def is_settled(self) -> bool:
        return self.state in (StatusState.RESOLVED, StatusState.ERROR)
