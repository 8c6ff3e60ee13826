"""Request and response shapes exchanged with the jobs service."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from jobfinder.models.job import ApplicationSummary, JobListing


__all__ = [
    "ApplicationStatusResponse",
    "CreateApplicationRequest",
    "QuestionAnswer",
    "SearchResponse",
    "ToggleResponse",
]


class SearchResponse(BaseModel):
    listings: tuple[JobListing, ...] = Field(default=())


class ApplicationStatusResponse(BaseModel):
    has_applied: bool = Field(default=False)
    application: ApplicationSummary | None = Field(default=None)


class ToggleResponse(BaseModel):
    success: bool = Field(default=True)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuestionAnswer(_CamelModel):
    question_id: str
    question: str
    answer: str


class CreateApplicationRequest(_CamelModel):
    """Body of ``POST /jobapplication``."""

    job_offer_id: str
    cv_url: str | None = Field(default=None)
    cover_letter_url: str | None = Field(default=None)
    status: str = Field(default="PENDING")
    message: str | None = Field(default=None)
    question_answers: list[QuestionAnswer] | None = Field(default=None)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
