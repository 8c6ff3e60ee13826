"""Normalise raw service payloads into the package models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, TypeVar

from jobfinder.models.job import (
    ApplicationSummary,
    ContractType,
    ExperienceLevel,
    JobListing,
    WorkModality,
)


__all__ = ["application_from_api", "listing_from_api", "unwrap_items"]

E = TypeVar("E", bound=StrEnum)


def unwrap_items(data: Any) -> list[Any]:
    """Return the list payload whether it is bare or wrapped in ``items``/``data``."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("items", "data", "listings"):
            value = data.get(key)
            if isinstance(value, list):
                return value
    return []


def _enum_or_none(enum_cls: type[E], value: Any) -> E | None:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(v) for v in value if v)


def listing_from_api(raw: dict[str, Any]) -> JobListing:
    company = raw.get("company")
    if isinstance(company, dict):
        company_name = company.get("name") or "Sin especificar"
        company_rating = company.get("rating") or 4.0
        sector = company.get("sector") or raw.get("sector")
    else:
        company_name = company or "Sin especificar"
        company_rating = raw.get("companyRating") or 4.0
        sector = raw.get("sector")

    location = raw.get("location") or ", ".join(
        part for part in (raw.get("municipality"), raw.get("department")) if part
    )
    # Required first, then desired; duplicates dropped keeping first position.
    skills = tuple(
        dict.fromkeys(
            _str_tuple(raw.get("skillsRequired")) + _str_tuple(raw.get("desiredSkills"))
        )
    ) or _str_tuple(raw.get("skills"))

    return JobListing(
        id=str(raw["id"]),
        title=raw.get("title") or "",
        description=raw.get("description") or "",
        company_name=company_name,
        company_rating=company_rating,
        location=location,
        sector=sector,
        contract_type=_enum_or_none(ContractType, raw.get("contractType")),
        work_modality=_enum_or_none(WorkModality, raw.get("workModality")),
        experience_level=_enum_or_none(ExperienceLevel, raw.get("experienceLevel")),
        salary_min=raw.get("salaryMin"),
        salary_max=raw.get("salaryMax"),
        currency=raw.get("salaryCurrency") or "Bs.",
        skills=skills,
        requirements=_str_tuple(raw.get("requirements")),
        benefits=_str_tuple(raw.get("benefits")),
        applicants_count=raw.get("applicationsCount") or 0,
        views_count=raw.get("viewsCount") or 0,
        featured=bool(raw.get("featured")),
        published_at=raw.get("publishedAt"),
    )


def application_from_api(raw: dict[str, Any]) -> ApplicationSummary:
    job_offer = raw.get("jobOffer") or {}
    return ApplicationSummary(
        id=str(raw["id"]),
        status=raw.get("status") or "SENT",
        applied_at=raw.get("appliedAt"),
        job_id=job_offer.get("id") or raw.get("jobId"),
    )
