"""Pure helpers that turn free text and facet picks into one search filter.

The chip rule used throughout: one chip per selected set value, one chip for the
salary range when either bound is set, one chip for the publication window and,
unless the caller opts out, one chip for the free-text query.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from jobfinder.errors import UnknownFacetError
from jobfinder.models.filters import SCALAR_FACETS, SET_FACETS, EffectiveFilter, FacetSelection
from jobfinder.models.job import ContractType, ExperienceLevel, WorkModality


__all__ = [
    "active_count",
    "chips",
    "clear",
    "compose",
    "set_published_in_days",
    "set_salary_range",
    "to_query_params",
    "toggle_facet_value",
]

_ENUM_FACETS: dict[str, type[StrEnum]] = {
    "contract_type": ContractType,
    "work_modality": WorkModality,
    "experience_level": ExperienceLevel,
}

# Outbound parameter names expected by the jobs service.
_PARAM_NAMES: dict[str, str] = {
    "contract_type": "contractType",
    "work_modality": "workModality",
    "experience_level": "experienceLevel",
    "location": "location",
    "sector": "sector",
    "salary_min": "salaryMin",
    "salary_max": "salaryMax",
    "published_in_days": "publishedInDays",
}


def compose(free_text: str | None, facets: FacetSelection) -> EffectiveFilter:
    """Merge trimmed free text with the facet selection."""
    query = (free_text or "").strip() or None
    fields = {name: getattr(facets, name) for name in (*SET_FACETS, *SCALAR_FACETS)}
    return EffectiveFilter(**fields, query=query)


def active_count(effective: EffectiveFilter, *, count_query: bool = True) -> int:
    count = sum(len(getattr(effective, name)) for name in SET_FACETS)
    if effective.has_salary_range:
        count += 1
    if effective.published_in_days is not None:
        count += 1
    if count_query and effective.query:
        count += 1
    return count


def chips(effective: EffectiveFilter, *, count_query: bool = True) -> list[tuple[str, str]]:
    """Chip labels in display order. ``len(chips(f)) == active_count(f)`` always holds."""
    out: list[tuple[str, str]] = []
    if count_query and effective.query:
        out.append(("query", effective.query))
    for name in SET_FACETS:
        out.extend((name, str(value)) for value in sorted(getattr(effective, name), key=str))
    if effective.has_salary_range:
        low = _fmt_number(effective.salary_min) if effective.salary_min is not None else ""
        high = _fmt_number(effective.salary_max) if effective.salary_max is not None else ""
        out.append(("salary", f"{low}-{high}"))
    if effective.published_in_days is not None:
        out.append(("published_in_days", str(effective.published_in_days)))
    return out


def _coerce_facet_value(name: str, value: Any) -> Any:
    enum_cls = _ENUM_FACETS.get(name)
    if enum_cls is not None:
        try:
            return enum_cls(value)
        except ValueError as exc:
            raise UnknownFacetError(f"{value!r} is not a valid {name} value") from exc
    if not isinstance(value, str) or not value.strip():
        raise UnknownFacetError(f"{name} values must be non-empty strings")
    return value.strip()


def toggle_facet_value(facets: FacetSelection, name: str, value: Any) -> FacetSelection:
    """Add ``value`` to the named set facet, or remove it if already present."""
    if name not in SET_FACETS:
        raise UnknownFacetError(f"Unknown set facet: {name!r}")
    coerced = _coerce_facet_value(name, value)
    current: frozenset = getattr(facets, name)
    return facets.model_copy(update={name: current ^ {coerced}})


def set_salary_range(
    facets: FacetSelection,
    salary_min: float | None,
    salary_max: float | None,
) -> FacetSelection:
    # model_copy skips validation; rebuild so the range check runs.
    try:
        return type(facets)(**{**dict(facets), "salary_min": salary_min, "salary_max": salary_max})
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


def set_published_in_days(facets: FacetSelection, days: int | None) -> FacetSelection:
    try:
        return type(facets)(**{**dict(facets), "published_in_days": days})
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


def clear(facets: FacetSelection) -> FacetSelection:  # noqa: ARG001
    """Empty every facet. Free text lives outside the facet record and is kept."""
    return FacetSelection()


def _fmt_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def to_query_params(effective: EffectiveFilter) -> list[tuple[str, str]]:
    """Map a filter onto query parameters.

    Set facets become repeated parameters in sorted order. Absent fields are
    left out entirely, never sent as empty values.
    """
    params: list[tuple[str, str]] = []
    if effective.query:
        params.append(("search", effective.query))
    for name in SET_FACETS:
        key = _PARAM_NAMES[name]
        params.extend((key, str(value)) for value in sorted(getattr(effective, name), key=str))
    if effective.salary_min is not None:
        params.append((_PARAM_NAMES["salary_min"], _fmt_number(effective.salary_min)))
    if effective.salary_max is not None:
        params.append((_PARAM_NAMES["salary_max"], _fmt_number(effective.salary_max)))
    if effective.published_in_days is not None:
        params.append((_PARAM_NAMES["published_in_days"], str(effective.published_in_days)))
    return params
