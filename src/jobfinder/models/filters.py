"""Fixed-shape filter records sent to the job search."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from jobfinder.models.job import ContractType, ExperienceLevel, WorkModality


__all__ = ["SCALAR_FACETS", "SET_FACETS", "EffectiveFilter", "FacetSelection"]

SET_FACETS: tuple[str, ...] = (
    "contract_type",
    "work_modality",
    "experience_level",
    "location",
    "sector",
)
SCALAR_FACETS: tuple[str, ...] = ("salary_min", "salary_max", "published_in_days")


class FacetSelection(BaseModel):
    """Facet values picked by the user.

    Values are ORed within a facet and ANDed across facets. Set fields are
    frozensets, so the record is hashable and compares by value.
    """

    model_config = ConfigDict(frozen=True)

    contract_type: frozenset[ContractType] = Field(default=frozenset())
    work_modality: frozenset[WorkModality] = Field(default=frozenset())
    experience_level: frozenset[ExperienceLevel] = Field(default=frozenset())
    location: frozenset[str] = Field(default=frozenset())
    sector: frozenset[str] = Field(default=frozenset())

    salary_min: float | None = Field(default=None, ge=0)
    salary_max: float | None = Field(default=None, ge=0)
    published_in_days: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_salary_range(self) -> "FacetSelection":
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min must not exceed salary_max")
        return self

    @property
    def has_salary_range(self) -> bool:
        return self.salary_min is not None or self.salary_max is not None

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in SET_FACETS) and all(
            getattr(self, name) is None for name in SCALAR_FACETS
        )


class EffectiveFilter(FacetSelection):
    """Free text plus facets: the single object handed to the search collaborator."""

    query: str | None = Field(default=None)

    @property
    def facets(self) -> FacetSelection:
        return FacetSelection(**self.model_dump(exclude={"query"}))
