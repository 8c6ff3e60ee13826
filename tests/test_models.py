"""Tests for data models."""

import pytest
from pydantic import ValidationError

from jobfinder.models import (
    ApplicationStatus,
    ApplicationStatusEntry,
    ApplicationSummary,
    ContractType,
    EffectiveFilter,
    FacetSelection,
    JobListing,
    StatusState,
    ViewListing,
)


class TestJobListing:
    def test_defaults(self) -> None:
        listing = JobListing(id="1", title="Cajero")
        assert listing.company_name == "Sin especificar"
        assert listing.currency == "Bs."
        assert listing.skills == ()
        assert listing.contract_type is None

    def test_listing_is_immutable(self) -> None:
        listing = JobListing(id="1", title="Cajero")
        with pytest.raises(ValidationError):
            listing.title = "Otro"  # type: ignore[misc]

    def test_view_listing_copies_fields(self) -> None:
        listing = JobListing(id="1", title="Cajero", skills=("Caja",), salary_min=2500)
        view = ViewListing.from_listing(listing, is_favorite=True)
        assert view.is_favorite
        assert view.title == "Cajero"
        assert view.skills == ("Caja",)
        assert view.salary_min == 2500


class TestFacetSelection:
    def test_empty_by_default(self) -> None:
        assert FacetSelection().is_empty()
        assert not FacetSelection().has_salary_range

    def test_set_values_are_coerced(self) -> None:
        facets = FacetSelection(contract_type={"FULL_TIME"})
        assert facets.contract_type == frozenset({ContractType.FULL_TIME})
        assert not facets.is_empty()

    def test_invalid_salary_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FacetSelection(salary_min=10, salary_max=5)

    def test_negative_salary_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FacetSelection(salary_min=-1)

    def test_equal_selections_hash_alike(self) -> None:
        a = FacetSelection(location=frozenset({"La Paz", "Oruro"}))
        b = FacetSelection(location=frozenset({"Oruro", "La Paz"}))
        assert a == b
        assert hash(a) == hash(b)

    def test_effective_filter_facets_drop_query(self) -> None:
        effective = EffectiveFilter(query="react", sector=frozenset({"Banca"}))
        assert effective.facets == FacetSelection(sector=frozenset({"Banca"}))


class TestApplicationModels:
    def test_status_defaults_to_sent(self) -> None:
        assert ApplicationSummary(id="a").status is ApplicationStatus.SENT

    def test_unknown_status_kept(self) -> None:
        assert ApplicationSummary(id="a", status="WITHDRAWN").status == "WITHDRAWN"

    def test_entry_settled(self) -> None:
        assert not ApplicationStatusEntry(job_id="1").is_settled
        assert not ApplicationStatusEntry(job_id="1", state=StatusState.LOADING).is_settled
        assert ApplicationStatusEntry(job_id="1", state=StatusState.RESOLVED).is_settled
        assert ApplicationStatusEntry(job_id="1", state=StatusState.ERROR).is_settled
