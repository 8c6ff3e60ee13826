"""Tests for payload normalisation."""

from jobfinder.api.transform import application_from_api, listing_from_api, unwrap_items
from jobfinder.models.job import ApplicationStatus, ContractType, WorkModality


class TestUnwrapItems:
    def test_bare_list(self) -> None:
        assert unwrap_items([1, 2]) == [1, 2]

    def test_wrapped_list(self) -> None:
        assert unwrap_items({"items": [1]}) == [1]
        assert unwrap_items({"data": [2]}) == [2]
        assert unwrap_items({"listings": [3]}) == [3]

    def test_anything_else_is_empty(self) -> None:
        assert unwrap_items(None) == []
        assert unwrap_items({"data": {"id": 1}}) == []


class TestListingFromApi:
    def test_minimal_payload_gets_defaults(self) -> None:
        listing = listing_from_api({"id": 1, "title": "Cajero"})
        assert listing.id == "1"
        assert listing.company_name == "Sin especificar"
        assert listing.company_rating == 4.0
        assert listing.currency == "Bs."
        assert listing.location == ""
        assert listing.skills == ()

    def test_company_as_plain_string(self) -> None:
        listing = listing_from_api(
            {"id": "x", "title": "t", "company": "Tienda", "sector": "Retail"}
        )
        assert listing.company_name == "Tienda"
        assert listing.sector == "Retail"

    def test_unknown_enum_values_are_dropped(self) -> None:
        listing = listing_from_api(
            {"id": "x", "title": "t", "contractType": "SEASONAL", "workModality": "HYBRID"}
        )
        assert listing.contract_type is None
        assert listing.work_modality is WorkModality.HYBRID

    def test_location_falls_back_to_municipality_and_department(self) -> None:
        listing = listing_from_api(
            {"id": "x", "title": "t", "municipality": "El Alto", "department": "La Paz"}
        )
        assert listing.location == "El Alto, La Paz"

    def test_full_payload(self) -> None:
        listing = listing_from_api(
            {
                "id": "9",
                "title": "Contador",
                "location": "Santa Cruz",
                "contractType": "PART_TIME",
                "salaryCurrency": "USD",
                "skills": ["Excel"],
                "requirements": ["Título"],
                "benefits": ["Seguro", None],
                "applicationsCount": 12,
                "featured": 1,
                "publishedAt": "2024-05-01T10:00:00Z",
            }
        )
        assert listing.contract_type is ContractType.PART_TIME
        assert listing.currency == "USD"
        assert listing.skills == ("Excel",)
        assert listing.benefits == ("Seguro",)
        assert listing.applicants_count == 12
        assert listing.featured is True
        assert listing.published_at is not None
        assert listing.published_at.year == 2024


class TestApplicationFromApi:
    def test_known_status(self) -> None:
        summary = application_from_api({"id": 5, "status": "HIRED", "jobId": "9"})
        assert summary.id == "5"
        assert summary.status is ApplicationStatus.HIRED
        assert summary.job_id == "9"

    def test_unknown_status_is_kept_verbatim(self) -> None:
        summary = application_from_api({"id": "5", "status": "ARCHIVED"})
        assert summary.status == "ARCHIVED"
        assert not isinstance(summary.status, ApplicationStatus)

    def test_missing_status_defaults_to_sent(self) -> None:
        assert application_from_api({"id": "5"}).status is ApplicationStatus.SENT
