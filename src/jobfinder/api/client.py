"""HTTP client for the jobs REST service."""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from jobfinder.api.schemas import (
    ApplicationStatusResponse,
    CreateApplicationRequest,
    SearchResponse,
    ToggleResponse,
)
from jobfinder.api.transform import application_from_api, listing_from_api, unwrap_items
from jobfinder.config import Settings, get_settings
from jobfinder.core.filters import to_query_params
from jobfinder.errors import ApiError, NetworkError, RequestTimeout
from jobfinder.log import log_debug, log_warning
from jobfinder.logging_config import get_logger
from jobfinder.models.filters import EffectiveFilter
from jobfinder.models.job import ApplicationSummary


__all__ = ["HttpJobsApi", "JobsApi"]

logger = get_logger(__name__)


class JobsApi(Protocol):
    """Remote operations the core components depend on."""

    async def search_jobs(self, effective: EffectiveFilter) -> SearchResponse: ...

    async def get_application_status(self, job_id: str) -> ApplicationStatusResponse: ...

    async def toggle_bookmark(self, job_id: str, *, bookmarked: bool) -> ToggleResponse: ...

    async def list_bookmarks(self) -> list[str]: ...

    async def cancel_application(self, application_id: str) -> ToggleResponse: ...

    async def create_application(self, request: CreateApplicationRequest) -> ApplicationSummary: ...

    async def aclose(self) -> None: ...


class HttpJobsApi:
    """:class:`JobsApi` over ``httpx.AsyncClient``.

    Transport failures raise :class:`NetworkError` (:class:`RequestTimeout` on
    expiry) and non-2xx answers raise :class:`ApiError` with the server message.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            timeout=self._settings.request_timeout_s,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpJobsApi:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._settings.api_token:
            headers["Authorization"] = f"Bearer {self._settings.api_token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: list[tuple[str, str]] | dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        log_debug(logger, "http.request", method=method, url=endpoint)
        try:
            response = await self._client.request(
                method,
                endpoint,
                params=params,
                json=json,
                headers=self._headers(),
            )
        except httpx.TimeoutException as exc:
            log_warning(logger, "http.timeout", method=method, url=endpoint)
            raise RequestTimeout(self._settings.request_timeout_s) from exc
        except httpx.HTTPError as exc:
            log_warning(logger, "http.transport_error", method=method, url=endpoint, error=str(exc))
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        data: Any
        if "application/json" in response.headers.get("content-type", ""):
            try:
                data = response.json()
            except ValueError:
                data = {"message": response.text}
        else:
            data = {"message": response.text} if response.text else None

        if response.is_error:
            body = data if isinstance(data, dict) else {}
            message = body.get("message") or (
                f"HTTP {response.status_code}: {response.reason_phrase}"
            )
            log_warning(
                logger,
                "http.api_error",
                method=method,
                url=endpoint,
                http_status=response.status_code,
                error=message,
            )
            raise ApiError(
                message,
                status_code=response.status_code,
                code=body.get("code") or "API_ERROR",
            )
        return data

    async def search_jobs(self, effective: EffectiveFilter) -> SearchResponse:
        data = await self._request("GET", "/joboffer", params=to_query_params(effective))
        listings = tuple(listing_from_api(raw) for raw in unwrap_items(data))
        return SearchResponse(listings=listings)

    async def get_application_status(self, job_id: str) -> ApplicationStatusResponse:
        data = await self._request("GET", f"/check-application/{job_id}") or {}
        if isinstance(data.get("data"), dict):
            data = data["data"]
        raw_application = data.get("application")
        return ApplicationStatusResponse(
            has_applied=bool(data.get("hasApplied")),
            application=application_from_api(raw_application) if raw_application else None,
        )

    async def toggle_bookmark(self, job_id: str, *, bookmarked: bool) -> ToggleResponse:
        """Write the target membership: POST to add, DELETE to remove."""
        if bookmarked:
            data = await self._request("POST", "/profile/bookmarks", json={"jobId": job_id})
        else:
            data = await self._request("DELETE", f"/profile/bookmarks/{job_id}")
        return _toggle_response(data)

    async def list_bookmarks(self) -> list[str]:
        data = await self._request("GET", "/profile/bookmarks")
        ids: list[str] = []
        for item in unwrap_items(data):
            if isinstance(item, dict):
                item = item.get("jobId") or item.get("id")
            if item:
                ids.append(str(item))
        return ids

    async def cancel_application(self, application_id: str) -> ToggleResponse:
        data = await self._request(
            "DELETE", "/my-applications", params={"applicationId": application_id}
        )
        return _toggle_response(data)

    async def create_application(self, request: CreateApplicationRequest) -> ApplicationSummary:
        data = await self._request("POST", "/jobapplication", json=request.to_payload())
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict) or "id" not in data:
            raise ApiError("Application response did not include an id")
        summary = application_from_api(data)
        if summary.job_id is None:
            summary = summary.model_copy(update={"job_id": request.job_offer_id})
        return summary


def _toggle_response(data: Any) -> ToggleResponse:
    if isinstance(data, dict) and "success" in data:
        return ToggleResponse(success=bool(data["success"]))
    return ToggleResponse(success=True)
