"""Error taxonomy shared by the API client and the core components."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field


__all__ = [
    "ApiError",
    "ErrorInfo",
    "ErrorKind",
    "JobFinderError",
    "NetworkError",
    "RequestTimeout",
    "StaleResultDiscarded",
    "UnknownFacetError",
    "with_timeout",
]

T = TypeVar("T")


class JobFinderError(Exception):
    """Base class for all errors raised by this package."""


class NetworkError(JobFinderError):
    """The transport failed before a response was received."""


class RequestTimeout(NetworkError):
    """A network call did not settle within the configured timeout."""

    def __init__(self, timeout_s: float) -> None:
        super().__init__(f"Request timed out after {timeout_s:g}s")
        self.timeout_s = timeout_s


class ApiError(JobFinderError):
    """The service answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str = "API_ERROR",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404 or "profile not found" in self.message.lower()


class StaleResultDiscarded(JobFinderError):
    """A response belongs to a superseded request. Never shown to the user."""

    def __init__(self, seq: int, latest_seq: int) -> None:
        super().__init__(f"Result #{seq} superseded by #{latest_seq}")
        self.seq = seq
        self.latest_seq = latest_seq


class UnknownFacetError(ValueError):
    """A facet name that is not part of the fixed facet record."""


class ErrorKind(StrEnum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    API = "api"
    UNKNOWN = "unknown"


class ErrorInfo(BaseModel):
    """User-facing description of a failed operation."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    status_code: int | None = Field(default=None)
    retryable: bool = Field(default=True)

    @classmethod
    def from_exception(cls, exc: BaseException, *, retryable: bool | None = None) -> ErrorInfo:
        if isinstance(exc, RequestTimeout):
            info = cls(kind=ErrorKind.TIMEOUT, message=str(exc))
        elif isinstance(exc, NetworkError):
            info = cls(kind=ErrorKind.NETWORK, message=str(exc) or "Network error occurred")
        elif isinstance(exc, ApiError):
            # 4xx other than 408/429 will not get better by retrying.
            status = exc.status_code
            client_error = status is not None and 400 <= status < 500 and status not in (408, 429)
            info = cls(
                kind=ErrorKind.API,
                message=exc.message,
                status_code=status,
                retryable=not client_error,
            )
        else:
            info = cls(kind=ErrorKind.UNKNOWN, message=str(exc) or type(exc).__name__)
        if retryable is not None:
            info = info.model_copy(update={"retryable": retryable})
        return info


async def with_timeout(awaitable: Awaitable[T], timeout_s: float | None) -> T:
    """Await ``awaitable`` for at most ``timeout_s`` seconds.

    Expiry raises :class:`RequestTimeout` so it follows the normal error path.
    """
    if timeout_s is None or timeout_s <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except TimeoutError as exc:
        raise RequestTimeout(timeout_s) from exc
