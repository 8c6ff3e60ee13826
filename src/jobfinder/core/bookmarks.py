"""Favourite jobs with optimistic toggling."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

from jobfinder.config import Settings, get_settings
from jobfinder.core.observers import Observable
from jobfinder.errors import ApiError, ErrorInfo, with_timeout
from jobfinder.log import log_debug, log_info, log_warning, timed
from jobfinder.logging_config import get_logger


if TYPE_CHECKING:
    from jobfinder.api.client import JobsApi

__all__ = ["PROFILE_INCOMPLETE_MESSAGE", "BookmarkStore"]

logger = get_logger(__name__)

PROFILE_INCOMPLETE_MESSAGE = (
    "Tu perfil aún no está completamente configurado. "
    "Por favor, actualiza tu perfil primero."
)


class BookmarkStore(Observable):
    """The set of bookmarked job ids, owned by this object alone.

    ``toggle`` flips membership right away and then writes to the service.
    Writes for one id run one at a time in the order the toggles were issued,
    and each write targets the opposite of the last *confirmed* membership,
    so the settled state is always the parity of the successful toggles. A
    failed write undoes exactly its own flip.
    """

    def __init__(
        self,
        api: JobsApi,
        *,
        settings: Settings | None = None,
        timeout_s: float | None = None,
        initial: Iterable[str] = (),
    ) -> None:
        super().__init__()
        settings = settings or get_settings()
        self._api = api
        self._timeout_s = settings.request_timeout_s if timeout_s is None else timeout_s
        self._ids: set[str] = set(initial)
        self._confirmed: set[str] = set(self._ids)
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: dict[str, int] = {}
        self._version = 0
        self._loading = False
        self._last_error: ErrorInfo | None = None

    def is_bookmarked(self, job_id: str) -> bool:
        return job_id in self._ids

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    @property
    def version(self) -> int:
        """Bumped on every membership change; cheap change detection for views."""
        return self._version

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def last_error(self) -> ErrorInfo | None:
        return self._last_error

    def pending(self, job_id: str) -> int:
        """Number of toggles for ``job_id`` whose remote write has not settled."""
        return self._pending.get(job_id, 0)

    def clear_error(self) -> None:
        if self._last_error is not None:
            self._last_error = None
            self._notify()

    async def load(self) -> None:
        """Fetch the bookmark list from the service.

        A missing profile is normal for new users and yields an empty set.
        """
        self._loading = True
        self._notify()
        try:
            with timed(logger, "bookmarks.load"):
                remote = await with_timeout(self._api.list_bookmarks(), self._timeout_s)
        except ApiError as exc:
            if exc.is_not_found:
                log_info(logger, "bookmarks.load.no_profile")
                remote = []
            else:
                self._fail_load(exc)
                return
        except Exception as exc:
            self._fail_load(exc)
            return
        finally:
            self._loading = False

        self._confirmed = set(remote)
        # Keep optimistic flips of toggles that are still in flight.
        odd = {job_id for job_id, count in self._pending.items() if count % 2}
        self._ids = self._confirmed ^ odd
        self._version += 1
        self._last_error = None
        log_debug(logger, "bookmarks.loaded", count=len(self._ids))
        self._notify()

    def _fail_load(self, exc: Exception) -> None:
        self._last_error = ErrorInfo.from_exception(exc)
        log_warning(logger, "bookmarks.load.failed", error=self._last_error.message)
        self._notify()

    async def toggle(self, job_id: str) -> bool:
        """Flip ``job_id`` now, confirm remotely, roll back on failure.

        Returns True when the remote write succeeded.
        """
        self._flip(job_id)
        log_debug(
            logger,
            "bookmarks.toggle.optimistic",
            job_id=job_id,
            bookmarked=self.is_bookmarked(job_id),
        )

        lock = self._locks.setdefault(job_id, asyncio.Lock())
        self._pending[job_id] = self._pending.get(job_id, 0) + 1
        try:
            try:
                await lock.acquire()
            except asyncio.CancelledError:
                # Cancelled while queued behind an earlier write for this id.
                self._flip(job_id)
                log_debug(logger, "bookmarks.toggle.cancelled", job_id=job_id)
                raise
            try:
                target = job_id not in self._confirmed
                try:
                    with timed(logger, "bookmarks.write", job_id=job_id, bookmarked=target):
                        response = await with_timeout(
                            self._api.toggle_bookmark(job_id, bookmarked=target),
                            self._timeout_s,
                        )
                    if not response.success:
                        raise ApiError("Failed to toggle bookmark")
                except asyncio.CancelledError:
                    self._flip(job_id)
                    raise
                except Exception as exc:
                    self._flip(job_id)
                    self._last_error = _toggle_error(exc)
                    log_warning(
                        logger,
                        "bookmarks.toggle.rolled_back",
                        job_id=job_id,
                        bookmarked=self.is_bookmarked(job_id),
                        error=self._last_error.message,
                    )
                    self._notify()
                    return False

                if target:
                    self._confirmed.add(job_id)
                else:
                    self._confirmed.discard(job_id)
                return True
            finally:
                lock.release()
        finally:
            self._pending[job_id] -= 1
            if not self._pending[job_id]:
                del self._pending[job_id]
                self._locks.pop(job_id, None)

    def _flip(self, job_id: str) -> None:
        if job_id in self._ids:
            self._ids.discard(job_id)
        else:
            self._ids.add(job_id)
        self._version += 1
        self._notify()


def _toggle_error(exc: Exception) -> ErrorInfo:
    if isinstance(exc, ApiError) and exc.is_not_found:
        return ErrorInfo.from_exception(
            ApiError(PROFILE_INCOMPLETE_MESSAGE, status_code=exc.status_code)
        )
    return ErrorInfo.from_exception(exc)
