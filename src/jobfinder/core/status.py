"""Per-card "already applied?" resolution over a shared, session-lifetime cache."""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from jobfinder.config import Settings, get_settings
from jobfinder.core.observers import Observable
from jobfinder.errors import ApiError, ErrorInfo, with_timeout
from jobfinder.log import bind_log_context, log_debug, log_info, log_warning, timed
from jobfinder.logging_config import get_logger
from jobfinder.models.job import ApplicationStatusEntry, ApplicationSummary, StatusState


if TYPE_CHECKING:
    from jobfinder.api.client import JobsApi
    from jobfinder.api.schemas import CreateApplicationRequest

__all__ = ["ApplicationStatusCache", "LivenessToken", "StatusResolver"]

logger = get_logger(__name__)


@dataclass(eq=False)
class LivenessToken:
    """Marks one mount of one card. Dead tokens never write to the cache."""

    job_id: str
    serial: int
    alive: bool = True


class ApplicationStatusCache(Observable):
    """Single owner of the application-status entries, keyed by job id.

    Entries are memoised for the whole session. They change only through
    explicit calls: :meth:`invalidate`, :meth:`refresh`,
    :meth:`cancel_application` and :meth:`submit_application`.

    Each job id has a generation counter. A status fetch remembers the
    generation it started in and is dropped if the counter moved on, which
    happens when the last live mount goes away before the fetch settles or
    when the entry is invalidated.
    """

    def __init__(
        self,
        api: JobsApi,
        *,
        settings: Settings | None = None,
        timeout_s: float | None = None,
    ) -> None:
        super().__init__()
        settings = settings or get_settings()
        self._api = api
        self._timeout_s = settings.request_timeout_s if timeout_s is None else timeout_s
        self._entries: dict[str, ApplicationStatusEntry] = {}
        self._live: dict[str, set[LivenessToken]] = {}
        self._generation: dict[str, int] = {}
        self._fetches: dict[str, asyncio.Task[ApplicationStatusEntry | None]] = {}
        self._serials = itertools.count(1)
        self._last_error: ErrorInfo | None = None

    # -- reads -----------------------------------------------------------

    def get(self, job_id: str) -> ApplicationStatusEntry | None:
        return self._entries.get(job_id)

    @property
    def entries(self) -> dict[str, ApplicationStatusEntry]:
        return dict(self._entries)

    def live_mounts(self, job_id: str) -> int:
        return len(self._live.get(job_id, ()))

    @property
    def last_error(self) -> ErrorInfo | None:
        """Error of the last failed cancel or submit; retryable after user confirmation."""
        return self._last_error

    # -- mounting --------------------------------------------------------

    def mount(self, job_id: str) -> StatusResolver:
        resolver = StatusResolver(self)
        resolver.mount(job_id)
        return resolver

    def _attach(self, job_id: str) -> LivenessToken:
        token = LivenessToken(job_id=job_id, serial=next(self._serials))
        self._live.setdefault(job_id, set()).add(token)

        entry = self._entries.get(job_id)
        if entry is not None and entry.state is StatusState.RESOLVED:
            log_debug(logger, "status.mount.cached", job_id=job_id, mount=token.serial)
        elif job_id in self._fetches:
            log_debug(logger, "status.mount.joined", job_id=job_id, mount=token.serial)
        else:
            if entry is None:
                self._entries[job_id] = ApplicationStatusEntry(job_id=job_id)
            self._start_fetch(job_id, token)
        return token

    def _detach(self, token: LivenessToken) -> None:
        if not token.alive:
            return
        token.alive = False
        job_id = token.job_id
        live = self._live.get(job_id)
        if live is not None:
            live.discard(token)
            if live:
                return
            del self._live[job_id]

        entry = self._entries.get(job_id)
        if entry is not None and entry.state in (StatusState.IDLE, StatusState.LOADING):
            # Nobody is waiting: drop the half-built entry and orphan its fetch.
            del self._entries[job_id]
            self._fetches.pop(job_id, None)
            self._bump(job_id)
            log_debug(logger, "status.unmount.discarded", job_id=job_id, mount=token.serial)
            self._notify()

    # -- fetching --------------------------------------------------------

    def _bump(self, job_id: str) -> None:
        self._generation[job_id] = self._generation.get(job_id, 0) + 1

    def _start_fetch(self, job_id: str, token: LivenessToken) -> None:
        generation = self._generation.get(job_id, 0)
        self._entries[job_id] = ApplicationStatusEntry(job_id=job_id, state=StatusState.LOADING)
        task = asyncio.ensure_future(self._fetch(job_id, generation, token.serial))
        self._fetches[job_id] = task

        def _forget(done: asyncio.Task[ApplicationStatusEntry | None]) -> None:
            if self._fetches.get(job_id) is done:
                del self._fetches[job_id]

        task.add_done_callback(_forget)
        self._notify()

    async def _fetch(
        self, job_id: str, generation: int, mount_serial: int
    ) -> ApplicationStatusEntry | None:
        with bind_log_context(job_id=job_id, mount=mount_serial):
            try:
                with timed(logger, "status.request"):
                    response = await with_timeout(
                        self._api.get_application_status(job_id), self._timeout_s
                    )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                entry = ApplicationStatusEntry(
                    job_id=job_id,
                    state=StatusState.ERROR,
                    error=ErrorInfo.from_exception(exc),
                )
            else:
                entry = ApplicationStatusEntry(
                    job_id=job_id,
                    state=StatusState.RESOLVED,
                    has_applied=response.has_applied,
                    application=response.application if response.has_applied else None,
                )

            if self._generation.get(job_id, 0) != generation or not self._live.get(job_id):
                log_debug(logger, "status.stale.discarded", state=entry.state)
                return self._entries.get(job_id)

            self._entries[job_id] = entry
            if entry.state is StatusState.ERROR:
                log_warning(
                    logger, "status.failed", error=entry.error.message if entry.error else None
                )
            else:
                log_debug(logger, "status.resolved", has_applied=entry.has_applied)
            self._notify()
            return entry

    async def wait(self, job_id: str) -> ApplicationStatusEntry | None:
        """Wait for the current fetch of ``job_id`` (if any) and return the entry."""
        task = self._fetches.get(job_id)
        if task is not None:
            await asyncio.shield(task)
        return self._entries.get(job_id)

    def invalidate(self, job_id: str) -> None:
        """Forget the entry. Cards still mounted get a fresh fetch."""
        self._bump(job_id)
        self._fetches.pop(job_id, None)
        self._entries.pop(job_id, None)
        live = self._live.get(job_id)
        if live:
            self._start_fetch(job_id, next(iter(live)))
        else:
            self._notify()
        log_debug(logger, "status.invalidated", job_id=job_id, mount=len(live or ()))

    async def refresh(self, job_id: str) -> ApplicationStatusEntry | None:
        self.invalidate(job_id)
        return await self.wait(job_id)

    # -- user actions ----------------------------------------------------

    async def cancel_application(self, application_id: str) -> bool:
        """Withdraw an application.

        On success every entry holding that application flips to "not applied",
        which all mounted cards see. On failure nothing changes and
        :attr:`last_error` carries a retryable error.
        """
        try:
            with timed(logger, "status.cancel", level=logging.INFO, application_id=application_id):
                response = await with_timeout(
                    self._api.cancel_application(application_id), self._timeout_s
                )
            if not response.success:
                raise ApiError("Failed to cancel application")
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._last_error = ErrorInfo.from_exception(exc, retryable=True)
            log_warning(
                logger,
                "status.cancel.failed",
                application_id=application_id,
                error=self._last_error.message,
            )
            self._notify()
            return False

        self._last_error = None
        updated = 0
        for job_id, entry in list(self._entries.items()):
            if entry.application is not None and entry.application.id == application_id:
                self._entries[job_id] = ApplicationStatusEntry(
                    job_id=job_id, state=StatusState.RESOLVED, has_applied=False
                )
                self._bump(job_id)
                updated += 1
        log_info(logger, "status.cancel.ok", application_id=application_id, count=updated)
        self._notify()
        return True

    async def submit_application(
        self, request: CreateApplicationRequest
    ) -> ApplicationSummary | None:
        """Create an application and record it as the job's resolved status."""
        job_id = request.job_offer_id
        try:
            with timed(logger, "status.submit", level=logging.INFO, job_id=job_id):
                summary = await with_timeout(
                    self._api.create_application(request), self._timeout_s
                )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._last_error = ErrorInfo.from_exception(exc)
            log_warning(
                logger, "status.submit.failed", job_id=job_id, error=self._last_error.message
            )
            self._notify()
            return None

        self._last_error = None
        # A check that started before the submission would report "not applied".
        self._bump(job_id)
        self._fetches.pop(job_id, None)
        self._entries[job_id] = ApplicationStatusEntry(
            job_id=job_id,
            state=StatusState.RESOLVED,
            has_applied=True,
            application=summary,
        )
        self._notify()
        return summary


class StatusResolver:
    """One job card's view of the cache.

    The same resolver can be re-mounted on another job id, which is what a
    recycled list cell does; the previous mount is released first.
    """

    def __init__(self, cache: ApplicationStatusCache) -> None:
        self._cache = cache
        self._token: LivenessToken | None = None

    @property
    def job_id(self) -> str | None:
        return self._token.job_id if self._token else None

    @property
    def token(self) -> LivenessToken | None:
        return self._token

    @property
    def mounted(self) -> bool:
        return self._token is not None and self._token.alive

    def mount(self, job_id: str) -> None:
        if self._token is not None:
            self.unmount()
        self._token = self._cache._attach(job_id)

    def unmount(self) -> None:
        if self._token is None:
            return
        self._cache._detach(self._token)
        self._token = None

    @property
    def entry(self) -> ApplicationStatusEntry | None:
        if not self.mounted:
            return None
        return self._cache.get(self._token.job_id)  # type: ignore[union-attr]

    async def wait(self) -> ApplicationStatusEntry | None:
        if not self.mounted:
            return None
        await self._cache.wait(self._token.job_id)  # type: ignore[union-attr]
        return self.entry

    async def cancel_application(self) -> bool:
        """Withdraw this card's application, if it has one."""
        entry = self.entry
        if entry is None or entry.application is None:
            return False
        return await self._cache.cancel_application(entry.application.id)
