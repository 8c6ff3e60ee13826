"""Search session: query text, facets and the visible result list."""

from __future__ import annotations

import asyncio
import itertools
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from jobfinder.config import Settings, get_settings
from jobfinder.core import filters as filter_ops
from jobfinder.core.debounce import Debouncer
from jobfinder.core.observers import Observable
from jobfinder.errors import ErrorInfo, StaleResultDiscarded, with_timeout
from jobfinder.log import bind_log_context, log_debug, log_info, log_warning, timed
from jobfinder.logging_config import get_logger
from jobfinder.models.filters import EffectiveFilter, FacetSelection
from jobfinder.models.job import JobListing


if TYPE_CHECKING:
    from jobfinder.api.client import JobsApi

__all__ = ["SearchSession", "SearchState"]

logger = get_logger(__name__)

_session_ids = itertools.count(1)


class SearchState(StrEnum):
    IDLE = "idle"
    SEARCHING = "searching"
    SETTLED = "settled"
    FAILED = "failed"


class SearchSession(Observable):
    """Owns the search inputs and the result list shown to the user.

    Every trigger (settled free text, a facet change, a manual refresh) issues
    a request tagged with the next sequence number. A response is applied only
    when its number is the latest issued; older responses that arrive late are
    dropped without touching visible state. The request itself is never
    aborted, only its result.

    A failed search keeps the previous results on screen unless
    ``clear_results_on_error`` is set.
    """

    def __init__(
        self,
        api: JobsApi,
        *,
        settings: Settings | None = None,
        debounce_s: float | None = None,
        timeout_s: float | None = None,
        clear_results_on_error: bool | None = None,
    ) -> None:
        super().__init__()
        settings = settings or get_settings()
        self._api = api
        self._timeout_s = settings.request_timeout_s if timeout_s is None else timeout_s
        self._clear_results_on_error = (
            settings.clear_results_on_error
            if clear_results_on_error is None
            else clear_results_on_error
        )
        self._count_query = settings.count_query_as_filter
        self._debouncer: Debouncer[str] = Debouncer(
            settings.search_debounce_s if debounce_s is None else debounce_s,
            self._on_query_settled,
            name="search.debounce",
        )
        self._session_id = next(_session_ids)

        self._query_text = ""
        self._debounced_query = ""
        self._facets = FacetSelection()

        self._state = SearchState.IDLE
        self._results: tuple[JobListing, ...] = ()
        self._results_version = 0
        self._error: ErrorInfo | None = None
        self._last_filter: EffectiveFilter | None = None

        self._issued_seq = 0
        self._settled_seq = 0
        self._inflight: dict[int, asyncio.Task[tuple[JobListing, ...]]] = {}
        self._disposed = False

    # -- lifecycle -------------------------------------------------------

    async def __aenter__(self) -> SearchSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.dispose()

    def dispose(self) -> None:
        """Stop the debounce timer and abandon outstanding requests."""
        if self._disposed:
            return
        self._disposed = True
        self._debouncer.dispose()
        for task in self._inflight.values():
            task.cancel()
        self._inflight.clear()
        self._listeners.clear()
        log_debug(logger, "search.disposed", session=self._session_id)

    @property
    def disposed(self) -> bool:
        return self._disposed

    # -- read side -------------------------------------------------------

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def query_text(self) -> str:
        return self._query_text

    @property
    def debounced_query(self) -> str:
        return self._debounced_query

    @property
    def facets(self) -> FacetSelection:
        return self._facets

    @property
    def effective_filter(self) -> EffectiveFilter:
        return filter_ops.compose(self._debounced_query, self._facets)

    @property
    def active_filter_count(self) -> int:
        return filter_ops.active_count(self.effective_filter, count_query=self._count_query)

    @property
    def results(self) -> tuple[JobListing, ...]:
        """Current result list. The same tuple object is returned until new results land."""
        return self._results

    @property
    def results_version(self) -> int:
        return self._results_version

    @property
    def error(self) -> ErrorInfo | None:
        return self._error

    @property
    def is_searching(self) -> bool:
        # True until the newest request settles, regardless of older stragglers.
        return self._settled_seq < self._issued_seq

    @property
    def latest_seq(self) -> int:
        return self._issued_seq

    # -- triggers --------------------------------------------------------

    def set_query_text(self, text: str) -> None:
        """Record raw input; a search follows once the text settles."""
        self._ensure_live()
        self._query_text = text
        self._debouncer.push(text)

    def submit_query(self) -> None:
        """Skip the remaining quiet period (e.g. the user pressed enter)."""
        self._ensure_live()
        self._debouncer.flush()

    def submit(
        self, text: str, facets: FacetSelection | None = None
    ) -> asyncio.Task[tuple[JobListing, ...]]:
        """Set free text and facets together and issue a single search right away."""
        self._ensure_live()
        self._debouncer.cancel()
        self._query_text = text
        self._debounced_query = text.strip()
        if facets is not None:
            self._facets = facets
        return self._trigger()

    def set_facets(self, facets: FacetSelection) -> asyncio.Task[tuple[JobListing, ...]] | None:
        self._ensure_live()
        if facets == self._facets:
            return None
        self._facets = facets
        log_debug(
            logger,
            "search.facets.changed",
            session=self._session_id,
            filters=self._chip_values(),
        )
        return self._trigger()

    def toggle_facet(self, name: str, value: Any) -> asyncio.Task[tuple[JobListing, ...]] | None:
        return self.set_facets(filter_ops.toggle_facet_value(self._facets, name, value))

    def set_salary_range(
        self, salary_min: float | None, salary_max: float | None
    ) -> asyncio.Task[tuple[JobListing, ...]] | None:
        return self.set_facets(filter_ops.set_salary_range(self._facets, salary_min, salary_max))

    def set_published_in_days(
        self, days: int | None
    ) -> asyncio.Task[tuple[JobListing, ...]] | None:
        return self.set_facets(filter_ops.set_published_in_days(self._facets, days))

    def clear_facets(self) -> asyncio.Task[tuple[JobListing, ...]] | None:
        """Reset every facet. The free-text query is deliberately left alone."""
        return self.set_facets(filter_ops.clear(self._facets))

    async def refresh(self) -> tuple[JobListing, ...]:
        """Re-issue the filter of the last request; takes part in normal sequencing."""
        self._ensure_live()
        effective = self._last_filter if self._last_filter is not None else self.effective_filter
        return await self.search(effective)

    async def retry(self) -> tuple[JobListing, ...]:
        return await self.refresh()

    def dismiss_error(self) -> None:
        if self._error is None:
            return
        self._error = None
        if self._state is SearchState.FAILED:
            self._state = SearchState.SETTLED
        self._notify()

    def clear(self) -> None:
        """Forget results and errors; pending requests become stale."""
        self._ensure_live()
        self._debouncer.cancel()
        # Anything still in flight must not repopulate the cleared list.
        self._settled_seq = self._issued_seq = self._issued_seq + 1
        self._results = ()
        self._results_version += 1
        self._error = None
        self._state = SearchState.IDLE
        self._notify()

    async def search(self, effective: EffectiveFilter) -> tuple[JobListing, ...]:
        """Issue a search and wait for it to settle.

        Returns the visible result list afterwards, which is this request's
        listings unless it failed or was superseded.
        """
        self._ensure_live()
        task = self._start(effective)
        return await asyncio.shield(task)

    async def wait_idle(self) -> None:
        """Wait for pending debounce callbacks and every in-flight request."""
        await self._debouncer.drain()
        while self._inflight:
            await asyncio.gather(*list(self._inflight.values()), return_exceptions=True)

    # -- internals -------------------------------------------------------

    def _ensure_live(self) -> None:
        if self._disposed:
            raise RuntimeError("SearchSession has been disposed")

    def _chip_values(self) -> list[str]:
        return [value for _, value in filter_ops.chips(self.effective_filter, count_query=False)]

    def _on_query_settled(self, text: str) -> None:
        trimmed = text.strip()
        if trimmed == self._debounced_query:
            log_debug(logger, "search.query.unchanged", session=self._session_id)
            return
        self._debounced_query = trimmed
        self._trigger()

    def _trigger(self) -> asyncio.Task[tuple[JobListing, ...]]:
        return self._start(self.effective_filter)

    def _start(self, effective: EffectiveFilter) -> asyncio.Task[tuple[JobListing, ...]]:
        self._issued_seq += 1
        seq = self._issued_seq
        self._last_filter = effective
        was_searching = self._state is SearchState.SEARCHING
        self._state = SearchState.SEARCHING
        task = asyncio.ensure_future(self._run(seq, effective))
        self._inflight[seq] = task
        task.add_done_callback(lambda _t, s=seq: self._inflight.pop(s, None))
        log_debug(
            logger,
            "search.issued",
            session=self._session_id,
            seq=seq,
            query=effective.query,
            inflight=len(self._inflight),
        )
        if not was_searching:
            self._notify()
        return task

    def _check_latest(self, seq: int) -> None:
        if seq != self._issued_seq:
            raise StaleResultDiscarded(seq, self._issued_seq)

    async def _run(self, seq: int, effective: EffectiveFilter) -> tuple[JobListing, ...]:
        with bind_log_context(session=self._session_id, seq=seq):
            try:
                with timed(logger, "search.request", query=effective.query):
                    response = await with_timeout(
                        self._api.search_jobs(effective), self._timeout_s
                    )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                try:
                    self._check_latest(seq)
                except StaleResultDiscarded as stale:
                    log_debug(logger, "search.failure.discarded", latest_seq=stale.latest_seq)
                    return self._results
                self._apply_failure(seq, exc)
                return self._results

            try:
                self._check_latest(seq)
            except StaleResultDiscarded as stale:
                log_info(
                    logger,
                    "search.stale.discarded",
                    latest_seq=stale.latest_seq,
                    count=len(response.listings),
                )
                return self._results

            self._apply_results(seq, tuple(response.listings))
            return self._results

    def _apply_results(self, seq: int, listings: tuple[JobListing, ...]) -> None:
        self._settled_seq = seq
        self._results = listings
        self._results_version += 1
        self._error = None
        self._state = SearchState.SETTLED
        log_info(logger, "search.applied", count=len(listings))
        self._notify()

    def _apply_failure(self, seq: int, exc: Exception) -> None:
        self._settled_seq = seq
        self._error = ErrorInfo.from_exception(exc)
        self._state = SearchState.FAILED
        if self._clear_results_on_error and self._results:
            self._results = ()
            self._results_version += 1
        log_warning(
            logger,
            "search.failed",
            error=self._error.message,
            kind=self._error.kind,
            kept=len(self._results),
        )
        self._notify()
