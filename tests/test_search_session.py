"""Tests for the search session: debouncing, sequencing and failure handling."""

import asyncio

import pytest

from jobfinder.config import Settings
from jobfinder.core.filters import compose
from jobfinder.core.search import SearchSession, SearchState
from jobfinder.errors import ErrorKind, NetworkError
from jobfinder.models.filters import FacetSelection
from jobfinder.models.job import ContractType
from tests.test_fakes import FakeJobsApi, make_listing, wait_until


def _session(api: FakeJobsApi, settings: Settings, **kwargs) -> SearchSession:
    return SearchSession(api, settings=settings, **kwargs)


class TestTriggers:
    @pytest.mark.asyncio
    async def test_settled_text_triggers_one_search(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings, debounce_s=0.02) as session:
            for text in ("r", "re", "rea", "react"):
                session.set_query_text(text)
            assert session.query_text == "react"
            assert api.search_calls == []

            await asyncio.sleep(0.05)
            await session.wait_idle()

            assert [call.query for call in api.search_calls] == ["react"]
            assert session.debounced_query == "react"
            assert session.state is SearchState.SETTLED

    @pytest.mark.asyncio
    async def test_submit_query_skips_quiet_period(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings, debounce_s=10.0) as session:
            session.set_query_text("python")
            session.submit_query()
            await session.wait_idle()
            assert [call.query for call in api.search_calls] == ["python"]

    @pytest.mark.asyncio
    async def test_unchanged_text_does_not_search_again(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings) as session:
            session.set_query_text("react")
            session.set_query_text(" react ")
            await session.wait_idle()
            assert len(api.search_calls) == 1

    @pytest.mark.asyncio
    async def test_equal_facets_do_not_search(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings) as session:
            facets = FacetSelection(contract_type=frozenset({ContractType.FULL_TIME}))
            assert session.set_facets(facets) is not None
            await session.wait_idle()

            same = FacetSelection(contract_type=frozenset({"FULL_TIME"}))
            assert session.set_facets(same) is None
            await session.wait_idle()
            assert len(api.search_calls) == 1

    @pytest.mark.asyncio
    async def test_facet_change_searches_immediately(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings, debounce_s=10.0) as session:
            task = session.toggle_facet("work_modality", "REMOTE")
            assert task is not None
            await task
            assert len(api.search_calls) == 1
            assert session.active_filter_count == 1

    @pytest.mark.asyncio
    async def test_empty_search_returns_full_listing(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings) as session:
            results = await session.refresh()
            assert [item.id for item in results] == ["job-1", "job-2", "job-3"]
            assert api.search_calls[0].query is None


class TestSequencing:
    @pytest.mark.asyncio
    async def test_stale_response_never_overwrites_newer_results(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        old, new = make_listing("old"), make_listing("new")
        api.search_results = {"a": (old,), "ab": (new,)}
        api.search_gates["a"] = asyncio.Event()

        async with _session(api, test_settings) as session:
            session.set_query_text("a")
            session.set_query_text("ab")
            await wait_until(lambda: not session.is_searching)

            assert session.results == (new,)
            shown = session.results
            version = session.results_version

            api.search_gates["a"].set()
            await session.wait_idle()

            assert session.results is shown
            assert session.results_version == version
            assert session.state is SearchState.SETTLED

    @pytest.mark.asyncio
    async def test_searching_until_latest_request_settles(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        api.search_results = {"a": (make_listing("a1"),), "ab": (make_listing("ab1"),)}
        api.search_gates["ab"] = asyncio.Event()

        async with _session(api, test_settings) as session:
            session.set_query_text("a")
            session.set_query_text("ab")
            assert session.latest_seq == 2

            await wait_until(lambda: 1 not in session._inflight)
            assert session.is_searching
            assert session.results == ()

            api.search_gates["ab"].set()
            await session.wait_idle()
            assert not session.is_searching
            assert [item.id for item in session.results] == ["ab1"]

    @pytest.mark.asyncio
    async def test_stale_failure_is_ignored(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        api.search_errors["a"] = NetworkError("offline")
        api.search_gates["a"] = asyncio.Event()

        async with _session(api, test_settings) as session:
            session.set_query_text("a")
            session.set_query_text("ab")
            await wait_until(lambda: not session.is_searching)
            api.search_gates["a"].set()
            await session.wait_idle()

            assert session.error is None
            assert session.state is SearchState.SETTLED

    @pytest.mark.asyncio
    async def test_refresh_repeats_last_direct_search(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings) as session:
            await session.search(compose("python", FacetSelection()))
            await session.refresh()
            assert [call.query for call in api.search_calls] == ["python", "python"]

    @pytest.mark.asyncio
    async def test_refresh_overtaken_by_newer_input_is_discarded(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        old, new = make_listing("old"), make_listing("new")
        api.search_results = {"old": (old,), "newer": (new,)}

        async with _session(api, test_settings) as session:
            session.set_query_text("old")
            await session.wait_idle()

            api.search_gates["old"] = asyncio.Event()
            refresh = asyncio.create_task(session.refresh())
            await wait_until(lambda: len(api.search_calls) == 2)
            session.set_query_text("newer")
            await wait_until(lambda: not session.is_searching)
            assert session.results == (new,)
            version = session.results_version

            api.search_gates["old"].set()
            await refresh
            await session.wait_idle()

            assert session.results == (new,)
            assert session.results_version == version
            assert session.state is SearchState.SETTLED

    @pytest.mark.asyncio
    async def test_submit_sets_text_and_facets_with_one_request(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        facets = FacetSelection(contract_type=frozenset({ContractType.FULL_TIME}))
        async with _session(api, test_settings, debounce_s=10.0) as session:
            await session.submit("react", facets)
            await session.wait_idle()

            assert len(api.search_calls) == 1
            assert api.search_calls[0].query == "react"
            assert api.search_calls[0].contract_type == frozenset({ContractType.FULL_TIME})
            assert session.debounced_query == "react"
            assert session.facets == facets

    @pytest.mark.asyncio
    async def test_clear_makes_inflight_request_stale(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        api.search_gates["slow"] = asyncio.Event()

        async with _session(api, test_settings) as session:
            session.set_query_text("slow")
            await wait_until(lambda: len(api.search_calls) == 1)
            session.clear()
            assert not session.is_searching

            api.search_gates["slow"].set()
            await session.wait_idle()
            assert session.results == ()
            assert session.state is SearchState.IDLE


class TestFailures:
    @pytest.mark.asyncio
    async def test_failure_keeps_previous_results(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings) as session:
            session.set_query_text("dev")
            await session.wait_idle()
            shown = session.results
            assert len(shown) == 3

            api.search_errors["design"] = NetworkError("connection reset")
            session.set_query_text("design")
            await session.wait_idle()

            assert session.results is shown
            assert session.state is SearchState.FAILED
            assert session.error is not None
            assert session.error.kind is ErrorKind.NETWORK
            assert session.error.retryable

            del api.search_errors["design"]
            api.search_results["design"] = (make_listing("d1"),)
            results = await session.retry()
            assert [item.id for item in results] == ["d1"]
            assert session.error is None

    @pytest.mark.asyncio
    async def test_failure_can_clear_results_when_configured(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings, clear_results_on_error=True) as session:
            await session.refresh()
            api.search_errors["x"] = NetworkError("down")
            session.set_query_text("x")
            await session.wait_idle()
            assert session.results == ()

    @pytest.mark.asyncio
    async def test_timeout_is_reported_as_error(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        api.search_gates["hang"] = asyncio.Event()
        async with _session(api, test_settings, timeout_s=0.02) as session:
            session.set_query_text("hang")
            await session.wait_idle()
            assert session.error is not None
            assert session.error.kind is ErrorKind.TIMEOUT
            assert not session.is_searching

    @pytest.mark.asyncio
    async def test_dismiss_error(self, api: FakeJobsApi, test_settings: Settings) -> None:
        api.search_errors["x"] = NetworkError("down")
        async with _session(api, test_settings) as session:
            session.set_query_text("x")
            await session.wait_idle()
            session.dismiss_error()
            assert session.error is None
            assert session.state is SearchState.SETTLED


class TestFacets:
    @pytest.mark.asyncio
    async def test_clear_facets_keeps_free_text(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        async with _session(api, test_settings) as session:
            session.set_query_text("react")
            session.toggle_facet("contract_type", ContractType.FULL_TIME)
            session.set_salary_range(3000, None)
            await session.wait_idle()
            assert session.active_filter_count == 3

            session.clear_facets()
            await session.wait_idle()

            assert session.query_text == "react"
            assert session.effective_filter.query == "react"
            assert session.facets.is_empty()
            assert session.active_filter_count == 1
            assert api.search_calls[-1].query == "react"

    @pytest.mark.asyncio
    async def test_query_count_follows_setting(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        settings = test_settings.model_copy(update={"count_query_as_filter": False})
        async with _session(api, settings) as session:
            session.set_query_text("react")
            session.toggle_facet("contract_type", "FULL_TIME")
            session.set_salary_range(3000, None)
            await session.wait_idle()
            assert session.active_filter_count == 2


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_listeners_are_notified(self, api: FakeJobsApi, test_settings: Settings) -> None:
        states: list[SearchState] = []
        async with _session(api, test_settings) as session:
            unsubscribe = session.subscribe(lambda s: states.append(s.state))
            await session.refresh()
            unsubscribe()
            await session.refresh()

        assert states == [SearchState.SEARCHING, SearchState.SETTLED]

    @pytest.mark.asyncio
    async def test_disposed_session_rejects_input(
        self, api: FakeJobsApi, test_settings: Settings
    ) -> None:
        session = _session(api, test_settings, debounce_s=0.01)
        session.set_query_text("pending")
        session.dispose()
        await asyncio.sleep(0.03)

        assert api.search_calls == []
        with pytest.raises(RuntimeError):
            session.set_query_text("again")
