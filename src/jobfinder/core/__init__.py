"""Search, bookmark and application-status engine."""

from jobfinder.core.bookmarks import BookmarkStore
from jobfinder.core.debounce import Debouncer
from jobfinder.core.presenter import ResultPresenter, present
from jobfinder.core.search import SearchSession, SearchState
from jobfinder.core.status import ApplicationStatusCache, LivenessToken, StatusResolver


__all__ = [
    "ApplicationStatusCache",
    "BookmarkStore",
    "Debouncer",
    "LivenessToken",
    "ResultPresenter",
    "SearchSession",
    "SearchState",
    "StatusResolver",
    "present",
]
