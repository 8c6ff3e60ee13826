"""Join search results with bookmark state for rendering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from jobfinder.log import log_debug
from jobfinder.logging_config import get_logger
from jobfinder.models.job import JobListing, ViewListing


if TYPE_CHECKING:
    from jobfinder.core.bookmarks import BookmarkStore
    from jobfinder.core.search import SearchSession

__all__ = ["ResultPresenter", "present"]

logger = get_logger(__name__)


def present(listings: Iterable[JobListing], bookmark_ids: Iterable[str]) -> tuple[ViewListing, ...]:
    """Plain join, no memoisation."""
    ids = bookmark_ids if isinstance(bookmark_ids, (set, frozenset)) else frozenset(bookmark_ids)
    return tuple(ViewListing.from_listing(item, is_favorite=item.id in ids) for item in listings)


class ResultPresenter:
    """Memoised :func:`present`.

    The key is the identity of the result sequence plus the bookmark version
    (or the bookmark ids themselves when no version is given). Equal inputs
    return the very same tuple; when only bookmarks change, listings whose
    favourite flag did not change keep their previous view object.
    """

    def __init__(self) -> None:
        self._listings: Sequence[JobListing] | None = None
        self._bookmark_key: object = None
        self._views: tuple[ViewListing, ...] = ()
        self._by_id: dict[str, ViewListing] = {}

    def present(
        self,
        listings: Sequence[JobListing],
        bookmark_ids: Iterable[str],
        *,
        bookmarks_version: int | None = None,
    ) -> tuple[ViewListing, ...]:
        ids = frozenset(bookmark_ids)
        bookmark_key: object = ids if bookmarks_version is None else bookmarks_version
        if listings is self._listings and bookmark_key == self._bookmark_key:
            return self._views

        same_results = listings is self._listings
        views: list[ViewListing] = []
        reused = 0
        for item in listings:
            favorite = item.id in ids
            previous = self._by_id.get(item.id) if same_results else None
            if previous is not None and previous.is_favorite == favorite:
                views.append(previous)
                reused += 1
            else:
                views.append(ViewListing.from_listing(item, is_favorite=favorite))

        self._listings = listings
        self._bookmark_key = bookmark_key
        self._views = tuple(views)
        self._by_id = {view.id: view for view in self._views}
        log_debug(logger, "present.rebuilt", count=len(self._views), reused=reused)
        return self._views

    def present_session(
        self, session: SearchSession, bookmarks: BookmarkStore
    ) -> tuple[ViewListing, ...]:
        return self.present(
            session.results, bookmarks.ids, bookmarks_version=bookmarks.version
        )
