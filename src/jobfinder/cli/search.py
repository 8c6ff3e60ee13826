"""CLI command: search."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from jobfinder.config import Settings, get_settings
from jobfinder.core import ApplicationStatusCache, BookmarkStore, ResultPresenter, SearchSession
from jobfinder.core.filters import chips
from jobfinder.errors import ErrorInfo
from jobfinder.log import bind_log_context
from jobfinder.models.filters import EffectiveFilter, FacetSelection
from jobfinder.models.job import (
    ApplicationStatusEntry,
    ContractType,
    ExperienceLevel,
    ViewListing,
    WorkModality,
)
from jobfinder.models.labels import label_for

from .app import app
from .shared import build_api, console, describe_status, print_error


@dataclass
class SearchOutcome:
    listings: tuple[ViewListing, ...]
    effective: EffectiveFilter
    active_count: int
    error: ErrorInfo | None = None
    statuses: dict[str, ApplicationStatusEntry | None] = field(default_factory=dict)


async def run_search(
    settings: Settings,
    query: str,
    facets: FacetSelection,
    *,
    with_status: bool = True,
) -> SearchOutcome:
    """One pass through the engine: a single search, then per-row status."""
    api = build_api(settings)
    try:
        bookmarks = BookmarkStore(api, settings=settings)
        cache = ApplicationStatusCache(api, settings=settings)
        presenter = ResultPresenter()
        async with SearchSession(api, settings=settings, debounce_s=0) as session:
            await bookmarks.load()
            await session.submit(query, facets)

            views = presenter.present_session(session, bookmarks)
            statuses: dict[str, ApplicationStatusEntry | None] = {}
            if with_status and views:
                resolvers = [cache.mount(view.id) for view in views]
                await asyncio.gather(*(resolver.wait() for resolver in resolvers))
                statuses = {view.id: resolver.entry for view, resolver in zip(views, resolvers)}
                for resolver in resolvers:
                    resolver.unmount()

            return SearchOutcome(
                listings=views,
                effective=session.effective_filter,
                active_count=session.active_filter_count,
                error=session.error,
                statuses=statuses,
            )
    finally:
        await api.aclose()


def _salary(view: ViewListing) -> str:
    if view.salary_min is None and view.salary_max is None:
        return ""
    low = f"{view.salary_min:g}" if view.salary_min is not None else "?"
    high = f"{view.salary_max:g}" if view.salary_max is not None else "?"
    return f"{view.currency} {low}-{high}"


def render_outcome(outcome: SearchOutcome, *, with_status: bool) -> None:
    chip_text = ", ".join(value for _, value in chips(outcome.effective)) or "none"
    console.print(
        Panel(
            f"[bold]Active filters ({outcome.active_count}):[/bold] {chip_text}",
            title="Job Search",
            border_style="blue",
        )
    )
    if outcome.error is not None:
        print_error(outcome.error, title="Search failed")

    table = Table(title="Job Offers", show_header=True, header_style="bold green")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Company")
    table.add_column("Location")
    table.add_column("Modality")
    table.add_column("Salary", justify="right")
    table.add_column("Fav", justify="center")
    if with_status:
        table.add_column("Applied")

    for view in outcome.listings:
        row = [
            view.id,
            view.title,
            view.company_name,
            view.location,
            label_for(view.work_modality),
            _salary(view),
            "★" if view.is_favorite else "",
        ]
        if with_status:
            row.append(describe_status(outcome.statuses.get(view.id)))
        table.add_row(*row)

    console.print(table)
    console.print(f"[dim]{len(outcome.listings)} offers[/dim]")


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Free-text search")] = "",
    contract: Annotated[
        list[ContractType] | None,
        typer.Option("--contract", "-c", help="Contract type (repeatable)"),
    ] = None,
    modality: Annotated[
        list[WorkModality] | None,
        typer.Option("--modality", "-m", help="Work modality (repeatable)"),
    ] = None,
    level: Annotated[
        list[ExperienceLevel] | None,
        typer.Option("--level", "-l", help="Experience level (repeatable)"),
    ] = None,
    location: Annotated[
        list[str] | None,
        typer.Option("--location", help="Location (repeatable)"),
    ] = None,
    sector: Annotated[
        list[str] | None,
        typer.Option("--sector", help="Company sector (repeatable)"),
    ] = None,
    salary_min: Annotated[float | None, typer.Option("--salary-min", min=0)] = None,
    salary_max: Annotated[float | None, typer.Option("--salary-max", min=0)] = None,
    days: Annotated[
        int | None,
        typer.Option("--days", "-d", min=1, help="Published within the last N days"),
    ] = None,
    with_status: Annotated[
        bool,
        typer.Option("--status/--no-status", help="Check application status per offer"),
    ] = True,
) -> None:
    """
    Search job offers and show bookmark and application state per row.

    Example:
        jobfinder search react -c FULL_TIME --salary-min 3000
    """
    try:
        facets = FacetSelection(
            contract_type=frozenset(contract or ()),
            work_modality=frozenset(modality or ()),
            experience_level=frozenset(level or ()),
            location=frozenset(location or ()),
            sector=frozenset(sector or ()),
            salary_min=salary_min,
            salary_max=salary_max,
            published_in_days=days,
        )
    except ValueError as err:
        console.print(f"[red]Invalid filters: {err}[/red]")
        raise typer.Exit(1) from err

    settings = get_settings()
    with bind_log_context(op="cli.search"):
        outcome = asyncio.run(run_search(settings, query, facets, with_status=with_status))

    render_outcome(outcome, with_status=with_status)
    if outcome.error is not None and not outcome.listings:
        raise typer.Exit(1)
