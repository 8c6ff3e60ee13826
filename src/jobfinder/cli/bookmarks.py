"""CLI commands: bookmarks, bookmark."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.table import Table

from jobfinder.config import Settings, get_settings
from jobfinder.core import BookmarkStore
from jobfinder.errors import ErrorInfo
from jobfinder.log import bind_log_context

from .app import app
from .shared import build_api, console, print_error


async def _load(settings: Settings) -> tuple[frozenset[str], ErrorInfo | None]:
    api = build_api(settings)
    try:
        store = BookmarkStore(api, settings=settings)
        await store.load()
        return store.ids, store.last_error
    finally:
        await api.aclose()


async def _toggle(settings: Settings, job_id: str) -> tuple[bool, bool, ErrorInfo | None]:
    api = build_api(settings)
    try:
        store = BookmarkStore(api, settings=settings)
        await store.load()
        if store.last_error is not None:
            return False, store.is_bookmarked(job_id), store.last_error
        ok = await store.toggle(job_id)
        return ok, store.is_bookmarked(job_id), store.last_error
    finally:
        await api.aclose()


@app.command()
def bookmarks() -> None:
    """List bookmarked job offer ids."""
    settings = get_settings()
    with bind_log_context(op="cli.bookmarks"):
        ids, error = asyncio.run(_load(settings))

    if error is not None:
        print_error(error, title="Could not load bookmarks")
        raise typer.Exit(1)

    table = Table(title="Bookmarks", show_header=True, header_style="bold green")
    table.add_column("Job ID", style="cyan")
    for job_id in sorted(ids):
        table.add_row(job_id)
    console.print(table)
    console.print(f"[dim]{len(ids)} bookmarked[/dim]")


@app.command()
def bookmark(
    job_id: Annotated[str, typer.Argument(help="Job offer id to add or remove")],
) -> None:
    """Toggle a job offer in the bookmark list."""
    settings = get_settings()
    with bind_log_context(op="cli.bookmark", job_id=job_id):
        ok, bookmarked, error = asyncio.run(_toggle(settings, job_id))

    if not ok:
        if error is not None:
            print_error(error, title="Bookmark not changed")
        raise typer.Exit(1)

    if bookmarked:
        console.print(f"[green]★ {job_id} added to bookmarks[/green]")
    else:
        console.print(f"[yellow]{job_id} removed from bookmarks[/yellow]")
