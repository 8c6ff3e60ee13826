"""CLI commands: status, cancel, apply."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.panel import Panel

from jobfinder.api.schemas import CreateApplicationRequest
from jobfinder.config import Settings, get_settings
from jobfinder.core import ApplicationStatusCache
from jobfinder.errors import ErrorInfo
from jobfinder.log import bind_log_context
from jobfinder.models.job import ApplicationStatusEntry, ApplicationSummary, StatusState
from jobfinder.models.labels import label_for

from .app import app
from .shared import build_api, console, describe_status, print_error


async def _status(settings: Settings, job_id: str) -> ApplicationStatusEntry | None:
    api = build_api(settings)
    try:
        cache = ApplicationStatusCache(api, settings=settings)
        resolver = cache.mount(job_id)
        entry = await resolver.wait()
        resolver.unmount()
        return entry
    finally:
        await api.aclose()


async def _cancel(settings: Settings, application_id: str) -> tuple[bool, ErrorInfo | None]:
    api = build_api(settings)
    try:
        cache = ApplicationStatusCache(api, settings=settings)
        ok = await cache.cancel_application(application_id)
        return ok, cache.last_error
    finally:
        await api.aclose()


async def _apply(
    settings: Settings, request: CreateApplicationRequest
) -> tuple[ApplicationSummary | None, ErrorInfo | None]:
    api = build_api(settings)
    try:
        cache = ApplicationStatusCache(api, settings=settings)
        summary = await cache.submit_application(request)
        return summary, cache.last_error
    finally:
        await api.aclose()


@app.command()
def status(
    job_id: Annotated[str, typer.Argument(help="Job offer id")],
) -> None:
    """Show whether you have applied to a job offer."""
    settings = get_settings()
    with bind_log_context(op="cli.status", job_id=job_id):
        entry = asyncio.run(_status(settings, job_id))

    if entry is not None and entry.state is StatusState.ERROR and entry.error is not None:
        print_error(entry.error, title="Status unavailable")
        raise typer.Exit(1)

    lines = [f"[bold]Job:[/bold] {job_id}", f"[bold]Applied:[/bold] {describe_status(entry)}"]
    if entry is not None and entry.application is not None:
        lines.append(f"[bold]Application:[/bold] {entry.application.id}")
        if entry.application.applied_at is not None:
            lines.append(f"[bold]Applied at:[/bold] {entry.application.applied_at:%Y-%m-%d %H:%M}")
    console.print(Panel("\n".join(lines), title="Application Status", border_style="blue"))


@app.command()
def cancel(
    application_id: Annotated[str, typer.Argument(help="Application id to withdraw")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation"),
    ] = False,
) -> None:
    """Withdraw a submitted application."""
    if not yes and not typer.confirm(f"Withdraw application {application_id}?"):
        raise typer.Exit(1)

    settings = get_settings()
    while True:
        with bind_log_context(op="cli.cancel", application_id=application_id):
            ok, error = asyncio.run(_cancel(settings, application_id))
        if ok:
            console.print(f"[green]Application {application_id} withdrawn[/green]")
            return
        if error is not None:
            print_error(error, title="Could not withdraw application")
        if error is None or not error.retryable or not typer.confirm("Retry?"):
            raise typer.Exit(1)


@app.command()
def apply(
    job_id: Annotated[str, typer.Argument(help="Job offer id")],
    message: Annotated[
        str | None,
        typer.Option("--message", "-m", help="Message for the recruiter"),
    ] = None,
    cv_url: Annotated[
        str | None,
        typer.Option("--cv-url", help="Link to your CV"),
    ] = None,
    cover_letter_url: Annotated[
        str | None,
        typer.Option("--cover-letter-url", help="Link to your cover letter"),
    ] = None,
) -> None:
    """Submit an application to a job offer."""
    request = CreateApplicationRequest(
        job_offer_id=job_id,
        message=message,
        cv_url=cv_url,
        cover_letter_url=cover_letter_url,
    )
    settings = get_settings()
    with bind_log_context(op="cli.apply", job_id=job_id):
        summary, error = asyncio.run(_apply(settings, request))

    if summary is None:
        if error is not None:
            print_error(error, title="Application not sent")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[bold]Application:[/bold] {summary.id}\n"
            f"[bold]Status:[/bold] {label_for(summary.status)}",
            title="Application Sent",
            border_style="green",
        )
    )
