"""Shared CLI helpers."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel

from jobfinder.api.client import HttpJobsApi, JobsApi
from jobfinder.config import Settings
from jobfinder.errors import ErrorInfo
from jobfinder.models.job import ApplicationStatusEntry, StatusState
from jobfinder.models.labels import label_for


console = Console()


def build_api(settings: Settings) -> JobsApi:
    """Create the service client used by every command."""
    return HttpJobsApi(settings)


def print_error(error: ErrorInfo, *, title: str = "Error") -> None:
    hint = "\n[dim]This can be retried.[/dim]" if error.retryable else ""
    console.print(Panel(f"{error.message}{hint}", title=title, border_style="red"))


def describe_status(entry: ApplicationStatusEntry | None) -> str:
    """Short rich-markup text for a job's application state."""
    if entry is None or entry.state in (StatusState.IDLE, StatusState.LOADING):
        return "[dim]...[/dim]"
    if entry.state is StatusState.ERROR:
        return "[red]no verificado[/red]"
    if not entry.has_applied:
        return "-"
    if entry.application is None:
        return "[green]Aplicado[/green]"
    return f"[green]{label_for(entry.application.status)}[/green]"
