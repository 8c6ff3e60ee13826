"""CLI application setup."""

from __future__ import annotations

import logging
import os
import sys
from typing import Annotated

import typer

from jobfinder import __version__
from jobfinder.config import get_settings
from jobfinder.log import log_info, set_log_context
from jobfinder.logging_config import setup_logging

from .shared import console


app = typer.Typer(
    help="Browse job offers, bookmarks and applications from the terminal",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Job Finder[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    _version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Enable verbose logging"),
    ] = False,
    log_file: Annotated[
        bool,
        typer.Option("--log-file/--no-log-file", help="Also write logs to the log directory"),
    ] = True,
) -> None:
    """Job Finder - search job offers and track your applications."""
    settings = get_settings()
    level = logging.DEBUG if verbose else logging.WARNING
    setup_logging(level=level, log_dir=settings.log_dir, log_to_file=log_file)

    set_log_context(pid=os.getpid())
    log_info(
        logging.getLogger("jobfinder.cli"),
        "cli.start",
        argv=" ".join(sys.argv),
        verbose=verbose,
        url=settings.api_base_url,
    )
