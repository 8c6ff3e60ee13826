"""Command-line interface."""

from . import applications, bookmarks, labels, search  # noqa: F401
from .app import app


__all__ = ["app"]
