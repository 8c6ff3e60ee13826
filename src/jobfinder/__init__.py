"""Job Finder - job discovery and application-state engine for a jobs board client."""

from importlib.metadata import PackageNotFoundError, version


try:
    __version__ = version("job-finder")
except PackageNotFoundError:  # pragma: no cover
    # When running from a source checkout without an installed distribution.
    __version__ = "0.0.0"

__all__ = ["__version__"]
