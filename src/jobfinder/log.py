"""Structured one-line logging helpers.

Every call site logs a dotted event name followed by ``key=value`` pairs, e.g.::

    search.applied seq=4 count=20 duration_ms=130

Values are shortened, secrets are masked and fields bound with
:func:`bind_log_context` are merged into every line emitted from the same task.
"""

from __future__ import annotations

import contextvars
import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any


__all__ = [
    "bind_log_context",
    "get_log_context",
    "log_debug",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "set_log_context",
    "timed",
]


_CTX: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "jobfinder_log_ctx",
    default=None,
)

_SENSITIVE_KEY_FRAGMENTS = (
    "password",
    "token",
    "secret",
    "cookie",
    "auth",
    "bearer",
)

_DEFAULT_TRUNCATE_AT = 200
_MAX_LIST_ITEMS = 5

# Identifiers first, then outcome, then everything else alphabetically.
_KEY_PRIORITY: dict[str, int] = {
    "session": 0,
    "op": 1,
    "seq": 2,
    "latest_seq": 3,
    "state": 4,
    "job_id": 10,
    "application_id": 11,
    "mount": 12,
    "query": 13,
    "filters": 14,
    "bookmarked": 15,
    "count": 16,
    "duration_ms": 17,
    "url": 20,
    "http_status": 21,
    "timeout_s": 22,
    "error": 90,
    "exc": 91,
}


def bind_log_context(**fields: Any):
    """Bind fields to the current task context for the duration of a ``with`` block."""

    @contextmanager
    def _cm():
        current = _CTX.get() or {}
        merged = dict(current)
        merged.update({k: v for k, v in fields.items() if v is not None})
        token = _CTX.set(merged)
        try:
            yield
        finally:
            _CTX.reset(token)

    return _cm()


def set_log_context(**fields: Any) -> None:
    """Set fields on the current context without automatic reset."""
    current = _CTX.get() or {}
    merged = dict(current)
    merged.update({k: v for k, v in fields.items() if v is not None})
    _CTX.set(merged)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the currently bound context."""
    return dict(_CTX.get() or {})


def _is_sensitive_key(key: str) -> bool:
    k = key.lower()
    return any(fragment in k for fragment in _SENSITIVE_KEY_FRAGMENTS)


def _shorten_str(s: str, *, limit: int = _DEFAULT_TRUNCATE_AT) -> str:
    if len(s) <= limit:
        return s
    return f"{s[: max(0, limit - 3)]}..."


def _fmt_value(value: Any) -> str:
    out: str
    if value is None:
        out = "null"
    elif isinstance(value, bool):
        out = "true" if value else "false"
    elif isinstance(value, Enum):
        out = str(value.value)
    elif isinstance(value, (int, float)):
        out = str(value)
    elif isinstance(value, str):
        out = _shorten_str(value) if value else '""'
    elif isinstance(value, (list, tuple, set, frozenset)):
        seq = sorted(value, key=str) if isinstance(value, (set, frozenset)) else list(value)
        if len(seq) <= _MAX_LIST_ITEMS:
            inner = ",".join(_fmt_value(v) for v in seq)
            out = f"[{inner}]"
        else:
            out = f"[len={len(seq)}]"
    elif isinstance(value, dict):
        out = f"{{len={len(value)}}}"
    else:
        out = _shorten_str(repr(value))
    return out


def _sorted_kv_items(fields: dict[str, Any]) -> list[tuple[str, Any]]:
    def _key(item: tuple[str, Any]) -> tuple[int, str]:
        k, _ = item
        return (_KEY_PRIORITY.get(k, 50), k)

    return sorted(fields.items(), key=_key)


def _format_event(event: str, fields: dict[str, Any]) -> str:
    merged = dict(_CTX.get() or {})
    merged.update(fields)
    merged = {k: v for k, v in merged.items() if v is not None}

    parts: list[str] = [event]
    for k, v in _sorted_kv_items(merged):
        if _is_sensitive_key(k):
            parts.append(f"{k}=***")
            continue
        parts.append(f"{k}={_fmt_value(v)}")
    return " ".join(parts)


def _log(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    logger.log(level, _format_event(event, fields))


def log_debug(logger: logging.Logger, event: str, **fields: Any) -> None:
    _log(logger, logging.DEBUG, event, **fields)


def log_info(logger: logging.Logger, event: str, **fields: Any) -> None:
    _log(logger, logging.INFO, event, **fields)


def log_warning(logger: logging.Logger, event: str, **fields: Any) -> None:
    _log(logger, logging.WARNING, event, **fields)


def log_error(logger: logging.Logger, event: str, **fields: Any) -> None:
    _log(logger, logging.ERROR, event, **fields)


def log_exception(logger: logging.Logger, event: str, **fields: Any) -> None:
    if not logger.isEnabledFor(logging.ERROR):
        return
    logger.exception(_format_event(event, fields))


@contextmanager
def timed(
    logger: logging.Logger,
    op: str,
    *,
    level: int = logging.DEBUG,
    **fields: Any,
):
    """Time an operation and log ``op.start`` / ``op.ok`` / ``op.error``.

    Failures are logged at WARNING; callers decide whether they are fatal.
    """
    start = time.perf_counter()
    _log(logger, level, f"{op}.start", **fields)
    try:
        yield
    except Exception as exc:
        duration_ms = int((time.perf_counter() - start) * 1000.0)
        _log(
            logger,
            logging.WARNING,
            f"{op}.error",
            duration_ms=duration_ms,
            exc=type(exc).__name__,
            **fields,
        )
        raise
    else:
        duration_ms = int((time.perf_counter() - start) * 1000.0)
        _log(logger, level, f"{op}.ok", duration_ms=duration_ms, **fields)
