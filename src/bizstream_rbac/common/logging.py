"""Console logging for the RBAC core.

Records render as one line: UTC timestamp, level, logger name, the bound
correlation id and the event name, followed by every ``extra`` field as
``key=value``. Only the standard :mod:`logging` machinery is used.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from bizstream_rbac.settings import Settings

__all__ = [
    "ConsoleLogFormatter",
    "bind_request_context",
    "clear_request_context",
    "log_context",
    "setup_logging",
]

_correlation_id: ContextVar[str | None] = ContextVar("bizstream_correlation_id", default=None)

# Anything on a record outside this set arrived through ``extra``.
_BUILTIN_RECORD_FIELDS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "asctime",
    "correlation_id",
    "message",
    "taskName",
}

_INSTALLED_MARKER = "_bizstream_console_installed"

_LINE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s [cid=%(correlation_id)s] %(message)s"


class ConsoleLogFormatter(logging.Formatter):
    """One-line formatter, e.g.::

        2026-03-02T10:15:00.302Z WARNING bizstream_rbac.core.rbac.resolver [cid=-]
        rbac.resolve.unknown_role role=AUDITOR fallback_role=SUPPORT_TEAM
    """

    def __init__(self) -> None:
        super().__init__(fmt=_LINE_FORMAT)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC)
        return f"{stamp:%Y-%m-%dT%H:%M:%S}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = _correlation_id.get() or "-"
        line = super().format(record)
        pairs = [
            f"{key}={_render(value)}"
            for key, value in record.__dict__.items()
            if key not in _BUILTIN_RECORD_FIELDS and not key.startswith("_")
        ]
        return " ".join([line, *pairs])


def setup_logging(settings: Settings) -> None:
    """Send every logger through one console handler on the root logger.

    The handler is installed once per process; repeat calls only move the
    root level to ``settings.logging_level``.
    """

    root = logging.getLogger()
    level = logging.getLevelName(settings.logging_level.upper())
    root.setLevel(level if isinstance(level, int) else logging.INFO)

    if getattr(root, _INSTALLED_MARKER, False):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(ConsoleLogFormatter())
    root.handlers = [handler]

    # Library loggers sometimes ship their own handlers; route them to root.
    for name in ("sqlalchemy", "sqlalchemy.engine", "aiosqlite"):
        library_logger = logging.getLogger(name)
        library_logger.handlers.clear()
        library_logger.propagate = True

    setattr(root, _INSTALLED_MARKER, True)


def bind_request_context(correlation_id: str | None) -> None:
    """Tag log lines emitted in the current context with ``correlation_id``."""

    _correlation_id.set(correlation_id)


def clear_request_context() -> None:
    _correlation_id.set(None)


def log_context(
    *,
    tenant_id: Any = None,
    role_id: Any = None,
    staff_id: Any = None,
    role: str | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """Return an ``extra`` mapping for a structured log call.

    Identifier arguments are stringified and left out when ``None``; other
    keyword fields are passed through untouched.
    """

    identifiers = {"tenant_id": tenant_id, "role_id": role_id, "staff_id": staff_id}
    payload: dict[str, Any] = {
        key: str(value) for key, value in identifiers.items() if value is not None
    }
    if role is not None:
        payload["role"] = role
    payload.update(fields)
    return payload


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(map(str, value))
    return str(value)
