"""Persistence primitives: declarative base, column types and engine handling."""

from .base import (
    NAMING_CONVENTION,
    Base,
    TenantScopedMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    metadata,
    utc_now,
)
from .database import (
    Database,
    DatabaseConfig,
    build_async_url,
    db,
    session_scope,
    transaction_scope,
)
from .types import UTCDateTime, string_enum

__all__ = [
    "Base",
    "Database",
    "DatabaseConfig",
    "NAMING_CONVENTION",
    "TenantScopedMixin",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDPrimaryKeyMixin",
    "build_async_url",
    "db",
    "metadata",
    "session_scope",
    "string_enum",
    "transaction_scope",
    "utc_now",
]
