"""Declarative base and the column mixins shared by tenant tables."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import MetaData, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .types import UTCDateTime

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "TenantScopedMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "metadata",
    "utc_now",
]

# Deterministic constraint names so PostgreSQL and SQLite schemas match.
NAMING_CONVENTION: dict[str, str] = {
    "pk": "%(table_name)s_pkey",
    "fk": "%(table_name)s_%(column_0_name)s_fkey",
    "uq": "%(table_name)s_%(column_0_name)s_key",
    "ix": "%(table_name)s_%(column_0_name)s_idx",
    "ck": "%(table_name)s_%(constraint_name)s_check",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    metadata = metadata


def utc_now() -> datetime:
    return datetime.now(UTC)


class UUIDPrimaryKeyMixin:
    """``id`` primary key; native UUID on PostgreSQL, hex string on SQLite."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)


class TenantScopedMixin:
    """Indexed ``tenant_id`` owning column; every query filters on it."""

    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False, index=True)


class TimestampMixin:
    """``created_at`` / ``updated_at`` set by the application in UTC.

    Bulk UPDATE statements must set ``updated_at`` themselves.
    """

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utc_now, onupdate=utc_now
    )
