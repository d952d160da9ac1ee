"""Column types for the tenant role tables."""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import TypeDecorator

__all__ = ["UTCDateTime", "string_enum"]


class UTCDateTime(TypeDecorator):
    """``DateTime(timezone=True)`` that always hands back aware UTC values.

    SQLite drops the offset on the way in, so naive values read back are
    treated as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        return _to_utc(value)

    def process_result_value(self, value: Any, dialect: Any) -> Any:
        return _to_utc(value)


def _to_utc(value: Any) -> Any:
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def string_enum(enum_cls: type[enum.Enum], name: str, *, length: int = 20) -> SAEnum:
    """Store ``enum_cls`` by member value in a plain VARCHAR column."""

    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=length,
        values_callable=lambda members: [member.value for member in members],
    )
