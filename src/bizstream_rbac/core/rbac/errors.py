"""Shared RBAC error types."""

from __future__ import annotations

from collections.abc import Sequence


class RbacError(Exception):
    """Base class for RBAC core errors."""


# ---------------------------------------------------------------------------
# Registry / catalog lookups
# ---------------------------------------------------------------------------


class UnknownRoleError(RbacError, LookupError):
    """Raised when a platform role has no registry entry."""

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"Role '{role}' is not registered")


class UnknownTemplateError(RbacError, LookupError):
    """Raised when a tenant role template key is not registered."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Role template '{key}' is not registered")


class UnknownPermissionError(RbacError, ValueError):
    """Raised when a permission key is blank or missing from the catalog."""

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Permission '{key}' is not registered")


class RegistryIntegrityError(RbacError):
    """Raised by the startup self-check when the static tables disagree."""

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems = tuple(problems)
        detail = "; ".join(self.problems)
        super().__init__(f"RBAC registry failed verification: {detail}")


# ---------------------------------------------------------------------------
# Authorization failures
# ---------------------------------------------------------------------------


class AccessDeniedError(RbacError):
    """Base class for authorization failures (map to HTTP 403)."""


class PermissionDeniedError(AccessDeniedError):
    """Raised when an actor lacks a required permission."""

    def __init__(
        self,
        permission_key: str,
        *,
        role: str | None = None,
    ) -> None:
        self.permission_key = permission_key
        self.role = role
        msg = f"Permission '{permission_key}' denied"
        if role:
            msg = f"{msg} for role '{role}'"
        super().__init__(msg)


class ScopeDeniedError(AccessDeniedError):
    """Raised when a country or region lies outside the actor's scope."""

    def __init__(self, scope_type: str, code: str | None) -> None:
        self.scope_type = scope_type
        self.code = code
        super().__init__(f"Access to {scope_type} '{code}' is outside the assigned scope")


__all__ = [
    "AccessDeniedError",
    "PermissionDeniedError",
    "RbacError",
    "RegistryIntegrityError",
    "ScopeDeniedError",
    "UnknownPermissionError",
    "UnknownRoleError",
    "UnknownTemplateError",
]
