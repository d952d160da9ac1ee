"""Errors raised by the tenant role store."""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from bizstream_rbac.core.rbac.errors import AccessDeniedError


class TenantRoleError(Exception):
    """Base class for tenant role store errors."""


class RoleValidationError(TenantRoleError, ValueError):
    """Raised when a role payload is invalid (map to HTTP 400)."""


class RoleNotFoundError(TenantRoleError, LookupError):
    """Raised when a role does not exist inside the tenant."""

    def __init__(self, role_id: UUID | str) -> None:
        self.role_id = str(role_id)
        super().__init__(f"Role {self.role_id!r} not found")


class RoleImmutableError(TenantRoleError, AccessDeniedError):
    """Raised when attempting to edit or delete a system role (map to HTTP 403)."""

    def __init__(self, role_id: UUID | str, action: str) -> None:
        self.role_id = str(role_id)
        self.action = action
        super().__init__(f"System roles cannot be {action}")


class RoleConflictError(TenantRoleError):
    """Raised when an operation would violate uniqueness or references (HTTP 409)."""


class RoleInUseError(RoleConflictError):
    """Raised when deleting a role that staff members still reference."""

    def __init__(self, role_id: UUID | str, staff_ids: Sequence[UUID]) -> None:
        self.role_id = str(role_id)
        self.staff_ids = tuple(staff_ids)
        self.staff_count = len(self.staff_ids)
        if self.staff_count:
            detail = f"Role is assigned to {self.staff_count} staff member(s)"
        else:
            detail = "Role is still assigned to staff members"
        super().__init__(f"{detail}; reassign them first")


class StaffNotFoundError(TenantRoleError, LookupError):
    """Raised when a staff member does not exist inside the tenant."""

    def __init__(self, staff_id: UUID | str) -> None:
        self.staff_id = str(staff_id)
        super().__init__(f"Staff member {self.staff_id!r} not found")


class StaffConflictError(TenantRoleError):
    """Raised when a staff email is already used inside the tenant."""


__all__ = [
    "RoleConflictError",
    "RoleImmutableError",
    "RoleInUseError",
    "RoleNotFoundError",
    "RoleValidationError",
    "StaffConflictError",
    "StaffNotFoundError",
    "TenantRoleError",
]
