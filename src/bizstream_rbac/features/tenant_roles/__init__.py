"""Tenant-defined roles and staff role assignments."""

from .exceptions import (
    RoleConflictError,
    RoleImmutableError,
    RoleInUseError,
    RoleNotFoundError,
    RoleValidationError,
    StaffConflictError,
    StaffNotFoundError,
    TenantRoleError,
)
from .models import StaffStatus, TenantRole, TenantRolePermission, TenantStaff
from .service import TenantRoleService, validate_tenant_permissions

__all__ = [
    "RoleConflictError",
    "RoleImmutableError",
    "RoleInUseError",
    "RoleNotFoundError",
    "RoleValidationError",
    "StaffConflictError",
    "StaffNotFoundError",
    "StaffStatus",
    "TenantRole",
    "TenantRoleError",
    "TenantRolePermission",
    "TenantRoleService",
    "TenantStaff",
    "validate_tenant_permissions",
]
