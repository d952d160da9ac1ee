"""RBAC type definitions used across the stack."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field


class ScopeType(str, enum.Enum):
    """Breadth of authority attached to a role."""

    GLOBAL = "GLOBAL"
    COUNTRY = "COUNTRY"
    REGION = "REGION"
    TENANT = "TENANT"


class PermissionDomain(str, enum.Enum):
    """Which side of the platform a permission governs."""

    PLATFORM = "platform"
    TENANT = "tenant"


class PlatformRole(str, enum.Enum):
    """Closed set of platform staff roles."""

    PLATFORM_SUPER_ADMIN = "PLATFORM_SUPER_ADMIN"
    PLATFORM_ADMIN = "PLATFORM_ADMIN"
    TECH_SUPPORT_MANAGER = "TECH_SUPPORT_MANAGER"
    MANAGER = "MANAGER"
    SUPPORT_TEAM = "SUPPORT_TEAM"


@dataclass(frozen=True)
class PermissionDef:
    """Static permission definition."""

    key: str
    domain: PermissionDomain
    group: str
    label: str
    description: str


@dataclass(frozen=True)
class RoleDefinition:
    """Static platform role definition."""

    role: PlatformRole
    scope_type: ScopeType
    permissions: tuple[str, ...]


@dataclass(frozen=True)
class RoleTemplate:
    """Starting point for a tenant-defined role.

    ``seeds_system_role`` marks templates that are materialised as immutable
    system roles when a tenant is provisioned.
    """

    key: str
    name: str
    description: str
    highlights: tuple[str, ...]
    color: str
    permissions: tuple[str, ...]
    seeds_system_role: bool = True


def _clean_ids(values: Iterable[str | None] | None) -> frozenset[str]:
    if not values:
        return frozenset()
    return frozenset(str(value).strip() for value in values if value and str(value).strip())


@dataclass(frozen=True)
class AdminScope:
    """Country and region identifiers an actor may act within."""

    country_ids: frozenset[str] = field(default_factory=frozenset)
    region_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        country_ids: Iterable[str | None] | None = None,
        region_ids: Iterable[str | None] | None = None,
    ) -> AdminScope:
        return cls(country_ids=_clean_ids(country_ids), region_ids=_clean_ids(region_ids))


@dataclass(frozen=True)
class ResolvedPermissions:
    """Effective authorization context for one actor.

    Platform actors carry ``scope=None`` exactly when ``is_global_scope`` is
    true. Tenant actors resolve to ``ScopeType.TENANT`` with ``scope=None``,
    which the scope checks treat as unrestricted.
    """

    role: str
    permissions: frozenset[str]
    scope: AdminScope | None
    scope_type: ScopeType
    is_super_admin: bool = False
    is_global_scope: bool = False
    tenant_id: str | None = None

    def has(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass(frozen=True)
class PlatformRoleRef:
    """Reference to a platform role plus its assigned geography."""

    role: PlatformRole | str | None
    country_ids: tuple[str, ...] = ()
    region_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class TenantRoleRef:
    """Reference to a stored tenant role and its permission list."""

    role_id: str
    tenant_id: str
    name: str
    permissions: tuple[str, ...] = ()


RoleRef = PlatformRoleRef | TenantRoleRef


__all__ = [
    "AdminScope",
    "PermissionDef",
    "PermissionDomain",
    "PlatformRole",
    "PlatformRoleRef",
    "ResolvedPermissions",
    "RoleDefinition",
    "RoleRef",
    "RoleTemplate",
    "ScopeType",
    "TenantRoleRef",
]
