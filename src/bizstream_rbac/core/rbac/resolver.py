"""Turn a role reference plus scope assignment into effective permissions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from bizstream_rbac.common.logging import log_context
from bizstream_rbac.core.rbac.catalog import PERMISSION_REGISTRY
from bizstream_rbac.core.rbac.policy import DEFAULT_FALLBACK_ROLE, SUPER_ADMIN_ROLE
from bizstream_rbac.core.rbac.registry import RoleRegistry, get_registry
from bizstream_rbac.core.rbac.types import (
    AdminScope,
    PermissionDomain,
    PlatformRole,
    PlatformRoleRef,
    ResolvedPermissions,
    RoleRef,
    ScopeType,
    TenantRoleRef,
)

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Resolve platform and tenant role references against a registry.

    The resolver is pure apart from logging: it never raises for an unknown
    platform role and instead falls back to ``fallback_role``.
    """

    def __init__(
        self,
        registry: RoleRegistry,
        *,
        fallback_role: PlatformRole = DEFAULT_FALLBACK_ROLE,
    ) -> None:
        # Fail fast if the fallback itself is not registered.
        registry.definition_for(fallback_role)
        self._registry = registry
        self._fallback_role = fallback_role

    @property
    def registry(self) -> RoleRegistry:
        return self._registry

    @property
    def fallback_role(self) -> PlatformRole:
        return self._fallback_role

    def resolve(
        self,
        role: PlatformRole | str | None,
        country_ids: Iterable[str | None] | None = None,
        region_ids: Iterable[str | None] | None = None,
    ) -> ResolvedPermissions:
        """Resolve a platform role and its geographic assignment."""

        parsed = self._registry.parse_role(role)
        if parsed is None:
            logger.warning(
                "rbac.resolve.unknown_role",
                extra=log_context(
                    role=_describe(role),
                    fallback_role=self._fallback_role.value,
                ),
            )
            parsed = self._fallback_role

        definition = self._registry.definition_for(parsed)
        is_global_scope = definition.scope_type is ScopeType.GLOBAL
        scope = None if is_global_scope else AdminScope.build(country_ids, region_ids)

        return ResolvedPermissions(
            role=parsed.value,
            permissions=frozenset(definition.permissions),
            scope=scope,
            scope_type=definition.scope_type,
            is_super_admin=parsed is SUPER_ADMIN_ROLE,
            is_global_scope=is_global_scope,
        )

    def resolve_tenant(self, ref: TenantRoleRef) -> ResolvedPermissions:
        """Resolve a stored tenant role.

        Keys that are missing from the catalog or belong to the platform
        domain are dropped so a stale row can never widen access.
        """

        granted: set[str] = set()
        rejected: list[str] = []
        for key in ref.permissions:
            definition = PERMISSION_REGISTRY.get(key)
            if definition is None or definition.domain is not PermissionDomain.TENANT:
                rejected.append(key)
                continue
            granted.add(key)

        if rejected:
            logger.warning(
                "rbac.resolve.tenant_permissions_dropped",
                extra=log_context(
                    tenant_id=ref.tenant_id,
                    role_id=ref.role_id,
                    dropped=sorted(rejected),
                ),
            )

        return ResolvedPermissions(
            role=str(ref.role_id),
            permissions=frozenset(granted),
            scope=None,
            scope_type=ScopeType.TENANT,
            is_super_admin=False,
            is_global_scope=False,
            tenant_id=str(ref.tenant_id),
        )

    def resolve_ref(self, ref: RoleRef) -> ResolvedPermissions:
        if isinstance(ref, TenantRoleRef):
            return self.resolve_tenant(ref)
        if isinstance(ref, PlatformRoleRef):
            return self.resolve(ref.role, ref.country_ids, ref.region_ids)
        raise TypeError(f"Unsupported role reference: {type(ref).__name__}")


def _describe(role: Any) -> str:
    if role is None:
        return "null"
    return str(getattr(role, "value", role)) or "''"


# Convenience functions ----------------------------------------------------


def resolve_permissions(
    role: PlatformRole | str | None,
    country_ids: Iterable[str | None] | None = None,
    region_ids: Iterable[str | None] | None = None,
) -> ResolvedPermissions:
    """Resolve against the process-wide registry."""

    return PermissionResolver(get_registry()).resolve(role, country_ids, region_ids)


def has_permission(resolved: ResolvedPermissions, permission: str) -> bool:
    return permission in resolved.permissions


def has_any_permission(resolved: ResolvedPermissions, permissions: Iterable[str]) -> bool:
    return any(permission in resolved.permissions for permission in permissions)


def has_all_permissions(resolved: ResolvedPermissions, permissions: Iterable[str]) -> bool:
    return all(permission in resolved.permissions for permission in permissions)


__all__ = [
    "PermissionResolver",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "resolve_permissions",
]
