"""Static RBAC policy rules and the registry self-check."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

from bizstream_rbac.common.logging import log_context
from bizstream_rbac.core.rbac.catalog import PERMISSION_REGISTRY, Permissions
from bizstream_rbac.core.rbac.errors import RegistryIntegrityError
from bizstream_rbac.core.rbac.registry import RoleRegistry
from bizstream_rbac.core.rbac.types import PermissionDomain, PlatformRole

logger = logging.getLogger(__name__)

SUPER_ADMIN_ROLE = PlatformRole.PLATFORM_SUPER_ADMIN

# Unknown or missing role identifiers resolve to the least privileged,
# country-scoped platform role.
DEFAULT_FALLBACK_ROLE = PlatformRole.SUPPORT_TEAM

SUPER_ADMIN_ONLY_PERMISSIONS: frozenset[str] = frozenset(
    {
        Permissions.MANAGE_PLATFORM_ADMINS,
        Permissions.MANAGE_GLOBAL_CONFIG,
        Permissions.MANAGE_PLANS_PRICING,
        Permissions.MANAGE_BUSINESS_TYPES,
        Permissions.MANAGE_COUNTRIES_REGIONS,
        Permissions.VIEW_ALL_TENANTS,
        Permissions.OVERRIDE_TENANT_LOCK,
        Permissions.MARKETPLACE_MANAGE_CATALOG,
        Permissions.MARKETPLACE_MANAGE_PRICING,
        Permissions.MARKETPLACE_MANAGE_ELIGIBILITY,
        Permissions.MARKETPLACE_OVERRIDE,
    }
)


def is_super_admin_only(permission: str) -> bool:
    return permission in SUPER_ADMIN_ONLY_PERMISSIONS


def _duplicates(keys: Iterable[str]) -> list[str]:
    return sorted(key for key, count in Counter(keys).items() if count > 1)


def verify_registry(
    registry: RoleRegistry,
    *,
    exclusive: frozenset[str] = SUPER_ADMIN_ONLY_PERMISSIONS,
    super_admin: PlatformRole = SUPER_ADMIN_ROLE,
) -> None:
    """Cross-check role tables against the catalog and the exclusivity list.

    Collects every violation and raises :class:`RegistryIntegrityError` once,
    so a broken deployment fails at startup with the full picture.
    """

    problems: list[str] = []

    for key in sorted(exclusive):
        if key not in PERMISSION_REGISTRY:
            problems.append(f"exclusive permission '{key}' is not in the catalog")

    for definition in registry.definitions:
        role = definition.role.value
        for key in _duplicates(definition.permissions):
            problems.append(f"role {role} lists '{key}' more than once")
        for key in definition.permissions:
            permission = PERMISSION_REGISTRY.get(key)
            if permission is None:
                problems.append(f"role {role} references unknown permission '{key}'")
                continue
            if permission.domain is not PermissionDomain.PLATFORM:
                problems.append(f"role {role} carries tenant permission '{key}'")
            if key in exclusive and definition.role is not super_admin:
                problems.append(f"role {role} holds super-admin-only permission '{key}'")

    for template in registry.templates:
        for key in _duplicates(template.permissions):
            problems.append(f"template {template.key} lists '{key}' more than once")
        for key in template.permissions:
            permission = PERMISSION_REGISTRY.get(key)
            if permission is None:
                problems.append(f"template {template.key} references unknown permission '{key}'")
            elif permission.domain is not PermissionDomain.TENANT:
                problems.append(f"template {template.key} carries platform permission '{key}'")

    if problems:
        logger.error(
            "rbac.registry.verify.failed",
            extra=log_context(problem_count=len(problems)),
        )
        raise RegistryIntegrityError(problems)

    logger.debug(
        "rbac.registry.verify.success",
        extra=log_context(
            roles=len(registry.definitions),
            templates=len(registry.templates),
        ),
    )


__all__ = [
    "DEFAULT_FALLBACK_ROLE",
    "SUPER_ADMIN_ONLY_PERMISSIONS",
    "SUPER_ADMIN_ROLE",
    "is_super_admin_only",
    "verify_registry",
]
