"""Unit tests for super-admin exclusivity and the registry self-check."""

from __future__ import annotations

import pytest

from bizstream_rbac.core.rbac.catalog import PERMISSION_REGISTRY, Permissions
from bizstream_rbac.core.rbac.errors import RegistryIntegrityError
from bizstream_rbac.core.rbac.policy import (
    SUPER_ADMIN_ONLY_PERMISSIONS,
    is_super_admin_only,
    verify_registry,
)
from bizstream_rbac.core.rbac.registry import ROLE_TEMPLATES, RoleRegistry, get_registry
from bizstream_rbac.core.rbac.types import (
    PlatformRole,
    RoleDefinition,
    RoleTemplate,
    ScopeType,
)


def test_default_registry_passes_verification() -> None:
    verify_registry(get_registry())


def test_exclusive_permissions_are_catalog_keys() -> None:
    assert SUPER_ADMIN_ONLY_PERMISSIONS <= set(PERMISSION_REGISTRY)
    assert is_super_admin_only(Permissions.MANAGE_PLATFORM_ADMINS)
    assert not is_super_admin_only(Permissions.VIEW_TICKETS)


def test_only_super_admin_holds_exclusive_permissions() -> None:
    registry = get_registry()

    for definition in registry.definitions:
        held = SUPER_ADMIN_ONLY_PERMISSIONS & set(definition.permissions)
        if definition.role is PlatformRole.PLATFORM_SUPER_ADMIN:
            assert held == SUPER_ADMIN_ONLY_PERMISSIONS
        else:
            assert not held, definition.role


def test_verification_collects_every_problem() -> None:
    broken = RoleRegistry(
        [
            RoleDefinition(
                PlatformRole.MANAGER,
                ScopeType.COUNTRY,
                (
                    Permissions.VIEW_REPORTS,
                    Permissions.VIEW_REPORTS,
                    Permissions.MANAGE_GLOBAL_CONFIG,
                    Permissions.BOOKINGS_VIEW,
                    "TIME_TRAVEL",
                ),
            )
        ],
        [
            RoleTemplate(
                key="BROKEN",
                name="Broken",
                description="",
                highlights=(),
                color="red",
                permissions=(Permissions.VIEW_SYSTEM_LOGS, "NOPE"),
            )
        ],
    )

    with pytest.raises(RegistryIntegrityError) as excinfo:
        verify_registry(broken)

    problems = "\n".join(excinfo.value.problems)
    assert "more than once" in problems
    assert "super-admin-only permission 'MANAGE_GLOBAL_CONFIG'" in problems
    assert "tenant permission 'BOOKINGS_VIEW'" in problems
    assert "unknown permission 'TIME_TRAVEL'" in problems
    assert "template BROKEN carries platform permission 'VIEW_SYSTEM_LOGS'" in problems
    assert "template BROKEN references unknown permission 'NOPE'" in problems
    assert len(excinfo.value.problems) == 6


def test_verification_rejects_unknown_exclusive_key() -> None:
    registry = RoleRegistry([], ROLE_TEMPLATES)

    with pytest.raises(RegistryIntegrityError, match="GHOST"):
        verify_registry(registry, exclusive=frozenset({"GHOST"}))
