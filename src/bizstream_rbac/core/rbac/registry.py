"""Platform role definitions and tenant role templates.

The tables below are the authoritative data; :class:`RoleRegistry` wraps them
in an immutable lookup object that is built once per process and injected into
the resolver and the menu filter. Super-admin exclusivity is enforced
separately in :mod:`bizstream_rbac.core.rbac.policy`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from bizstream_rbac.core.rbac.catalog import Permissions, tenant_permission_keys
from bizstream_rbac.core.rbac.errors import UnknownRoleError, UnknownTemplateError
from bizstream_rbac.core.rbac.types import (
    PlatformRole,
    RoleDefinition,
    RoleTemplate,
    ScopeType,
)

P = Permissions

ROLE_DEFINITIONS: tuple[RoleDefinition, ...] = (
    RoleDefinition(
        role=PlatformRole.PLATFORM_SUPER_ADMIN,
        scope_type=ScopeType.GLOBAL,
        permissions=(
            P.MANAGE_PLATFORM_ADMINS,
            P.MANAGE_GLOBAL_CONFIG,
            P.MANAGE_PLANS_PRICING,
            P.MANAGE_BUSINESS_TYPES,
            P.MANAGE_COUNTRIES_REGIONS,
            P.VIEW_ALL_TENANTS,
            P.SUSPEND_TENANT_SCOPED,
            P.OVERRIDE_TENANT_LOCK,
            P.VIEW_SYSTEM_LOGS,
            P.VIEW_API_METRICS,
            P.MANAGE_APIS,
            P.VIEW_INVOICES_PAYMENTS,
            P.VIEW_AUDIT_LOGS,
            P.HANDLE_SUPPORT_TICKETS,
            P.VIEW_TICKETS,
            P.VIEW_SYSTEM_HEALTH,
            P.VIEW_ERROR_LOGS,
            P.VIEW_PERFORMANCE,
            P.VIEW_OPERATIONS,
            P.VIEW_REPORTS,
            P.MARKETPLACE_VIEW_CATALOG,
            P.MARKETPLACE_MANAGE_CATALOG,
            P.MARKETPLACE_MANAGE_PRICING,
            P.MARKETPLACE_MANAGE_ELIGIBILITY,
            P.MARKETPLACE_VIEW_ANALYTICS,
            P.MARKETPLACE_VIEW_AUDIT_LOGS,
            P.MARKETPLACE_PUBLISH,
            P.MARKETPLACE_OVERRIDE,
        ),
    ),
    RoleDefinition(
        role=PlatformRole.PLATFORM_ADMIN,
        scope_type=ScopeType.COUNTRY,
        permissions=(
            P.VIEW_TENANTS_SCOPED,
            P.SUSPEND_TENANT_SCOPED,
            P.VIEW_INVOICES_PAYMENTS,
            P.VIEW_AUDIT_LOGS,
            P.HANDLE_SUPPORT_TICKETS,
            P.VIEW_TICKETS,
            P.RESPOND_TICKETS,
            P.ESCALATE_TICKETS,
        ),
    ),
    RoleDefinition(
        role=PlatformRole.TECH_SUPPORT_MANAGER,
        scope_type=ScopeType.GLOBAL,
        permissions=(
            P.VIEW_SYSTEM_LOGS,
            P.VIEW_API_METRICS,
            P.MANAGE_APIS,
            P.VIEW_SYSTEM_HEALTH,
            P.VIEW_ERROR_LOGS,
            P.VIEW_PERFORMANCE,
            P.VIEW_AUDIT_LOGS,
        ),
    ),
    RoleDefinition(
        role=PlatformRole.MANAGER,
        scope_type=ScopeType.COUNTRY,
        permissions=(
            P.VIEW_TENANTS_SCOPED,
            P.VIEW_OPERATIONS,
            P.VIEW_REPORTS,
            P.VIEW_TICKETS,
        ),
    ),
    RoleDefinition(
        role=PlatformRole.SUPPORT_TEAM,
        scope_type=ScopeType.COUNTRY,
        permissions=(
            P.VIEW_TENANTS_SCOPED,
            P.VIEW_TICKETS,
            P.RESPOND_TICKETS,
            P.ESCALATE_TICKETS,
            P.HANDLE_SUPPORT_TICKETS,
        ),
    ),
)

# Legacy identifiers still present in issued sessions.
ROLE_ALIASES: Mapping[str, PlatformRole] = MappingProxyType(
    {"SUPER_ADMIN": PlatformRole.PLATFORM_SUPER_ADMIN}
)

_ADMIN_EXCLUDED = frozenset(
    {
        P.SUBSCRIPTION_CHANGE,
        P.MARKETPLACE_PURCHASE,
        P.MARKETPLACE_MANAGE_BILLING,
    }
)

ROLE_TEMPLATES: tuple[RoleTemplate, ...] = (
    RoleTemplate(
        key="OWNER",
        name="Owner",
        description="Full control of the business, including billing and roles.",
        highlights=(
            "Every permission",
            "Manages subscription and billing",
            "Cannot be edited or deleted",
        ),
        color="purple",
        permissions=tenant_permission_keys(),
    ),
    RoleTemplate(
        key="ADMIN",
        name="Admin",
        description="Runs day-to-day operations and manages staff.",
        highlights=(
            "Manages staff and roles",
            "Full access to bookings and customers",
            "No subscription changes",
        ),
        color="blue",
        permissions=tuple(
            key for key in tenant_permission_keys() if key not in _ADMIN_EXCLUDED
        ),
    ),
    RoleTemplate(
        key="MANAGER",
        name="Manager",
        description="Supervises bookings, customers, and the team's schedule.",
        highlights=(
            "Full access to bookings",
            "Creates invoices",
            "Read-only staff directory",
        ),
        color="green",
        permissions=(
            P.VIEW_DASHBOARD,
            P.VIEW_ANALYTICS,
            P.BOOKINGS_VIEW,
            P.BOOKINGS_CREATE,
            P.BOOKINGS_EDIT,
            P.BOOKINGS_DELETE,
            P.CUSTOMERS_VIEW,
            P.CUSTOMERS_CREATE,
            P.CUSTOMERS_EDIT,
            P.SERVICES_VIEW,
            P.MANAGE_PROJECTS,
            P.MANAGE_TIMESHEETS,
            P.VIEW_INVOICES,
            P.CREATE_INVOICES,
            P.INVOICES_VIEW,
            P.STAFF_VIEW,
            P.ROLES_VIEW,
        ),
    ),
    RoleTemplate(
        key="STAFF",
        name="Staff",
        description="Handles bookings and customers at the front desk.",
        highlights=(
            "Creates and manages bookings",
            "Adds customers",
            "Logs own timesheets",
        ),
        color="orange",
        permissions=(
            P.VIEW_DASHBOARD,
            P.BOOKINGS_VIEW,
            P.BOOKINGS_CREATE,
            P.BOOKINGS_EDIT,
            P.BOOKINGS_DELETE,
            P.CUSTOMERS_VIEW,
            P.CUSTOMERS_CREATE,
            P.SERVICES_VIEW,
            P.MANAGE_TIMESHEETS,
            P.MARKETPLACE_BROWSE,
        ),
    ),
    RoleTemplate(
        key="VIEWER",
        name="Viewer",
        description="Read-only access for accountants and observers.",
        highlights=(
            "Read-only dashboard",
            "Sees bookings and customers",
            "Cannot change anything",
        ),
        color="gray",
        permissions=(
            P.VIEW_DASHBOARD,
            P.BOOKINGS_VIEW,
            P.CUSTOMERS_VIEW,
            P.SERVICES_VIEW,
            P.VIEW_INVOICES,
            P.SUBSCRIPTION_VIEW,
        ),
    ),
    RoleTemplate(
        key="CUSTOM",
        name="Custom",
        description="Start from an empty role and pick permissions one by one.",
        highlights=("Pick exactly what the role needs",),
        color="slate",
        permissions=(),
        seeds_system_role=False,
    ),
)


class RoleRegistry:
    """Immutable lookup over role definitions and tenant templates."""

    def __init__(
        self,
        definitions: Iterable[RoleDefinition],
        templates: Iterable[RoleTemplate],
        *,
        aliases: Mapping[str, PlatformRole] = ROLE_ALIASES,
    ) -> None:
        self._definitions: Mapping[PlatformRole, RoleDefinition] = MappingProxyType(
            {definition.role: definition for definition in definitions}
        )
        self._templates: Mapping[str, RoleTemplate] = MappingProxyType(
            {template.key: template for template in templates}
        )
        self._aliases: Mapping[str, PlatformRole] = MappingProxyType(dict(aliases))

    @property
    def roles(self) -> tuple[PlatformRole, ...]:
        return tuple(self._definitions)

    @property
    def definitions(self) -> tuple[RoleDefinition, ...]:
        return tuple(self._definitions.values())

    @property
    def templates(self) -> tuple[RoleTemplate, ...]:
        return tuple(self._templates.values())

    def parse_role(self, value: Any) -> PlatformRole | None:
        """Map a raw role identifier onto a registered role, or ``None``."""

        if isinstance(value, PlatformRole):
            return value if value in self._definitions else None
        if not isinstance(value, str):
            return None
        candidate = value.strip().upper()
        if not candidate:
            return None
        alias = self._aliases.get(candidate)
        if alias is not None:
            return alias if alias in self._definitions else None
        try:
            role = PlatformRole(candidate)
        except ValueError:
            return None
        return role if role in self._definitions else None

    def definition_for(self, role: PlatformRole | str) -> RoleDefinition:
        parsed = self.parse_role(role)
        if parsed is None:
            raise UnknownRoleError(str(getattr(role, "value", role)))
        return self._definitions[parsed]

    def template_for(self, key: str) -> RoleTemplate:
        candidate = (key or "").strip().upper()
        template = self._templates.get(candidate)
        if template is None:
            raise UnknownTemplateError(key)
        return template

    def has_template(self, key: str) -> bool:
        return (key or "").strip().upper() in self._templates


@lru_cache(maxsize=1)
def get_registry() -> RoleRegistry:
    """Return the process-wide registry built from the static tables."""

    return RoleRegistry(ROLE_DEFINITIONS, ROLE_TEMPLATES)


__all__ = [
    "ROLE_ALIASES",
    "ROLE_DEFINITIONS",
    "ROLE_TEMPLATES",
    "RoleRegistry",
    "get_registry",
]
