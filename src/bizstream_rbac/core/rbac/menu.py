"""Declarative navigation menus and permission-based filtering."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from bizstream_rbac.core.rbac.catalog import Permissions
from bizstream_rbac.core.rbac.types import PlatformRole, ResolvedPermissions, ScopeType

P = Permissions


@dataclass(frozen=True)
class MenuItem:
    """One navigation entry.

    All present constraints must hold for the item to be shown:
    ``super_admin_only``, ``roles`` (allow-list), ``permission`` (required)
    and ``permissions`` (at least one). ``children`` are filtered with the
    same rules.
    """

    id: str
    title: str
    url: str
    icon: str
    permission: str | None = None
    permissions: tuple[str, ...] | None = None
    super_admin_only: bool = False
    roles: tuple[str, ...] | None = None
    children: tuple[MenuItem, ...] = ()


def _is_visible(item: MenuItem, resolved: ResolvedPermissions) -> bool:
    if item.super_admin_only and not resolved.is_super_admin:
        return False
    if item.roles is not None and resolved.role not in item.roles:
        return False
    if item.permission is not None and item.permission not in resolved.permissions:
        return False
    if item.permissions is not None and not any(
        key in resolved.permissions for key in item.permissions
    ):
        return False
    return True


def filter_menu_items(
    items: Iterable[MenuItem],
    resolved: ResolvedPermissions,
) -> list[MenuItem]:
    """Return the items ``resolved`` may see, preserving order."""

    visible: list[MenuItem] = []
    for item in items:
        if not _is_visible(item, resolved):
            continue
        if item.children:
            item = replace(item, children=tuple(filter_menu_items(item.children, resolved)))
        visible.append(item)
    return visible


SUPER_ADMIN_MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem(
        "dashboard", "Dashboard", "/super-admin", "LayoutDashboard", super_admin_only=True
    ),
    MenuItem(
        "tenants", "Tenants", "/super-admin/tenants", "Building2",
        permission=P.VIEW_ALL_TENANTS,
    ),
    MenuItem(
        "admins", "Platform Admins", "/super-admin/admins", "UserCog",
        permission=P.MANAGE_PLATFORM_ADMINS,
    ),
    MenuItem(
        "marketplace", "Marketplace", "/super-admin/marketplace-management", "Store",
        permission=P.MARKETPLACE_VIEW_CATALOG,
    ),
    MenuItem(
        "billing", "Billing", "/super-admin/billing", "DollarSign",
        permission=P.VIEW_INVOICES_PAYMENTS,
    ),
    MenuItem(
        "audit-logs", "Audit Logs", "/super-admin/audit-logs", "FileText",
        permission=P.VIEW_SYSTEM_LOGS,
    ),
    MenuItem(
        "settings", "System Settings", "/super-admin/settings", "Cog",
        permission=P.MANAGE_GLOBAL_CONFIG,
    ),
    MenuItem(
        "regions", "Regions", "/super-admin/regions", "Globe",
        permission=P.MANAGE_COUNTRIES_REGIONS,
    ),
)

PLATFORM_ADMIN_MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/admin", "LayoutDashboard"),
    MenuItem(
        "tenants", "Tenants", "/admin/tenants", "Building2",
        permission=P.VIEW_TENANTS_SCOPED,
    ),
    MenuItem(
        "billing", "Billing", "/admin/billing", "DollarSign",
        permission=P.VIEW_INVOICES_PAYMENTS,
    ),
    MenuItem(
        "audit-logs", "Audit Logs", "/admin/audit-logs", "FileText",
        permission=P.VIEW_AUDIT_LOGS,
    ),
    MenuItem(
        "support", "Support Tickets", "/admin/support", "Ticket",
        permission=P.HANDLE_SUPPORT_TICKETS,
    ),
)

TECH_SUPPORT_MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/tech-support", "LayoutDashboard"),
    MenuItem(
        "health", "System Health", "/tech-support/health", "Activity",
        permission=P.VIEW_SYSTEM_HEALTH,
    ),
    MenuItem(
        "apis", "API Management", "/tech-support/apis", "Globe",
        permission=P.VIEW_API_METRICS,
    ),
    MenuItem(
        "errors", "Error Logs", "/tech-support/errors", "AlertTriangle",
        permission=P.VIEW_ERROR_LOGS,
    ),
    MenuItem(
        "performance", "Performance", "/tech-support/performance", "BarChart3",
        permission=P.VIEW_PERFORMANCE,
    ),
    MenuItem(
        "audit-logs", "Audit Logs", "/tech-support/audit-logs", "FileText",
        permission=P.VIEW_AUDIT_LOGS,
    ),
)

MANAGER_MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/manager", "LayoutDashboard"),
    MenuItem(
        "tenants", "Tenants", "/manager/tenants", "Building2",
        permission=P.VIEW_TENANTS_SCOPED,
    ),
    MenuItem(
        "operations", "Operations", "/manager/operations", "ClipboardList",
        permission=P.VIEW_OPERATIONS,
    ),
    MenuItem("reports", "Reports", "/manager/reports", "BarChart3", permission=P.VIEW_REPORTS),
)

SUPPORT_TEAM_MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/support", "LayoutDashboard"),
    MenuItem("tickets", "Tickets", "/support/tickets", "Ticket", permission=P.VIEW_TICKETS),
    MenuItem(
        "issues", "User Issues", "/support/issues", "Headphones",
        permission=P.HANDLE_SUPPORT_TICKETS,
    ),
)

# Parent sections require any one of their children's permissions.
TENANT_MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem(
        "dashboard", "Dashboard", "/dashboard", "LayoutDashboard",
        permission=P.VIEW_DASHBOARD,
    ),
    MenuItem("bookings", "Bookings", "/bookings", "CalendarDays", permission=P.BOOKINGS_VIEW),
    MenuItem("customers", "Customers", "/customers", "Users", permission=P.CUSTOMERS_VIEW),
    MenuItem("services", "Services", "/services", "Scissors", permission=P.SERVICES_VIEW),
    MenuItem(
        "billing", "Billing", "/billing", "Receipt",
        permissions=(P.VIEW_INVOICES, P.INVOICES_VIEW, P.SUBSCRIPTION_VIEW),
        children=(
            MenuItem(
                "invoices", "Invoices", "/billing/invoices", "FileText",
                permission=P.VIEW_INVOICES,
            ),
            MenuItem(
                "subscription", "Subscription", "/billing/subscription", "CreditCard",
                permission=P.SUBSCRIPTION_VIEW,
            ),
        ),
    ),
    MenuItem(
        "marketplace", "Marketplace", "/marketplace", "Store",
        permission=P.MARKETPLACE_BROWSE,
    ),
    MenuItem(
        "settings", "Settings", "/settings", "Cog",
        permissions=(P.MANAGE_SETTINGS, P.STAFF_VIEW, P.ROLES_VIEW),
        children=(
            MenuItem("staff", "Staff", "/settings/staff", "UserCog", permission=P.STAFF_VIEW),
            MenuItem("roles", "Roles", "/settings/roles", "Shield", permission=P.ROLES_VIEW),
            MenuItem(
                "business", "Business Profile", "/settings/business", "Building2",
                permission=P.MANAGE_SETTINGS,
            ),
        ),
    ),
)

_MENUS_BY_ROLE: dict[PlatformRole, tuple[MenuItem, ...]] = {
    PlatformRole.PLATFORM_SUPER_ADMIN: SUPER_ADMIN_MENU_ITEMS,
    PlatformRole.PLATFORM_ADMIN: PLATFORM_ADMIN_MENU_ITEMS,
    PlatformRole.TECH_SUPPORT_MANAGER: TECH_SUPPORT_MENU_ITEMS,
    PlatformRole.MANAGER: MANAGER_MENU_ITEMS,
    PlatformRole.SUPPORT_TEAM: SUPPORT_TEAM_MENU_ITEMS,
}


def menu_items_for_role(role: PlatformRole | str) -> tuple[MenuItem, ...]:
    """Return the unfiltered menu for a platform role; unknown roles get none."""

    try:
        parsed = PlatformRole(getattr(role, "value", role))
    except ValueError:
        return ()
    return _MENUS_BY_ROLE.get(parsed, ())


def visible_menu(resolved: ResolvedPermissions) -> list[MenuItem]:
    """Pick the actor's menu and filter it."""

    if resolved.scope_type is ScopeType.TENANT:
        items = TENANT_MENU_ITEMS
    else:
        items = menu_items_for_role(resolved.role)
    return filter_menu_items(items, resolved)


__all__ = [
    "MANAGER_MENU_ITEMS",
    "MenuItem",
    "PLATFORM_ADMIN_MENU_ITEMS",
    "SUPER_ADMIN_MENU_ITEMS",
    "SUPPORT_TEAM_MENU_ITEMS",
    "TECH_SUPPORT_MENU_ITEMS",
    "TENANT_MENU_ITEMS",
    "filter_menu_items",
    "menu_items_for_role",
    "visible_menu",
]
