"""Canonical permission catalog.

Every permission the platform understands is declared here exactly once. Role
definitions, tenant templates and stored tenant roles may only reference keys
from this catalog.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from bizstream_rbac.core.rbac.errors import UnknownPermissionError
from bizstream_rbac.core.rbac.types import PermissionDef, PermissionDomain


class Permissions:
    """Permission keys as attribute constants."""

    # Platform administration
    MANAGE_PLATFORM_ADMINS = "MANAGE_PLATFORM_ADMINS"
    MANAGE_GLOBAL_CONFIG = "MANAGE_GLOBAL_CONFIG"
    MANAGE_PLANS_PRICING = "MANAGE_PLANS_PRICING"
    MANAGE_BUSINESS_TYPES = "MANAGE_BUSINESS_TYPES"
    MANAGE_COUNTRIES_REGIONS = "MANAGE_COUNTRIES_REGIONS"

    # Tenant oversight
    VIEW_ALL_TENANTS = "VIEW_ALL_TENANTS"
    VIEW_TENANTS_SCOPED = "VIEW_TENANTS_SCOPED"
    SUSPEND_TENANT_SCOPED = "SUSPEND_TENANT_SCOPED"
    OVERRIDE_TENANT_LOCK = "OVERRIDE_TENANT_LOCK"

    # Monitoring
    VIEW_SYSTEM_LOGS = "VIEW_SYSTEM_LOGS"
    VIEW_API_METRICS = "VIEW_API_METRICS"
    MANAGE_APIS = "MANAGE_APIS"
    VIEW_AUDIT_LOGS = "VIEW_AUDIT_LOGS"
    VIEW_SYSTEM_HEALTH = "VIEW_SYSTEM_HEALTH"
    VIEW_ERROR_LOGS = "VIEW_ERROR_LOGS"
    VIEW_PERFORMANCE = "VIEW_PERFORMANCE"

    # Platform billing and reporting
    VIEW_INVOICES_PAYMENTS = "VIEW_INVOICES_PAYMENTS"
    VIEW_OPERATIONS = "VIEW_OPERATIONS"
    VIEW_REPORTS = "VIEW_REPORTS"

    # Support
    HANDLE_SUPPORT_TICKETS = "HANDLE_SUPPORT_TICKETS"
    VIEW_TICKETS = "VIEW_TICKETS"
    RESPOND_TICKETS = "RESPOND_TICKETS"
    ESCALATE_TICKETS = "ESCALATE_TICKETS"

    # Marketplace management
    MARKETPLACE_VIEW_CATALOG = "MARKETPLACE_VIEW_CATALOG"
    MARKETPLACE_MANAGE_CATALOG = "MARKETPLACE_MANAGE_CATALOG"
    MARKETPLACE_MANAGE_PRICING = "MARKETPLACE_MANAGE_PRICING"
    MARKETPLACE_MANAGE_ELIGIBILITY = "MARKETPLACE_MANAGE_ELIGIBILITY"
    MARKETPLACE_VIEW_ANALYTICS = "MARKETPLACE_VIEW_ANALYTICS"
    MARKETPLACE_VIEW_AUDIT_LOGS = "MARKETPLACE_VIEW_AUDIT_LOGS"
    MARKETPLACE_PUBLISH = "MARKETPLACE_PUBLISH"
    MARKETPLACE_OVERRIDE = "MARKETPLACE_OVERRIDE"

    # Tenant workspace
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    VIEW_ANALYTICS = "VIEW_ANALYTICS"
    MANAGE_PROJECTS = "MANAGE_PROJECTS"
    MANAGE_TIMESHEETS = "MANAGE_TIMESHEETS"

    # Tenant bookings
    BOOKINGS_VIEW = "BOOKINGS_VIEW"
    BOOKINGS_CREATE = "BOOKINGS_CREATE"
    BOOKINGS_EDIT = "BOOKINGS_EDIT"
    BOOKINGS_DELETE = "BOOKINGS_DELETE"

    # Tenant customers
    CUSTOMERS_VIEW = "CUSTOMERS_VIEW"
    CUSTOMERS_CREATE = "CUSTOMERS_CREATE"
    CUSTOMERS_EDIT = "CUSTOMERS_EDIT"
    CUSTOMERS_DELETE = "CUSTOMERS_DELETE"

    # Tenant services
    SERVICES_VIEW = "SERVICES_VIEW"
    SERVICES_MANAGE = "SERVICES_MANAGE"

    # Tenant billing
    VIEW_INVOICES = "VIEW_INVOICES"
    CREATE_INVOICES = "CREATE_INVOICES"
    RECORD_PAYMENTS = "RECORD_PAYMENTS"
    INVOICES_VIEW = "INVOICES_VIEW"
    PAYMENTS_VIEW = "PAYMENTS_VIEW"
    SUBSCRIPTION_VIEW = "SUBSCRIPTION_VIEW"
    SUBSCRIPTION_CHANGE = "SUBSCRIPTION_CHANGE"

    # Tenant staff and roles
    MANAGE_USERS = "MANAGE_USERS"
    STAFF_VIEW = "STAFF_VIEW"
    STAFF_CREATE = "STAFF_CREATE"
    STAFF_EDIT = "STAFF_EDIT"
    STAFF_DELETE = "STAFF_DELETE"
    STAFF_INVITE = "STAFF_INVITE"
    ROLES_VIEW = "ROLES_VIEW"
    ROLES_CREATE = "ROLES_CREATE"
    ROLES_EDIT = "ROLES_EDIT"
    ROLES_DELETE = "ROLES_DELETE"

    # Tenant settings
    MANAGE_SETTINGS = "MANAGE_SETTINGS"
    SETTINGS_EDIT = "SETTINGS_EDIT"
    SETTINGS_SECURITY_VIEW = "SETTINGS_SECURITY_VIEW"

    # Tenant marketplace
    MARKETPLACE_BROWSE = "MARKETPLACE_BROWSE"
    MARKETPLACE_PURCHASE = "MARKETPLACE_PURCHASE"
    MARKETPLACE_MANAGE_BILLING = "MARKETPLACE_MANAGE_BILLING"


_PLATFORM = PermissionDomain.PLATFORM
_TENANT = PermissionDomain.TENANT


def _permission(
    *,
    key: str,
    domain: PermissionDomain,
    group: str,
    label: str,
    description: str,
) -> PermissionDef:
    return PermissionDef(
        key=key,
        domain=domain,
        group=group,
        label=label,
        description=description,
    )


PERMISSIONS: tuple[PermissionDef, ...] = (
    # Platform administration ---------------------------------------------
    _permission(
        key=Permissions.MANAGE_PLATFORM_ADMINS,
        domain=_PLATFORM,
        group="Platform administration",
        label="Manage platform admins",
        description="Invite, edit, and remove platform staff accounts and their scopes.",
    ),
    _permission(
        key=Permissions.MANAGE_GLOBAL_CONFIG,
        domain=_PLATFORM,
        group="Platform administration",
        label="Manage global configuration",
        description="Change platform-wide settings and feature switches.",
    ),
    _permission(
        key=Permissions.MANAGE_PLANS_PRICING,
        domain=_PLATFORM,
        group="Platform administration",
        label="Manage plans and pricing",
        description="Create and reprice subscription plans.",
    ),
    _permission(
        key=Permissions.MANAGE_BUSINESS_TYPES,
        domain=_PLATFORM,
        group="Platform administration",
        label="Manage business types",
        description="Maintain the list of supported business verticals.",
    ),
    _permission(
        key=Permissions.MANAGE_COUNTRIES_REGIONS,
        domain=_PLATFORM,
        group="Platform administration",
        label="Manage countries and regions",
        description="Enable countries and define the regions platform staff are scoped to.",
    ),
    # Tenant oversight ------------------------------------------------------
    _permission(
        key=Permissions.VIEW_ALL_TENANTS,
        domain=_PLATFORM,
        group="Tenants",
        label="View all tenants",
        description="List and inspect every tenant regardless of country.",
    ),
    _permission(
        key=Permissions.VIEW_TENANTS_SCOPED,
        domain=_PLATFORM,
        group="Tenants",
        label="View scoped tenants",
        description="List and inspect tenants inside the assigned countries.",
    ),
    _permission(
        key=Permissions.SUSPEND_TENANT_SCOPED,
        domain=_PLATFORM,
        group="Tenants",
        label="Suspend tenants",
        description="Suspend or reactivate tenants inside the assigned scope.",
    ),
    _permission(
        key=Permissions.OVERRIDE_TENANT_LOCK,
        domain=_PLATFORM,
        group="Tenants",
        label="Override tenant lock",
        description="Lift billing or compliance locks placed on a tenant.",
    ),
    # Monitoring ------------------------------------------------------------
    _permission(
        key=Permissions.VIEW_SYSTEM_LOGS,
        domain=_PLATFORM,
        group="Monitoring",
        label="View system logs",
        description="Read platform system logs.",
    ),
    _permission(
        key=Permissions.VIEW_API_METRICS,
        domain=_PLATFORM,
        group="Monitoring",
        label="View API metrics",
        description="Read request volume, latency, and error metrics.",
    ),
    _permission(
        key=Permissions.MANAGE_APIS,
        domain=_PLATFORM,
        group="Monitoring",
        label="Manage APIs",
        description="Enable, throttle, or rotate credentials for platform integrations.",
    ),
    _permission(
        key=Permissions.VIEW_AUDIT_LOGS,
        domain=_PLATFORM,
        group="Monitoring",
        label="View audit logs",
        description="Read the platform audit trail.",
    ),
    _permission(
        key=Permissions.VIEW_SYSTEM_HEALTH,
        domain=_PLATFORM,
        group="Monitoring",
        label="View system health",
        description="Read service health and uptime dashboards.",
    ),
    _permission(
        key=Permissions.VIEW_ERROR_LOGS,
        domain=_PLATFORM,
        group="Monitoring",
        label="View error logs",
        description="Read captured application errors.",
    ),
    _permission(
        key=Permissions.VIEW_PERFORMANCE,
        domain=_PLATFORM,
        group="Monitoring",
        label="View performance",
        description="Read performance dashboards.",
    ),
    # Platform billing and reporting ---------------------------------------
    _permission(
        key=Permissions.VIEW_INVOICES_PAYMENTS,
        domain=_PLATFORM,
        group="Billing",
        label="View tenant invoices and payments",
        description="Inspect subscription invoices and payments across tenants.",
    ),
    _permission(
        key=Permissions.VIEW_OPERATIONS,
        domain=_PLATFORM,
        group="Operations",
        label="View operations",
        description="Read operational dashboards for the assigned scope.",
    ),
    _permission(
        key=Permissions.VIEW_REPORTS,
        domain=_PLATFORM,
        group="Operations",
        label="View reports",
        description="Read platform reports for the assigned scope.",
    ),
    # Support ---------------------------------------------------------------
    _permission(
        key=Permissions.HANDLE_SUPPORT_TICKETS,
        domain=_PLATFORM,
        group="Support",
        label="Handle support tickets",
        description="Own and resolve tenant support tickets.",
    ),
    _permission(
        key=Permissions.VIEW_TICKETS,
        domain=_PLATFORM,
        group="Support",
        label="View tickets",
        description="Read tenant support tickets.",
    ),
    _permission(
        key=Permissions.RESPOND_TICKETS,
        domain=_PLATFORM,
        group="Support",
        label="Respond to tickets",
        description="Reply to tenant support tickets.",
    ),
    _permission(
        key=Permissions.ESCALATE_TICKETS,
        domain=_PLATFORM,
        group="Support",
        label="Escalate tickets",
        description="Escalate tickets to a higher support tier.",
    ),
    # Marketplace management ------------------------------------------------
    _permission(
        key=Permissions.MARKETPLACE_VIEW_CATALOG,
        domain=_PLATFORM,
        group="Marketplace management",
        label="View marketplace catalog",
        description="Browse the add-on catalog from the admin console.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_MANAGE_CATALOG,
        domain=_PLATFORM,
        group="Marketplace management",
        label="Manage marketplace catalog",
        description="Create, edit, and retire marketplace add-ons.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_MANAGE_PRICING,
        domain=_PLATFORM,
        group="Marketplace management",
        label="Manage marketplace pricing",
        description="Set add-on prices per country and plan.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_MANAGE_ELIGIBILITY,
        domain=_PLATFORM,
        group="Marketplace management",
        label="Manage marketplace eligibility",
        description="Control which plans and business types may install an add-on.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_VIEW_ANALYTICS,
        domain=_PLATFORM,
        group="Marketplace management",
        label="View marketplace analytics",
        description="Read install and revenue analytics for add-ons.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_VIEW_AUDIT_LOGS,
        domain=_PLATFORM,
        group="Marketplace management",
        label="View marketplace audit logs",
        description="Read the marketplace change history.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_PUBLISH,
        domain=_PLATFORM,
        group="Marketplace management",
        label="Publish add-ons",
        description="Publish or unpublish add-ons and manage country rollout.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_OVERRIDE,
        domain=_PLATFORM,
        group="Marketplace management",
        label="Override add-on installs",
        description="Force install or uninstall an add-on for a tenant.",
    ),
    # Tenant workspace ------------------------------------------------------
    _permission(
        key=Permissions.VIEW_DASHBOARD,
        domain=_TENANT,
        group="Dashboard",
        label="View dashboard",
        description="Open the business dashboard.",
    ),
    _permission(
        key=Permissions.VIEW_ANALYTICS,
        domain=_TENANT,
        group="Dashboard",
        label="View analytics",
        description="Read business analytics and trends.",
    ),
    _permission(
        key=Permissions.MANAGE_PROJECTS,
        domain=_TENANT,
        group="Projects",
        label="Manage projects",
        description="Create and update projects and their tasks.",
    ),
    _permission(
        key=Permissions.MANAGE_TIMESHEETS,
        domain=_TENANT,
        group="Projects",
        label="Manage timesheets",
        description="Record and approve timesheet entries.",
    ),
    # Tenant bookings -------------------------------------------------------
    _permission(
        key=Permissions.BOOKINGS_VIEW,
        domain=_TENANT,
        group="Bookings",
        label="View bookings",
        description="See the booking calendar and booking details.",
    ),
    _permission(
        key=Permissions.BOOKINGS_CREATE,
        domain=_TENANT,
        group="Bookings",
        label="Create bookings",
        description="Book appointments for customers.",
    ),
    _permission(
        key=Permissions.BOOKINGS_EDIT,
        domain=_TENANT,
        group="Bookings",
        label="Edit bookings",
        description="Reschedule or change existing bookings.",
    ),
    _permission(
        key=Permissions.BOOKINGS_DELETE,
        domain=_TENANT,
        group="Bookings",
        label="Cancel bookings",
        description="Cancel or delete bookings.",
    ),
    # Tenant customers ------------------------------------------------------
    _permission(
        key=Permissions.CUSTOMERS_VIEW,
        domain=_TENANT,
        group="Customers",
        label="View customers",
        description="See customer records.",
    ),
    _permission(
        key=Permissions.CUSTOMERS_CREATE,
        domain=_TENANT,
        group="Customers",
        label="Create customers",
        description="Add new customer records.",
    ),
    _permission(
        key=Permissions.CUSTOMERS_EDIT,
        domain=_TENANT,
        group="Customers",
        label="Edit customers",
        description="Update customer records.",
    ),
    _permission(
        key=Permissions.CUSTOMERS_DELETE,
        domain=_TENANT,
        group="Customers",
        label="Delete customers",
        description="Remove customer records.",
    ),
    # Tenant services -------------------------------------------------------
    _permission(
        key=Permissions.SERVICES_VIEW,
        domain=_TENANT,
        group="Services",
        label="View services",
        description="See the service menu and prices.",
    ),
    _permission(
        key=Permissions.SERVICES_MANAGE,
        domain=_TENANT,
        group="Services",
        label="Manage services",
        description="Create, edit, and retire services.",
    ),
    # Tenant billing --------------------------------------------------------
    _permission(
        key=Permissions.VIEW_INVOICES,
        domain=_TENANT,
        group="Billing",
        label="View customer invoices",
        description="See invoices issued to customers.",
    ),
    _permission(
        key=Permissions.CREATE_INVOICES,
        domain=_TENANT,
        group="Billing",
        label="Create invoices",
        description="Issue invoices to customers.",
    ),
    _permission(
        key=Permissions.RECORD_PAYMENTS,
        domain=_TENANT,
        group="Billing",
        label="Record payments",
        description="Record payments received against invoices.",
    ),
    _permission(
        key=Permissions.INVOICES_VIEW,
        domain=_TENANT,
        group="Subscription",
        label="View subscription invoices",
        description="See invoices for the platform subscription.",
    ),
    _permission(
        key=Permissions.PAYMENTS_VIEW,
        domain=_TENANT,
        group="Subscription",
        label="View subscription payments",
        description="See payments made for the platform subscription.",
    ),
    _permission(
        key=Permissions.SUBSCRIPTION_VIEW,
        domain=_TENANT,
        group="Subscription",
        label="View subscription",
        description="See the current plan and usage.",
    ),
    _permission(
        key=Permissions.SUBSCRIPTION_CHANGE,
        domain=_TENANT,
        group="Subscription",
        label="Change subscription",
        description="Upgrade, downgrade, or cancel the plan.",
    ),
    # Tenant staff and roles ------------------------------------------------
    _permission(
        key=Permissions.MANAGE_USERS,
        domain=_TENANT,
        group="Staff",
        label="Manage users",
        description="Manage login accounts for the business.",
    ),
    _permission(
        key=Permissions.STAFF_VIEW,
        domain=_TENANT,
        group="Staff",
        label="View staff",
        description="See the staff directory.",
    ),
    _permission(
        key=Permissions.STAFF_CREATE,
        domain=_TENANT,
        group="Staff",
        label="Add staff",
        description="Add staff members.",
    ),
    _permission(
        key=Permissions.STAFF_EDIT,
        domain=_TENANT,
        group="Staff",
        label="Edit staff",
        description="Update staff details and role assignments.",
    ),
    _permission(
        key=Permissions.STAFF_DELETE,
        domain=_TENANT,
        group="Staff",
        label="Remove staff",
        description="Deactivate or remove staff members.",
    ),
    _permission(
        key=Permissions.STAFF_INVITE,
        domain=_TENANT,
        group="Staff",
        label="Invite staff",
        description="Send login invitations to staff members.",
    ),
    _permission(
        key=Permissions.ROLES_VIEW,
        domain=_TENANT,
        group="Roles",
        label="View roles",
        description="See roles and their permissions.",
    ),
    _permission(
        key=Permissions.ROLES_CREATE,
        domain=_TENANT,
        group="Roles",
        label="Create roles",
        description="Create custom roles from templates or from scratch.",
    ),
    _permission(
        key=Permissions.ROLES_EDIT,
        domain=_TENANT,
        group="Roles",
        label="Edit roles",
        description="Change custom role permissions and the default role.",
    ),
    _permission(
        key=Permissions.ROLES_DELETE,
        domain=_TENANT,
        group="Roles",
        label="Delete roles",
        description="Delete custom roles.",
    ),
    # Tenant settings -------------------------------------------------------
    _permission(
        key=Permissions.MANAGE_SETTINGS,
        domain=_TENANT,
        group="Settings",
        label="Manage settings",
        description="Change business profile and preferences.",
    ),
    _permission(
        key=Permissions.SETTINGS_EDIT,
        domain=_TENANT,
        group="Settings",
        label="Edit settings",
        description="Edit individual settings pages.",
    ),
    _permission(
        key=Permissions.SETTINGS_SECURITY_VIEW,
        domain=_TENANT,
        group="Settings",
        label="View security settings",
        description="See login history and security controls.",
    ),
    # Tenant marketplace ----------------------------------------------------
    _permission(
        key=Permissions.MARKETPLACE_BROWSE,
        domain=_TENANT,
        group="Marketplace",
        label="Browse marketplace",
        description="See available add-ons and their details.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_PURCHASE,
        domain=_TENANT,
        group="Marketplace",
        label="Purchase add-ons",
        description="Start trials and purchase add-ons.",
    ),
    _permission(
        key=Permissions.MARKETPLACE_MANAGE_BILLING,
        domain=_TENANT,
        group="Marketplace",
        label="Manage add-on billing",
        description="See add-on invoices and update the payment method.",
    ),
)

PERMISSION_REGISTRY: dict[str, PermissionDef] = {
    definition.key: definition for definition in PERMISSIONS
}

if len(PERMISSION_REGISTRY) != len(PERMISSIONS):
    raise RuntimeError("Duplicate permission keys in the catalog")


def _group_keys(domain: PermissionDomain) -> dict[str, tuple[str, ...]]:
    groups: dict[str, list[str]] = {}
    for definition in PERMISSIONS:
        if definition.domain is domain:
            groups.setdefault(definition.group, []).append(definition.key)
    return {group: tuple(keys) for group, keys in groups.items()}


# Tenant permissions grouped for the role editor.
PERMISSION_GROUPS: dict[str, tuple[str, ...]] = _group_keys(_TENANT)
PLATFORM_PERMISSION_GROUPS: dict[str, tuple[str, ...]] = _group_keys(_PLATFORM)


def is_valid_permission(value: Any) -> bool:
    """Return True when ``value`` is a permission key known to the catalog."""

    return isinstance(value, str) and value in PERMISSION_REGISTRY


def tenant_permission_keys() -> tuple[str, ...]:
    return tuple(d.key for d in PERMISSIONS if d.domain is _TENANT)


def platform_permission_keys() -> tuple[str, ...]:
    return tuple(d.key for d in PERMISSIONS if d.domain is _PLATFORM)


def _normalize_permission_key(key: str | Any) -> str:
    normalized = "" if key is None else str(key).strip()
    if not normalized:
        raise UnknownPermissionError(normalized, "Permission key cannot be blank")
    if normalized not in PERMISSION_REGISTRY:
        raise UnknownPermissionError(normalized)
    return normalized


def collect_permission_keys(keys: Iterable[str]) -> tuple[str, ...]:
    """Return normalized permission keys enforcing catalog membership."""

    normalized = tuple(_normalize_permission_key(key) for key in keys)
    return tuple(dict.fromkeys(normalized))


__all__ = [
    "PERMISSIONS",
    "PERMISSION_GROUPS",
    "PERMISSION_REGISTRY",
    "PLATFORM_PERMISSION_GROUPS",
    "PermissionDef",
    "Permissions",
    "collect_permission_keys",
    "is_valid_permission",
    "platform_permission_keys",
    "tenant_permission_keys",
]
