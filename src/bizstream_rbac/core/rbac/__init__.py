"""RBAC decision engine: catalog, registry, resolver, scope and menu checks."""

from .catalog import (
    PERMISSION_GROUPS,
    PERMISSION_REGISTRY,
    PERMISSIONS,
    Permissions,
    collect_permission_keys,
    is_valid_permission,
)
from .countries import (
    internal_to_iso,
    is_tenant_country_in_scope,
    iso_to_internal,
    iso_to_tenant_countries,
)
from .errors import (
    AccessDeniedError,
    PermissionDeniedError,
    RbacError,
    RegistryIntegrityError,
    ScopeDeniedError,
    UnknownPermissionError,
    UnknownRoleError,
    UnknownTemplateError,
)
from .guards import (
    AuthorizationDecision,
    authorize,
    require_any_permission,
    require_country,
    require_permission,
    require_region,
    require_super_admin,
)
from .menu import MenuItem, filter_menu_items, menu_items_for_role, visible_menu
from .policy import (
    DEFAULT_FALLBACK_ROLE,
    SUPER_ADMIN_ONLY_PERMISSIONS,
    is_super_admin_only,
    verify_registry,
)
from .registry import ROLE_DEFINITIONS, ROLE_TEMPLATES, RoleRegistry, get_registry
from .resolver import (
    PermissionResolver,
    has_any_permission,
    has_permission,
    resolve_permissions,
)
from .scope import (
    can_access_country,
    can_access_region,
    can_access_tenant_country,
    scoped_country_filter,
)
from .store import TenantRoleStore
from .types import (
    AdminScope,
    PermissionDef,
    PermissionDomain,
    PlatformRole,
    PlatformRoleRef,
    ResolvedPermissions,
    RoleDefinition,
    RoleRef,
    RoleTemplate,
    ScopeType,
    TenantRoleRef,
)

__all__ = [
    "AccessDeniedError",
    "AdminScope",
    "AuthorizationDecision",
    "DEFAULT_FALLBACK_ROLE",
    "MenuItem",
    "PERMISSIONS",
    "PERMISSION_GROUPS",
    "PERMISSION_REGISTRY",
    "PermissionDef",
    "PermissionDeniedError",
    "PermissionDomain",
    "PermissionResolver",
    "Permissions",
    "PlatformRole",
    "PlatformRoleRef",
    "ROLE_DEFINITIONS",
    "ROLE_TEMPLATES",
    "RbacError",
    "RegistryIntegrityError",
    "ResolvedPermissions",
    "RoleDefinition",
    "RoleRef",
    "RoleRegistry",
    "RoleTemplate",
    "SUPER_ADMIN_ONLY_PERMISSIONS",
    "ScopeDeniedError",
    "ScopeType",
    "TenantRoleRef",
    "TenantRoleStore",
    "UnknownPermissionError",
    "UnknownRoleError",
    "UnknownTemplateError",
    "authorize",
    "can_access_country",
    "can_access_region",
    "can_access_tenant_country",
    "collect_permission_keys",
    "filter_menu_items",
    "get_registry",
    "has_any_permission",
    "has_permission",
    "internal_to_iso",
    "is_super_admin_only",
    "is_tenant_country_in_scope",
    "is_valid_permission",
    "iso_to_internal",
    "iso_to_tenant_countries",
    "menu_items_for_role",
    "require_any_permission",
    "require_country",
    "require_permission",
    "require_region",
    "require_super_admin",
    "resolve_permissions",
    "scoped_country_filter",
    "verify_registry",
    "visible_menu",
]
