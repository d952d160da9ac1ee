"""Geographic scope checks for resolved actors.

Actors without a scope object (global platform roles and tenant actors) are
not geographically restricted.
"""

from __future__ import annotations

from bizstream_rbac.core.rbac.countries import is_tenant_country_in_scope
from bizstream_rbac.core.rbac.types import ResolvedPermissions


def can_access_country(resolved: ResolvedPermissions, country_code: str) -> bool:
    """Return True if ``country_code`` (ISO alpha-2) is inside the actor's scope."""

    scope = resolved.scope
    if resolved.is_global_scope or scope is None:
        return True
    return country_code in scope.country_ids


def can_access_region(resolved: ResolvedPermissions, region_code: str) -> bool:
    """Return True if ``region_code`` is inside the actor's region scope.

    Region membership is independent of country membership.
    """

    scope = resolved.scope
    if resolved.is_global_scope or scope is None:
        return True
    return region_code in scope.region_ids


def scoped_country_filter(resolved: ResolvedPermissions) -> frozenset[str] | None:
    """Return the ISO codes a tenant query must be limited to.

    ``None`` means no filter; an empty set means no access.
    """

    scope = resolved.scope
    if resolved.is_global_scope or scope is None:
        return None
    return scope.country_ids


def can_access_tenant_country(
    resolved: ResolvedPermissions,
    tenant_country: str | None,
) -> bool:
    """Check a tenant's internal country value against the actor's ISO scope."""

    allowed = scoped_country_filter(resolved)
    if allowed is None:
        return True
    if not tenant_country:
        return False
    return is_tenant_country_in_scope(tenant_country, sorted(allowed))


__all__ = [
    "can_access_country",
    "can_access_region",
    "can_access_tenant_country",
    "scoped_country_filter",
]
