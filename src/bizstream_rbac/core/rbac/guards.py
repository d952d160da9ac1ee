"""Authorization checks an outer request layer calls before doing work.

Functions named ``require_*`` raise a subclass of
:class:`~bizstream_rbac.core.rbac.errors.AccessDeniedError`; :func:`authorize`
returns a decision object instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from bizstream_rbac.common.logging import log_context
from bizstream_rbac.core.rbac.errors import PermissionDeniedError, ScopeDeniedError
from bizstream_rbac.core.rbac.scope import can_access_country, can_access_region
from bizstream_rbac.core.rbac.types import ResolvedPermissions

logger = logging.getLogger(__name__)

SUPER_ADMIN_REQUIREMENT = "SUPER_ADMIN"


@dataclass(frozen=True)
class AuthorizationDecision:
    """Result of an authorization evaluation."""

    granted: frozenset[str]
    required: tuple[str, ...]
    missing: tuple[str, ...]
    any_of: bool = False

    @property
    def is_authorized(self) -> bool:
        if self.any_of:
            return not self.required or len(self.missing) < len(self.required)
        return not self.missing


def authorize(
    resolved: ResolvedPermissions,
    required: str | Iterable[str],
    *,
    any_of: bool = False,
) -> AuthorizationDecision:
    """Evaluate ``required`` against the actor's permission set.

    With ``any_of`` a single match is enough; otherwise every key must be held.
    """

    keys = (required,) if isinstance(required, str) else tuple(dict.fromkeys(required))
    missing = tuple(key for key in keys if key not in resolved.permissions)
    return AuthorizationDecision(
        granted=resolved.permissions,
        required=keys,
        missing=missing,
        any_of=any_of,
    )


def require_permission(resolved: ResolvedPermissions, permission: str) -> None:
    if permission not in resolved.permissions:
        logger.info(
            "rbac.guard.permission_denied",
            extra=log_context(role=resolved.role, permission=permission),
        )
        raise PermissionDeniedError(permission, role=resolved.role)


def require_any_permission(resolved: ResolvedPermissions, permissions: Iterable[str]) -> None:
    keys = tuple(permissions)
    if not any(key in resolved.permissions for key in keys):
        logger.info(
            "rbac.guard.permission_denied",
            extra=log_context(role=resolved.role, permission=list(keys)),
        )
        raise PermissionDeniedError(" | ".join(keys), role=resolved.role)


def require_super_admin(resolved: ResolvedPermissions) -> None:
    if not resolved.is_super_admin:
        logger.info(
            "rbac.guard.super_admin_required",
            extra=log_context(role=resolved.role),
        )
        raise PermissionDeniedError(SUPER_ADMIN_REQUIREMENT, role=resolved.role)


def require_country(resolved: ResolvedPermissions, country_code: str) -> None:
    if not can_access_country(resolved, country_code):
        logger.info(
            "rbac.guard.scope_denied",
            extra=log_context(role=resolved.role, country=country_code),
        )
        raise ScopeDeniedError("country", country_code)


def require_region(resolved: ResolvedPermissions, region_code: str) -> None:
    if not can_access_region(resolved, region_code):
        logger.info(
            "rbac.guard.scope_denied",
            extra=log_context(role=resolved.role, region=region_code),
        )
        raise ScopeDeniedError("region", region_code)


__all__ = [
    "AuthorizationDecision",
    "authorize",
    "require_any_permission",
    "require_country",
    "require_permission",
    "require_region",
    "require_super_admin",
]
