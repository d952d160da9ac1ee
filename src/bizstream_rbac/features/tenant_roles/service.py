"""SQLAlchemy-backed tenant role store."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bizstream_rbac.common.logging import log_context
from bizstream_rbac.core.rbac.catalog import PERMISSION_REGISTRY, collect_permission_keys
from bizstream_rbac.core.rbac.errors import UnknownPermissionError, UnknownTemplateError
from bizstream_rbac.core.rbac.registry import RoleRegistry, get_registry
from bizstream_rbac.core.rbac.resolver import PermissionResolver
from bizstream_rbac.core.rbac.store import TenantRoleStore
from bizstream_rbac.core.rbac.types import (
    PermissionDomain,
    ResolvedPermissions,
    RoleTemplate,
    TenantRoleRef,
)
from bizstream_rbac.db import utc_now

from .exceptions import (
    RoleConflictError,
    RoleImmutableError,
    RoleInUseError,
    RoleNotFoundError,
    RoleValidationError,
    StaffConflictError,
    StaffNotFoundError,
)
from .models import StaffStatus, TenantRole, TenantRolePermission, TenantStaff
from .schemas import TenantRoleClone, TenantRoleCreate, TenantRoleUpdate

logger = logging.getLogger(__name__)

DEFAULT_ROLE_TEMPLATE = "STAFF"
CLONE_SUFFIX = "(Copy)"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize_role_name(value: str | None) -> str:
    candidate = (value or "").strip()
    if not candidate:
        raise RoleValidationError("Role name is required")
    return candidate


def _normalize_description(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _normalize_email(value: str) -> str:
    candidate = (value or "").strip().lower()
    if not candidate or "@" not in candidate:
        raise RoleValidationError("A valid staff email is required")
    return candidate


def validate_tenant_permissions(keys: Iterable[Any]) -> tuple[str, ...]:
    """Return de-duplicated keys, rejecting unknown or platform permissions."""

    try:
        normalized = collect_permission_keys(keys)
    except UnknownPermissionError as exc:
        raise RoleValidationError(str(exc)) from exc

    platform_keys = [
        key for key in normalized
        if PERMISSION_REGISTRY[key].domain is not PermissionDomain.TENANT
    ]
    if platform_keys:
        raise RoleValidationError(
            "Platform permissions cannot be granted to tenant roles: "
            + ", ".join(sorted(platform_keys))
        )
    return normalized


# ---------------------------------------------------------------------------
# Tenant role service
# ---------------------------------------------------------------------------


class TenantRoleService(TenantRoleStore[TenantRole]):
    """Tenant role and staff-assignment operations over one ``AsyncSession``.

    Methods flush but never commit; the caller's transaction makes each
    operation atomic.
    """

    def __init__(
        self,
        *,
        session: AsyncSession,
        registry: RoleRegistry | None = None,
        resolver: PermissionResolver | None = None,
    ) -> None:
        self._session = session
        self._registry = registry or get_registry()
        self._resolver = resolver or PermissionResolver(self._registry)

    # -- Templates ---------------------------------------------------------
    def list_templates(self) -> list[RoleTemplate]:
        return list(self._registry.templates)

    def _template(self, key: str) -> RoleTemplate:
        try:
            return self._registry.template_for(key)
        except UnknownTemplateError as exc:
            raise RoleValidationError(str(exc)) from exc

    # -- Queries -----------------------------------------------------------
    async def list_roles(self, tenant_id: UUID) -> list[TenantRole]:
        result = await self._session.execute(
            select(TenantRole)
            .where(TenantRole.tenant_id == tenant_id)
            .order_by(TenantRole.is_system.desc(), TenantRole.name)
        )
        return list(result.scalars().all())

    async def get_role(self, tenant_id: UUID, role_id: UUID) -> TenantRole:
        result = await self._session.execute(
            select(TenantRole).where(
                TenantRole.id == role_id,
                TenantRole.tenant_id == tenant_id,
            )
        )
        role = result.scalar_one_or_none()
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    async def get_role_permissions(self, tenant_id: UUID, role_id: UUID) -> tuple[str, ...]:
        role = await self.get_role(tenant_id, role_id)
        return role.permission_keys

    async def get_default_role(self, tenant_id: UUID) -> TenantRole | None:
        result = await self._session.execute(
            select(TenantRole).where(
                TenantRole.tenant_id == tenant_id,
                TenantRole.is_default.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def _name_taken(
        self,
        tenant_id: UUID,
        name: str,
        *,
        exclude_id: UUID | None = None,
    ) -> bool:
        stmt = select(func.count()).select_from(TenantRole).where(
            TenantRole.tenant_id == tenant_id,
            func.lower(TenantRole.name) == name.lower(),
        )
        if exclude_id is not None:
            stmt = stmt.where(TenantRole.id != exclude_id)
        count = await self._session.scalar(stmt)
        return bool(count)

    async def _staff_ids_for_role(self, role_id: UUID) -> list[UUID]:
        result = await self._session.execute(
            select(TenantStaff.id)
            .where(TenantStaff.tenant_role_id == role_id)
            .order_by(TenantStaff.email)
        )
        return list(result.scalars().all())

    # -- Role CRUD ---------------------------------------------------------
    async def create_role(
        self,
        tenant_id: UUID,
        *,
        name: str,
        description: str | None = None,
        template_key: str | None = None,
        permissions: Sequence[str] | None = None,
    ) -> TenantRole:
        normalized_name = _normalize_role_name(name)

        if template_key is not None and permissions is not None:
            raise RoleValidationError("Provide either template_key or permissions, not both")

        template: RoleTemplate | None = None
        if template_key is not None:
            template = self._template(template_key)
            permission_keys = validate_tenant_permissions(template.permissions)
        else:
            permission_keys = validate_tenant_permissions(permissions or ())

        if await self._name_taken(tenant_id, normalized_name):
            raise RoleConflictError(f"A role named '{normalized_name}' already exists")

        role = TenantRole(
            tenant_id=tenant_id,
            name=normalized_name,
            description=_normalize_description(description),
            is_system=False,
            is_default=False,
            template_key=template.key if template is not None else None,
        )
        role.permissions = [TenantRolePermission(permission=key) for key in permission_keys]
        await self._flush_role(role)

        logger.info(
            "tenant_roles.create.success",
            extra=log_context(
                tenant_id=tenant_id,
                role_id=role.id,
                template_key=role.template_key,
                permission_count=len(permission_keys),
            ),
        )
        return role

    async def update_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        *,
        name: str | None = None,
        description: str | None = None,
        permissions: Sequence[str] | None = None,
    ) -> TenantRole:
        role = await self.get_role(tenant_id, role_id)
        if role.is_system:
            logger.info(
                "tenant_roles.update.blocked",
                extra=log_context(tenant_id=tenant_id, role_id=role_id, reason="system_role"),
            )
            raise RoleImmutableError(role_id, "edited")

        if name is not None:
            normalized_name = _normalize_role_name(name)
            if await self._name_taken(tenant_id, normalized_name, exclude_id=role.id):
                raise RoleConflictError(f"A role named '{normalized_name}' already exists")
            role.name = normalized_name
        if description is not None:
            role.description = _normalize_description(description)
        if permissions is not None:
            self._sync_role_permissions(role, validate_tenant_permissions(permissions))

        role.updated_at = utc_now()
        await self._flush_role(role)

        logger.info(
            "tenant_roles.update.success",
            extra=log_context(
                tenant_id=tenant_id,
                role_id=role_id,
                permission_count=len(role.permissions),
            ),
        )
        return role

    async def set_role_permissions(
        self,
        tenant_id: UUID,
        role_id: UUID,
        permissions: Sequence[str],
    ) -> TenantRole:
        """Replace the role's whole permission set."""

        return await self.update_role(tenant_id, role_id, permissions=permissions)

    async def clone_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> TenantRole:
        source = await self.get_role(tenant_id, role_id)

        if name is None:
            clone_name = await self._next_clone_name(tenant_id, source.name)
        else:
            clone_name = _normalize_role_name(name)
            if await self._name_taken(tenant_id, clone_name):
                raise RoleConflictError(f"A role named '{clone_name}' already exists")

        clone = TenantRole(
            tenant_id=tenant_id,
            name=clone_name,
            description=(
                _normalize_description(description)
                if description is not None
                else source.description
            ),
            is_system=False,
            is_default=False,
            template_key=None,
        )
        clone.permissions = [
            TenantRolePermission(permission=key) for key in source.permission_keys
        ]
        await self._flush_role(clone)

        logger.info(
            "tenant_roles.clone.success",
            extra=log_context(tenant_id=tenant_id, role_id=clone.id, source_role_id=role_id),
        )
        return clone

    # -- Payload entry points ----------------------------------------------
    async def create_role_from_payload(
        self, tenant_id: UUID, payload: TenantRoleCreate
    ) -> TenantRole:
        return await self.create_role(
            tenant_id,
            name=payload.name,
            description=payload.description,
            template_key=payload.template_key,
            permissions=payload.permissions,
        )

    async def update_role_from_payload(
        self, tenant_id: UUID, role_id: UUID, payload: TenantRoleUpdate
    ) -> TenantRole:
        """Apply only the fields the caller actually sent."""

        updates = payload.model_dump(exclude_unset=True)
        if not updates:
            raise RoleValidationError("Provide at least one field to update")
        return await self.update_role(tenant_id, role_id, **updates)

    async def clone_role_from_payload(
        self, tenant_id: UUID, role_id: UUID, payload: TenantRoleClone
    ) -> TenantRole:
        return await self.clone_role(
            tenant_id, role_id, name=payload.name, description=payload.description
        )

    async def delete_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        *,
        reassign_to: UUID | None = None,
    ) -> None:
        role = await self.get_role(tenant_id, role_id)
        if role.is_system:
            logger.info(
                "tenant_roles.delete.blocked",
                extra=log_context(tenant_id=tenant_id, role_id=role_id, reason="system_role"),
            )
            raise RoleImmutableError(role_id, "deleted")
        if role.is_default:
            logger.info(
                "tenant_roles.delete.blocked",
                extra=log_context(tenant_id=tenant_id, role_id=role_id, reason="default_role"),
            )
            raise RoleConflictError(
                "The default role cannot be deleted; set another default first"
            )

        staff_ids = await self._staff_ids_for_role(role.id)
        if staff_ids:
            if reassign_to is None:
                logger.info(
                    "tenant_roles.delete.blocked",
                    extra=log_context(
                        tenant_id=tenant_id,
                        role_id=role_id,
                        reason="in_use",
                        staff_count=len(staff_ids),
                    ),
                )
                raise RoleInUseError(role_id, staff_ids)
            if reassign_to == role.id:
                raise RoleValidationError("Cannot reassign staff to the role being deleted")
            target = await self.get_role(tenant_id, reassign_to)
            await self._session.execute(
                update(TenantStaff)
                .where(TenantStaff.tenant_role_id == role.id)
                .values(tenant_role_id=target.id, updated_at=utc_now())
                .execution_options(synchronize_session="fetch")
            )

        await self._session.delete(role)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Staff assigned after the in-use check trip the RESTRICT foreign key.
            logger.info(
                "tenant_roles.delete.blocked",
                extra=log_context(tenant_id=tenant_id, role_id=role_id, reason="in_use"),
            )
            raise RoleInUseError(role_id, ()) from exc

        logger.info(
            "tenant_roles.delete.success",
            extra=log_context(
                tenant_id=tenant_id,
                role_id=role_id,
                reassigned=len(staff_ids),
            ),
        )

    async def set_default_role(self, tenant_id: UUID, role_id: UUID) -> TenantRole:
        role = await self.get_role(tenant_id, role_id)

        # Clear first: the partial unique index rejects two defaults at once.
        await self._session.execute(
            update(TenantRole)
            .where(
                TenantRole.tenant_id == tenant_id,
                TenantRole.is_default.is_(True),
                TenantRole.id != role.id,
            )
            .values(is_default=False, updated_at=utc_now())
            .execution_options(synchronize_session="fetch")
        )
        await self._session.execute(
            update(TenantRole)
            .where(TenantRole.id == role.id)
            .values(is_default=True, updated_at=utc_now())
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        await self._session.refresh(role, attribute_names=["is_default", "updated_at"])

        logger.info(
            "tenant_roles.default.set",
            extra=log_context(tenant_id=tenant_id, role_id=role_id),
        )
        return role

    async def seed_default_roles(self, tenant_id: UUID) -> list[TenantRole]:
        """Create any missing system roles and pick a default (idempotent)."""

        existing = await self.list_roles(tenant_id)
        seeded_keys = {role.template_key for role in existing if role.is_system}
        taken_names = {role.name.lower() for role in existing}
        created = 0

        for template in self._registry.templates:
            if not template.seeds_system_role or template.key in seeded_keys:
                continue
            if template.name.lower() in taken_names:
                logger.warning(
                    "tenant_roles.seed.name_taken",
                    extra=log_context(tenant_id=tenant_id, template_key=template.key),
                )
                continue
            role = TenantRole(
                tenant_id=tenant_id,
                name=template.name,
                description=template.description,
                is_system=True,
                is_default=False,
                template_key=template.key,
            )
            role.permissions = [
                TenantRolePermission(permission=key)
                for key in validate_tenant_permissions(template.permissions)
            ]
            self._session.add(role)
            created += 1

        await self._session.flush()

        if await self.get_default_role(tenant_id) is None:
            fallback = await self._session.scalar(
                select(TenantRole).where(
                    TenantRole.tenant_id == tenant_id,
                    TenantRole.is_system.is_(True),
                    TenantRole.template_key == DEFAULT_ROLE_TEMPLATE,
                )
            )
            if fallback is not None:
                await self.set_default_role(tenant_id, fallback.id)

        logger.info(
            "tenant_roles.seed.success",
            extra=log_context(tenant_id=tenant_id, created_count=created),
        )
        return await self.list_roles(tenant_id)

    async def _next_clone_name(self, tenant_id: UUID, source_name: str) -> str:
        candidate = f"{source_name} {CLONE_SUFFIX}"
        attempt = 2
        while await self._name_taken(tenant_id, candidate):
            candidate = f"{source_name} (Copy {attempt})"
            attempt += 1
        return candidate

    def _sync_role_permissions(self, role: TenantRole, permission_keys: Sequence[str]) -> None:
        desired = set(permission_keys)
        current = {entry.permission: entry for entry in role.permissions}

        for key, entry in current.items():
            if key not in desired:
                role.permissions.remove(entry)
        for key in permission_keys:
            if key not in current:
                role.permissions.append(TenantRolePermission(permission=key))

    async def _flush_role(self, role: TenantRole) -> None:
        self._session.add(role)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            logger.debug(
                "tenant_roles.flush.conflict",
                extra=log_context(tenant_id=role.tenant_id, role_id=role.id),
            )
            raise RoleConflictError("Role conflicts with an existing role") from exc

    # -- Staff -------------------------------------------------------------
    async def get_staff(self, tenant_id: UUID, staff_id: UUID) -> TenantStaff:
        result = await self._session.execute(
            select(TenantStaff).where(
                TenantStaff.id == staff_id,
                TenantStaff.tenant_id == tenant_id,
            )
        )
        staff = result.scalar_one_or_none()
        if staff is None:
            raise StaffNotFoundError(staff_id)
        return staff

    async def add_staff(
        self,
        tenant_id: UUID,
        *,
        email: str,
        full_name: str,
        role_id: UUID | None = None,
        status: StaffStatus = StaffStatus.INVITED,
    ) -> TenantStaff:
        """Add a staff member, defaulting to the tenant's default role."""

        normalized_email = _normalize_email(email)
        name = (full_name or "").strip()
        if not name:
            raise RoleValidationError("Staff name is required")

        exists = await self._session.scalar(
            select(func.count()).select_from(TenantStaff).where(
                TenantStaff.tenant_id == tenant_id,
                TenantStaff.email == normalized_email,
            )
        )
        if exists:
            raise StaffConflictError(f"Staff member '{normalized_email}' already exists")

        if role_id is not None:
            role: TenantRole | None = await self.get_role(tenant_id, role_id)
        else:
            role = await self.get_default_role(tenant_id)

        staff = TenantStaff(
            tenant_id=tenant_id,
            email=normalized_email,
            full_name=name,
            status=status,
            tenant_role_id=role.id if role is not None else None,
        )
        self._session.add(staff)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise StaffConflictError(f"Staff member '{normalized_email}' already exists") from exc

        logger.info(
            "tenant_staff.create.success",
            extra=log_context(
                tenant_id=tenant_id,
                staff_id=staff.id,
                role_id=staff.tenant_role_id,
            ),
        )
        return staff

    async def assign_staff_role(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        role_id: UUID | None,
    ) -> TenantStaff:
        staff = await self.get_staff(tenant_id, staff_id)
        if role_id is not None:
            await self.get_role(tenant_id, role_id)
        staff.tenant_role_id = role_id
        staff.updated_at = utc_now()
        await self._session.flush()

        logger.info(
            "tenant_staff.role.assigned",
            extra=log_context(tenant_id=tenant_id, staff_id=staff_id, role_id=role_id),
        )
        return staff

    async def resolve_staff(self, tenant_id: UUID, staff_id: UUID) -> ResolvedPermissions:
        """Resolve a staff member's effective permissions from their stored role.

        Staff without a role, or whose account is deactivated, resolve to an
        empty permission set.
        """

        staff = await self.get_staff(tenant_id, staff_id)
        if staff.tenant_role_id is None or staff.status is StaffStatus.DEACTIVATED:
            ref = TenantRoleRef(role_id="", tenant_id=str(tenant_id), name="")
        else:
            ref = await self.role_ref(tenant_id, staff.tenant_role_id)
        return self._resolver.resolve_tenant(ref)


__all__ = [
    "CLONE_SUFFIX",
    "DEFAULT_ROLE_TEMPLATE",
    "TenantRoleService",
    "validate_tenant_permissions",
]
