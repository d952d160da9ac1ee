"""Persistence contract for tenant-defined roles.

Implementations own storage; the core only relies on the guarantees listed
on each method. All mutating methods run inside the caller's transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar
from uuid import UUID

from bizstream_rbac.core.rbac.types import TenantRoleRef

RoleT = TypeVar("RoleT")


class TenantRoleStore(ABC, Generic[RoleT]):
    """Create, clone, edit and delete a tenant's roles."""

    @abstractmethod
    async def list_roles(self, tenant_id: UUID) -> list[RoleT]:
        """Return every role of the tenant, system roles first."""

    @abstractmethod
    async def get_role(self, tenant_id: UUID, role_id: UUID) -> RoleT:
        """Return one role or raise a not-found error."""

    @abstractmethod
    async def create_role(
        self,
        tenant_id: UUID,
        *,
        name: str,
        description: str | None = None,
        template_key: str | None = None,
        permissions: Sequence[str] | None = None,
    ) -> RoleT:
        """Create a non-system role from a template or an explicit list.

        Every permission is validated against the catalog before anything is
        written.
        """

    @abstractmethod
    async def update_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        *,
        name: str | None = None,
        description: str | None = None,
        permissions: Sequence[str] | None = None,
    ) -> RoleT:
        """Edit a non-system role; ``permissions`` replaces the whole set."""

    @abstractmethod
    async def clone_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> RoleT:
        """Copy a role's permissions verbatim into a new non-system role."""

    @abstractmethod
    async def delete_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        *,
        reassign_to: UUID | None = None,
    ) -> None:
        """Delete a non-system role that no staff member still references."""

    @abstractmethod
    async def set_default_role(self, tenant_id: UUID, role_id: UUID) -> RoleT:
        """Make ``role_id`` the only default role of the tenant."""

    @abstractmethod
    async def get_role_permissions(self, tenant_id: UUID, role_id: UUID) -> tuple[str, ...]:
        """Return the role's permission keys."""

    async def role_ref(self, tenant_id: UUID, role_id: UUID) -> TenantRoleRef:
        """Build the reference the resolver consumes."""

        role = await self.get_role(tenant_id, role_id)
        permissions = await self.get_role_permissions(tenant_id, role_id)
        return TenantRoleRef(
            role_id=str(role_id),
            tenant_id=str(tenant_id),
            name=str(getattr(role, "name", role_id)),
            permissions=permissions,
        )


__all__ = ["TenantRoleStore"]
