"""Unit tests for the tenant role store contract."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from bizstream_rbac.core.rbac.catalog import Permissions
from bizstream_rbac.core.rbac.registry import get_registry
from bizstream_rbac.core.rbac.resolver import PermissionResolver
from bizstream_rbac.core.rbac.store import TenantRoleStore
from bizstream_rbac.core.rbac.types import ScopeType


@dataclass
class _Role:
    id: UUID
    name: str
    permissions: list[str] = field(default_factory=list)


class _MemoryStore(TenantRoleStore[_Role]):
    """Minimal store used to exercise the shared ``role_ref`` helper."""

    def __init__(self) -> None:
        self.roles: dict[UUID, _Role] = {}

    async def list_roles(self, tenant_id: UUID) -> list[_Role]:
        return list(self.roles.values())

    async def get_role(self, tenant_id: UUID, role_id: UUID) -> _Role:
        return self.roles[role_id]

    async def create_role(
        self,
        tenant_id: UUID,
        *,
        name: str,
        description: str | None = None,
        template_key: str | None = None,
        permissions: Sequence[str] | None = None,
    ) -> _Role:
        role = _Role(id=uuid4(), name=name, permissions=list(permissions or ()))
        self.roles[role.id] = role
        return role

    async def update_role(
        self, tenant_id, role_id, *, name=None, description=None, permissions=None
    ):
        raise NotImplementedError

    async def clone_role(self, tenant_id, role_id, *, name=None, description=None):
        raise NotImplementedError

    async def delete_role(self, tenant_id, role_id, *, reassign_to=None):
        raise NotImplementedError

    async def set_default_role(self, tenant_id, role_id):
        raise NotImplementedError

    async def get_role_permissions(self, tenant_id: UUID, role_id: UUID) -> tuple[str, ...]:
        return tuple(self.roles[role_id].permissions)


def test_store_cannot_be_instantiated_without_operations() -> None:
    with pytest.raises(TypeError):
        TenantRoleStore()  # type: ignore[abstract]


@pytest.mark.asyncio
async def test_role_ref_feeds_the_resolver() -> None:
    store = _MemoryStore()
    tenant_id = uuid4()
    role = await store.create_role(
        tenant_id,
        name="Front desk",
        permissions=[Permissions.BOOKINGS_VIEW, Permissions.BOOKINGS_CREATE],
    )

    ref = await store.role_ref(tenant_id, role.id)
    resolved = PermissionResolver(get_registry()).resolve_tenant(ref)

    assert ref.name == "Front desk"
    assert ref.role_id == str(role.id)
    assert ref.tenant_id == str(tenant_id)
    assert resolved.scope_type is ScopeType.TENANT
    assert resolved.permissions == frozenset(
        {Permissions.BOOKINGS_VIEW, Permissions.BOOKINGS_CREATE}
    )
