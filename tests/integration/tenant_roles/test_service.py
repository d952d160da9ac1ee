"""Integration tests for the SQLAlchemy tenant role store."""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizstream_rbac.core.rbac.catalog import Permissions
from bizstream_rbac.core.rbac.errors import AccessDeniedError, PermissionDeniedError
from bizstream_rbac.core.rbac.guards import require_permission
from bizstream_rbac.core.rbac.registry import get_registry
from bizstream_rbac.core.rbac.types import ScopeType
from bizstream_rbac.features.tenant_roles import (
    RoleConflictError,
    RoleImmutableError,
    RoleInUseError,
    RoleNotFoundError,
    RoleValidationError,
    StaffConflictError,
    StaffNotFoundError,
    StaffStatus,
    TenantRole,
    TenantRoleService,
)
from bizstream_rbac.features.tenant_roles.schemas import (
    RoleTemplateOut,
    TenantRoleClone,
    TenantRoleCreate,
    TenantRoleOut,
    TenantRoleUpdate,
)

pytestmark = pytest.mark.asyncio


async def _default_count(session: AsyncSession, tenant_id: UUID) -> int:
    return await session.scalar(
        select(func.count())
        .select_from(TenantRole)
        .where(TenantRole.tenant_id == tenant_id, TenantRole.is_default.is_(True))
    )


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


async def test_seed_creates_system_roles_with_staff_default(
    service: TenantRoleService,
    session: AsyncSession,
    tenant_id: UUID,
) -> None:
    roles = await service.seed_default_roles(tenant_id)

    assert {role.template_key for role in roles} == {
        "OWNER",
        "ADMIN",
        "MANAGER",
        "STAFF",
        "VIEWER",
    }
    assert all(role.is_system for role in roles)
    default = await service.get_default_role(tenant_id)
    assert default is not None
    assert default.template_key == "STAFF"
    assert await _default_count(session, tenant_id) == 1


async def test_seed_is_idempotent(
    service: TenantRoleService,
    session: AsyncSession,
    tenant_id: UUID,
) -> None:
    first = await service.seed_default_roles(tenant_id)
    second = await service.seed_default_roles(tenant_id)

    assert [role.id for role in second] == [role.id for role in first]
    assert await _default_count(session, tenant_id) == 1


async def test_seeded_roles_copy_template_permissions(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    await service.seed_default_roles(tenant_id)
    roles = {role.template_key: role for role in await service.list_roles(tenant_id)}

    viewer_template = get_registry().template_for("VIEWER")
    assert set(roles["VIEWER"].permission_keys) == set(viewer_template.permissions)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def test_create_role_from_template(service: TenantRoleService, tenant_id: UUID) -> None:
    role = await service.create_role(tenant_id, name="  Front desk ", template_key="staff")

    assert role.name == "Front desk"
    assert role.is_system is False
    assert role.is_default is False
    assert role.template_key == "STAFF"
    assert set(role.permission_keys) == set(get_registry().template_for("STAFF").permissions)


async def test_create_role_with_explicit_permissions(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(
        tenant_id,
        name="Bookkeeper",
        description="Handles invoices",
        permissions=[
            Permissions.VIEW_INVOICES,
            Permissions.RECORD_PAYMENTS,
            Permissions.VIEW_INVOICES,
        ],
    )

    assert role.template_key is None
    assert role.description == "Handles invoices"
    assert sorted(role.permission_keys) == [Permissions.RECORD_PAYMENTS, Permissions.VIEW_INVOICES]


async def test_create_role_without_permissions_is_empty(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(tenant_id, name="Placeholder")

    assert role.permission_keys == ()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "   "},
        {"name": "Both", "template_key": "STAFF", "permissions": [Permissions.BOOKINGS_VIEW]},
        {"name": "Unknown template", "template_key": "JANITOR"},
        {"name": "Unknown key", "permissions": ["BOOKINGS_TELEPORT"]},
        {"name": "Platform key", "permissions": [Permissions.VIEW_ALL_TENANTS]},
        {"name": "Blank key", "permissions": [" "]},
    ],
)
async def test_create_role_rejects_invalid_payloads(
    service: TenantRoleService,
    session: AsyncSession,
    tenant_id: UUID,
    kwargs: dict,
) -> None:
    with pytest.raises(RoleValidationError):
        await service.create_role(tenant_id, **kwargs)

    assert await service.list_roles(tenant_id) == []


async def test_role_names_are_unique_per_tenant(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    await service.create_role(tenant_id, name="Cashier")

    with pytest.raises(RoleConflictError):
        await service.create_role(tenant_id, name="cashier")

    other = await service.create_role(uuid4(), name="Cashier")
    assert other.name == "Cashier"


async def test_create_role_logs_success(
    service: TenantRoleService,
    tenant_id: UUID,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.INFO, logger="bizstream_rbac.features.tenant_roles.service"):
        role = await service.create_role(tenant_id, name="Logged", template_key="VIEWER")

    record = next(r for r in caplog.records if r.getMessage() == "tenant_roles.create.success")
    assert record.role_id == str(role.id)
    assert record.template_key == "VIEWER"


# ---------------------------------------------------------------------------
# Editing and authorization flow
# ---------------------------------------------------------------------------


async def test_narrowed_template_role_denies_removed_permission(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(tenant_id, name="Junior staff", template_key="STAFF")
    narrowed = [key for key in role.permission_keys if key != Permissions.BOOKINGS_DELETE]
    await service.set_role_permissions(tenant_id, role.id, narrowed)
    staff = await service.add_staff(
        tenant_id,
        email="Junior@Example.com",
        full_name="Jo Junior",
        role_id=role.id,
        status=StaffStatus.ACTIVE,
    )

    resolved = await service.resolve_staff(tenant_id, staff.id)

    assert resolved.scope_type is ScopeType.TENANT
    assert resolved.tenant_id == str(tenant_id)
    require_permission(resolved, Permissions.BOOKINGS_CREATE)
    with pytest.raises(PermissionDeniedError):
        require_permission(resolved, Permissions.BOOKINGS_DELETE)


async def test_update_role_replaces_fields(service: TenantRoleService, tenant_id: UUID) -> None:
    role = await service.create_role(
        tenant_id,
        name="Desk",
        description="old",
        permissions=[Permissions.BOOKINGS_VIEW, Permissions.CUSTOMERS_VIEW],
    )

    updated = await service.update_role(
        tenant_id,
        role.id,
        name="Reception",
        description="new",
        permissions=[Permissions.CUSTOMERS_VIEW, Permissions.SERVICES_VIEW],
    )

    assert updated.name == "Reception"
    assert updated.description == "new"
    assert set(await service.get_role_permissions(tenant_id, role.id)) == {
        Permissions.CUSTOMERS_VIEW,
        Permissions.SERVICES_VIEW,
    }


async def test_update_role_rejects_platform_permissions(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(
        tenant_id, name="Desk", permissions=[Permissions.BOOKINGS_VIEW]
    )

    with pytest.raises(RoleValidationError):
        await service.update_role(tenant_id, role.id, permissions=[Permissions.MANAGE_APIS])

    assert role.permission_keys == (Permissions.BOOKINGS_VIEW,)


async def test_update_role_rejects_name_collision(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    await service.create_role(tenant_id, name="Desk")
    other = await service.create_role(tenant_id, name="Floor")

    with pytest.raises(RoleConflictError):
        await service.update_role(tenant_id, other.id, name="DESK")


async def test_system_roles_cannot_be_edited(service: TenantRoleService, tenant_id: UUID) -> None:
    roles = await service.seed_default_roles(tenant_id)
    owner = next(role for role in roles if role.template_key == "OWNER")

    with pytest.raises(RoleImmutableError) as excinfo:
        await service.update_role(tenant_id, owner.id, name="Boss")

    assert isinstance(excinfo.value, AccessDeniedError)
    assert owner.name == "Owner"


# ---------------------------------------------------------------------------
# Cloning
# ---------------------------------------------------------------------------


async def test_clone_copies_permissions_and_is_independent(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    roles = await service.seed_default_roles(tenant_id)
    manager = next(role for role in roles if role.template_key == "MANAGER")
    original_permissions = set(manager.permission_keys)

    clone = await service.clone_role(tenant_id, manager.id)
    await service.set_role_permissions(tenant_id, clone.id, [Permissions.VIEW_DASHBOARD])

    assert clone.name == "Manager (Copy)"
    assert clone.is_system is False
    assert clone.is_default is False
    assert clone.template_key is None
    assert set(await service.get_role_permissions(tenant_id, manager.id)) == original_permissions
    assert await service.get_role_permissions(tenant_id, clone.id) == (Permissions.VIEW_DASHBOARD,)


async def test_clone_names_do_not_collide(service: TenantRoleService, tenant_id: UUID) -> None:
    role = await service.create_role(tenant_id, name="Desk")

    first = await service.clone_role(tenant_id, role.id)
    second = await service.clone_role(tenant_id, role.id)
    named = await service.clone_role(tenant_id, role.id, name="Night desk", description="Late")

    assert first.name == "Desk (Copy)"
    assert second.name == "Desk (Copy 2)"
    assert named.name == "Night desk"
    assert named.description == "Late"
    with pytest.raises(RoleConflictError):
        await service.clone_role(tenant_id, role.id, name="desk")


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


async def test_system_roles_cannot_be_deleted(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    roles = await service.seed_default_roles(tenant_id)
    staff_role = next(role for role in roles if role.template_key == "STAFF")
    before = set(staff_role.permission_keys)

    with pytest.raises(AccessDeniedError):
        await service.delete_role(tenant_id, staff_role.id)

    reloaded = await service.get_role(tenant_id, staff_role.id)
    assert reloaded.is_system is True
    assert set(reloaded.permission_keys) == before


async def test_delete_role_blocked_while_staff_assigned(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(tenant_id, name="Desk")
    await service.add_staff(tenant_id, email="a@example.com", full_name="A", role_id=role.id)
    await service.add_staff(tenant_id, email="b@example.com", full_name="B", role_id=role.id)

    with pytest.raises(RoleInUseError) as excinfo:
        await service.delete_role(tenant_id, role.id)

    assert excinfo.value.staff_count == 2
    assert isinstance(excinfo.value, RoleConflictError)
    assert (await service.get_role(tenant_id, role.id)).id == role.id


async def test_delete_role_reassigns_staff(service: TenantRoleService, tenant_id: UUID) -> None:
    doomed = await service.create_role(tenant_id, name="Doomed")
    target = await service.create_role(tenant_id, name="Target")
    staff = await service.add_staff(
        tenant_id,
        email="c@example.com",
        full_name="C",
        role_id=doomed.id,
    )

    await service.delete_role(tenant_id, doomed.id, reassign_to=target.id)

    with pytest.raises(RoleNotFoundError):
        await service.get_role(tenant_id, doomed.id)
    reloaded = await service.get_staff(tenant_id, staff.id)
    assert reloaded.tenant_role_id == target.id


async def test_delete_role_cannot_reassign_to_itself(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(tenant_id, name="Desk")
    await service.add_staff(tenant_id, email="d@example.com", full_name="D", role_id=role.id)

    with pytest.raises(RoleValidationError):
        await service.delete_role(tenant_id, role.id, reassign_to=role.id)


async def test_delete_unused_role(service: TenantRoleService, tenant_id: UUID) -> None:
    role = await service.create_role(tenant_id, name="Temp", template_key="VIEWER")

    await service.delete_role(tenant_id, role.id)

    assert await service.list_roles(tenant_id) == []


async def test_default_role_cannot_be_deleted(
    service: TenantRoleService,
    session: AsyncSession,
    tenant_id: UUID,
) -> None:
    await service.seed_default_roles(tenant_id)
    desk = await service.create_role(tenant_id, name="Desk")
    await service.set_default_role(tenant_id, desk.id)

    with pytest.raises(RoleConflictError):
        await service.delete_role(tenant_id, desk.id)

    assert (await service.get_default_role(tenant_id)).id == desk.id
    assert await _default_count(session, tenant_id) == 1


async def test_delete_role_maps_late_staff_assignment_to_in_use(
    service: TenantRoleService,
    tenant_id: UUID,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    role = await service.create_role(tenant_id, name="Desk")
    await service.add_staff(tenant_id, email="late@example.com", full_name="L", role_id=role.id)

    async def _no_staff(role_id: UUID) -> list[UUID]:
        return []

    # The staff row lands after the in-use check has already run.
    monkeypatch.setattr(service, "_staff_ids_for_role", _no_staff)

    with pytest.raises(RoleInUseError) as excinfo:
        await service.delete_role(tenant_id, role.id)

    assert excinfo.value.role_id == str(role.id)
    assert excinfo.value.staff_count == 0


# ---------------------------------------------------------------------------
# Default role
# ---------------------------------------------------------------------------


async def test_set_default_role_keeps_a_single_default(
    service: TenantRoleService,
    session: AsyncSession,
    tenant_id: UUID,
) -> None:
    roles = await service.seed_default_roles(tenant_id)
    previous = next(role for role in roles if role.is_default)
    custom = await service.create_role(tenant_id, name="Desk")

    await service.set_default_role(tenant_id, custom.id)

    assert custom.is_default is True
    assert previous.is_default is False
    assert (await service.get_default_role(tenant_id)).id == custom.id
    assert await _default_count(session, tenant_id) == 1


async def test_default_roles_are_per_tenant(
    service: TenantRoleService,
    session: AsyncSession,
    tenant_id: UUID,
) -> None:
    other_tenant = uuid4()
    await service.seed_default_roles(tenant_id)
    await service.seed_default_roles(other_tenant)

    assert await _default_count(session, tenant_id) == 1
    assert await _default_count(session, other_tenant) == 1


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------


async def test_new_staff_receive_the_default_role(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    await service.seed_default_roles(tenant_id)
    default = await service.get_default_role(tenant_id)

    staff = await service.add_staff(tenant_id, email="New@Example.com ", full_name=" Nia ")

    assert staff.email == "new@example.com"
    assert staff.full_name == "Nia"
    assert staff.status is StaffStatus.INVITED
    assert staff.tenant_role_id == default.id


async def test_duplicate_staff_email_is_rejected(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    await service.add_staff(tenant_id, email="dup@example.com", full_name="First")

    with pytest.raises(StaffConflictError):
        await service.add_staff(tenant_id, email="DUP@example.com", full_name="Second")


async def test_add_staff_validates_input(service: TenantRoleService, tenant_id: UUID) -> None:
    with pytest.raises(RoleValidationError):
        await service.add_staff(tenant_id, email="not-an-email", full_name="X")
    with pytest.raises(RoleValidationError):
        await service.add_staff(tenant_id, email="x@example.com", full_name="  ")
    with pytest.raises(RoleNotFoundError):
        await service.add_staff(tenant_id, email="x@example.com", full_name="X", role_id=uuid4())


async def test_staff_without_role_or_deactivated_resolve_to_nothing(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(tenant_id, name="Owner-ish", template_key="OWNER")
    loose = await service.add_staff(tenant_id, email="loose@example.com", full_name="Loose")
    gone = await service.add_staff(
        tenant_id,
        email="gone@example.com",
        full_name="Gone",
        role_id=role.id,
        status=StaffStatus.DEACTIVATED,
    )

    assert loose.tenant_role_id is None
    assert (await service.resolve_staff(tenant_id, loose.id)).permissions == frozenset()
    assert (await service.resolve_staff(tenant_id, gone.id)).permissions == frozenset()


async def test_assign_staff_role(service: TenantRoleService, tenant_id: UUID) -> None:
    role = await service.create_role(tenant_id, name="Viewer-ish", template_key="VIEWER")
    staff = await service.add_staff(
        tenant_id,
        email="e@example.com",
        full_name="E",
        status=StaffStatus.ACTIVE,
    )

    await service.assign_staff_role(tenant_id, staff.id, role.id)
    resolved = await service.resolve_staff(tenant_id, staff.id)
    assert Permissions.BOOKINGS_VIEW in resolved.permissions

    await service.assign_staff_role(tenant_id, staff.id, None)
    assert (await service.resolve_staff(tenant_id, staff.id)).permissions == frozenset()


async def test_lookups_are_tenant_scoped(service: TenantRoleService, tenant_id: UUID) -> None:
    role = await service.create_role(tenant_id, name="Desk")
    staff = await service.add_staff(tenant_id, email="f@example.com", full_name="F")
    stranger = uuid4()

    with pytest.raises(RoleNotFoundError):
        await service.get_role(stranger, role.id)
    with pytest.raises(StaffNotFoundError):
        await service.get_staff(stranger, staff.id)
    with pytest.raises(RoleNotFoundError):
        await service.assign_staff_role(tenant_id, staff.id, uuid4())


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


async def test_role_views(service: TenantRoleService, tenant_id: UUID) -> None:
    role = await service.create_role(tenant_id, name="Desk", template_key="VIEWER")

    view = TenantRoleOut.from_role(role)
    templates = [RoleTemplateOut.from_template(t) for t in service.list_templates()]

    assert view.id == role.id
    assert view.template_key == "VIEWER"
    assert set(view.permissions) == set(role.permission_keys)
    assert view.created_at.tzinfo is not None
    assert [t.key for t in templates] == ["OWNER", "ADMIN", "MANAGER", "STAFF", "VIEWER", "CUSTOM"]
    assert view.serializable_dict()["name"] == "Desk"


async def test_role_payloads_drive_the_service(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    created = await service.create_role_from_payload(
        tenant_id,
        TenantRoleCreate(name=" Front Desk ", template_key="viewer"),
    )
    updated = await service.update_role_from_payload(
        tenant_id,
        created.id,
        TenantRoleUpdate(permissions=[Permissions.BOOKINGS_VIEW]),
    )
    clone = await service.clone_role_from_payload(tenant_id, created.id, TenantRoleClone())

    assert created.name == "Front Desk"
    assert created.template_key == "VIEWER"
    assert updated.permission_keys == (Permissions.BOOKINGS_VIEW,)
    assert updated.name == "Front Desk"
    assert clone.name == "Front Desk (Copy)"
    assert clone.permission_keys == (Permissions.BOOKINGS_VIEW,)


async def test_empty_update_payload_is_rejected(
    service: TenantRoleService,
    tenant_id: UUID,
) -> None:
    role = await service.create_role(tenant_id, name="Desk")

    with pytest.raises(RoleValidationError):
        await service.update_role_from_payload(tenant_id, role.id, TenantRoleUpdate())


async def test_role_payloads_validate_names() -> None:
    with pytest.raises(ValidationError):
        TenantRoleCreate(name="")
    with pytest.raises(ValidationError):
        TenantRoleUpdate(name="x" * 151)
