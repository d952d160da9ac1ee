"""Tenant role and staff tables."""

from __future__ import annotations

import enum
from uuid import UUID

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    false,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizstream_rbac.db import (
    Base,
    TenantScopedMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    string_enum,
)


class StaffStatus(str, enum.Enum):
    """Lifecycle of a staff member account."""

    INVITED = "invited"
    ACTIVE = "active"
    DEACTIVATED = "deactivated"


staff_status_enum = string_enum(StaffStatus, "staff_status")


class TenantRole(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """Named permission bundle owned by one tenant."""

    __tablename__ = "tenant_roles"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_system: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    is_default: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    # Informational only; later template changes never reach this role.
    template_key: Mapped[str | None] = mapped_column(String(40), nullable=True)

    permissions: Mapped[list[TenantRolePermission]] = relationship(
        "TenantRolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TenantRolePermission.permission",
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="tenant_roles_tenant_name_key"),
        Index(
            "tenant_roles_single_default_idx",
            "tenant_id",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )

    @property
    def permission_keys(self) -> tuple[str, ...]:
        return tuple(entry.permission for entry in self.permissions)


class TenantRolePermission(Base):
    """Bridge table linking a tenant role and a catalog permission key."""

    __tablename__ = "tenant_role_permissions"

    role_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("tenant_roles.id", ondelete="CASCADE"), primary_key=True
    )
    permission: Mapped[str] = mapped_column(String(120), primary_key=True)

    role: Mapped[TenantRole] = relationship("TenantRole", back_populates="permissions")


class TenantStaff(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """Staff member of a tenant; references at most one tenant role."""

    __tablename__ = "tenant_staff"

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[StaffStatus] = mapped_column(
        staff_status_enum,
        nullable=False,
        default=StaffStatus.INVITED,
    )
    tenant_role_id: Mapped[UUID | None] = mapped_column(
        Uuid(), ForeignKey("tenant_roles.id", ondelete="RESTRICT"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="tenant_staff_tenant_email_key"),
        Index("tenant_staff_tenant_role_id_idx", "tenant_role_id"),
    )


__all__ = [
    "StaffStatus",
    "TenantRole",
    "TenantRolePermission",
    "TenantStaff",
]
