"""Pydantic schemas for tenant role payloads and views."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from bizstream_rbac.common.schema import BaseSchema
from bizstream_rbac.core.rbac.types import RoleTemplate

from .models import TenantRole


class TenantRoleCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=150)
    description: str | None = None
    template_key: str | None = Field(default=None, max_length=40)
    permissions: list[str] | None = None


class TenantRoleUpdate(BaseSchema):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    description: str | None = None
    permissions: list[str] | None = None


class TenantRoleClone(BaseSchema):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    description: str | None = None


class TenantRoleOut(BaseSchema):
    id: UUID
    tenant_id: UUID
    name: str
    description: str | None = None
    is_system: bool
    is_default: bool
    template_key: str | None = None
    permissions: list[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_role(cls, role: TenantRole) -> TenantRoleOut:
        return cls(
            id=role.id,
            tenant_id=role.tenant_id,
            name=role.name,
            description=role.description,
            is_system=role.is_system,
            is_default=role.is_default,
            template_key=role.template_key,
            permissions=list(role.permission_keys),
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


class RoleTemplateOut(BaseSchema):
    key: str
    name: str
    description: str
    highlights: list[str]
    color: str
    permissions: list[str]

    @classmethod
    def from_template(cls, template: RoleTemplate) -> RoleTemplateOut:
        return cls(
            key=template.key,
            name=template.name,
            description=template.description,
            highlights=list(template.highlights),
            color=template.color,
            permissions=list(template.permissions),
        )


__all__ = [
    "RoleTemplateOut",
    "TenantRoleClone",
    "TenantRoleCreate",
    "TenantRoleOut",
    "TenantRoleUpdate",
]
