"""Process startup and shutdown helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bizstream_rbac.common.logging import log_context, setup_logging
from bizstream_rbac.core.rbac.policy import verify_registry
from bizstream_rbac.core.rbac.registry import RoleRegistry, get_registry
from bizstream_rbac.core.rbac.resolver import PermissionResolver
from bizstream_rbac.db import Database, DatabaseConfig, db
from bizstream_rbac.features.tenant_roles import models as _tenant_role_models  # noqa: F401
from bizstream_rbac.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RbacRuntime:
    """Objects built once at startup and injected into request handlers."""

    settings: Settings
    registry: RoleRegistry
    resolver: PermissionResolver


def startup(settings: Settings | None = None) -> RbacRuntime:
    """Configure logging, verify the registry, and build the resolver."""

    resolved = settings or get_settings()
    setup_logging(resolved)

    registry = get_registry()
    if resolved.rbac_verify_registry:
        verify_registry(registry)

    runtime = RbacRuntime(
        settings=resolved,
        registry=registry,
        resolver=PermissionResolver(registry),
    )
    logger.info(
        "rbac.startup.complete",
        extra=log_context(
            app_name=resolved.app_name,
            verify_registry=resolved.rbac_verify_registry,
        ),
    )
    return runtime


async def init_database(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    create_schema: bool = False,
) -> Database:
    """Initialise the engine and optionally create tables."""

    resolved = settings or get_settings()
    target = database or db
    target.init(DatabaseConfig.from_settings(resolved))
    if create_schema:
        await target.create_all()
        logger.info("db.schema.created")
    return target


async def shutdown_database(database: Database | None = None) -> None:
    await (database or db).dispose()


__all__ = [
    "RbacRuntime",
    "init_database",
    "shutdown_database",
    "startup",
]
