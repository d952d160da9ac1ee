from __future__ import annotations

from collections.abc import AsyncIterator
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from bizstream_rbac.db import Database, DatabaseConfig
from bizstream_rbac.features.tenant_roles import TenantRoleService
from bizstream_rbac.features.tenant_roles import models as _tenant_role_models  # noqa: F401


@pytest_asyncio.fixture()
async def database() -> AsyncIterator[Database]:
    """Return an initialised in-memory database with every table created."""

    database = Database()
    database.init(DatabaseConfig(url="sqlite:///:memory:"))
    await database.create_all()
    try:
        yield database
    finally:
        await database.dispose()


@pytest_asyncio.fixture()
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture()
def service(session: AsyncSession) -> TenantRoleService:
    return TenantRoleService(session=session)


@pytest.fixture()
def tenant_id() -> UUID:
    return uuid4()
