from __future__ import annotations

from collections.abc import Iterator

import pytest
from pydantic import ValidationError

from bizstream_rbac.settings import reload_settings


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure settings cache and env overrides are cleared between tests."""

    for var in (
        "BIZSTREAM_APP_NAME",
        "BIZSTREAM_LOGGING_LEVEL",
        "BIZSTREAM_DATABASE_URL",
        "BIZSTREAM_DATABASE_ECHO",
        "BIZSTREAM_DATABASE_POOL_TIMEOUT",
        "BIZSTREAM_DATABASE_SQLITE_JOURNAL_MODE",
        "BIZSTREAM_DATABASE_SQLITE_SYNCHRONOUS",
        "BIZSTREAM_DATABASE_SQLITE_BUSY_TIMEOUT_MS",
        "BIZSTREAM_RBAC_VERIFY_REGISTRY",
    ):
        monkeypatch.delenv(var, raising=False)
    try:
        reload_settings()
    except ValidationError:
        pass
    yield
    try:
        monkeypatch.undo()
        reload_settings()
    except ValidationError:
        pass
