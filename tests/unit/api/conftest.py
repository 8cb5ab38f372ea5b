"""API test fixtures.

The lifespan does not run under ASGITransport, so the list runtime is
injected through dependency overrides.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mylist.api.app import create_app
from mylist.api.deps import list_runtime


@pytest_asyncio.fixture
async def api_client(runtime) -> AsyncIterator[AsyncClient]:
    app = create_app()

    async def _runtime():
        return runtime

    app.dependency_overrides[list_runtime] = _runtime

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client
