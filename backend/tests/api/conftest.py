"""API test fixtures: isolated app per test + httpx client.

Invariants:
    - Every test gets a fresh app (fresh UserDirectory, fixed clock)
    - Requests go through the full middleware stack via ASGITransport
"""

import pytest
from httpx import ASGITransport, AsyncClient

from errorgate.config import Settings
from errorgate.main import create_app

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def settings():
    return Settings(admin_token=ADMIN_TOKEN, log_format="text")


@pytest.fixture
def app(settings, fixed_clock):
    return create_app(settings=settings, clock=fixed_clock)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
