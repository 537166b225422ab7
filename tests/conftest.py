import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["CS_ACTIONS_ADMIN_TOKEN"] = "test-admin-token"
os.environ["CS_ACTIONS_LOG_JSON"] = "false"

from cs_actions.config import reset_settings
from cs_actions.main import create_app


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts from settings read from the environment."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
async def async_client(app):
    """Async HTTP test client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers():
    """Admin authentication headers"""
    return {"Authorization": f"Bearer {os.environ['CS_ACTIONS_ADMIN_TOKEN']}"}


@pytest.fixture
def sleeps():
    """Records the waits of a PollingHandler instead of sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append
