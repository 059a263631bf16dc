"""
Pytest configuration and fixtures for tracker HTTP tests.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from backend.main import app
from backend.services.tracker import tracker_service


@pytest.fixture(autouse=True)
def fresh_store():
    """Every test starts from an empty store."""
    tracker_service.reset()
    yield
    tracker_service.reset()


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
