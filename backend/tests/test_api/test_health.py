"""Tests for the health and root endpoints."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "DriveShare"}


async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.json()["docs"] == "/docs"
