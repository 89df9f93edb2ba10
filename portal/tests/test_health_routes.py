"""Health and readiness endpoint tests for the portal app."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from b2bkit import __version__


@pytest.mark.asyncio
async def test_health_endpoint(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "service": "portal", "version": __version__}


@pytest.mark.asyncio
async def test_ready_endpoint(client: AsyncClient, roles):
    resp = await client.get("/ready")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_not_ready_without_role_catalog(client: AsyncClient):
    resp = await client.get("/ready")
    assert resp.status_code == 503
    assert resp.json() == {"status": "not_ready", "service": "portal", "missingRoles": ["1", "2"]}
