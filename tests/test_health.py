"""
Tests for the /health endpoint and the API root.

All tests run without a live MongoDB (db is mocked as disconnected in conftest).
"""

import pytest


@pytest.mark.asyncio
async def test_health_returns_200(client):
    """Health endpoint must always return 200 if the API process is alive."""
    response = await client.get("/health")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health_response_schema(client):
    data = (await client.get("/health")).json()

    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"
    assert data["environment"] == "test"
    assert "database" in data


@pytest.mark.asyncio
async def test_health_disconnected_when_no_db(client):
    """With db_client.client set to None the check reports 'disconnected'."""
    data = (await client.get("/health")).json()
    assert data["database"] == "disconnected"


@pytest.mark.asyncio
async def test_health_connected_when_ping_succeeds(client):
    from unittest.mock import AsyncMock, MagicMock

    import safetrails.core.database as db_module

    fake_client = MagicMock()
    fake_client.admin.command = AsyncMock(return_value={"ok": 1})
    db_module.db_client.client = fake_client

    data = (await client.get("/health")).json()
    assert data["database"] == "connected"
    assert data["published_posts"] is None


@pytest.mark.asyncio
async def test_health_counts_published_posts(client, fake_db):
    from unittest.mock import AsyncMock, MagicMock

    import safetrails.core.database as db_module

    fake_client = MagicMock()
    fake_client.admin.command = AsyncMock(return_value={"ok": 1})
    await fake_db["posts"].insert_one({"status": "published"})
    await fake_db["posts"].insert_one({"status": "published"})
    await fake_db["posts"].insert_one({"status": "draft"})
    db_module.db_client.client = fake_client
    db_module.db_client.db = fake_db

    data = (await client.get("/health")).json()
    assert data["database"] == "connected"
    assert data["published_posts"] == 2


@pytest.mark.asyncio
async def test_health_disconnected_has_no_post_count(client):
    data = (await client.get("/health")).json()
    assert data["published_posts"] is None


@pytest.mark.asyncio
async def test_root_endpoint(client):
    response = await client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "running"
    assert data["name"] == "SafeTrails API"


@pytest.mark.asyncio
async def test_docs_available_in_test_env(client):
    response = await client.get("/docs")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unknown_route_returns_404(client):
    response = await client.get("/does-not-exist")
    assert response.status_code == 404
