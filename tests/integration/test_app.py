"""Integration tests for application-level endpoints."""

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["workflow_profile"] == "three_role"


async def test_request_id_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"


async def test_root(client: AsyncClient):
    data = (await client.get("/")).json()

    assert data["api"]["published"] == "/api/v1/published"


async def test_storage_failure_is_503_without_cause(client: AsyncClient, auth_headers_for, monkeypatch):
    async def _failing_execute(self, *args, **kwargs):
        raise OperationalError("SELECT entries", None, Exception("disk I/O error at /var/lib/portal.db"))

    monkeypatch.setattr(AsyncSession, "execute", _failing_execute)

    response = await client.get("/api/v1/entries", headers=auth_headers_for("alice@uni.edu"))

    assert response.status_code == 503
    data = response.json()
    assert data["code"] == "storage_unavailable"
    assert "disk" not in data["detail"]
    assert "portal.db" not in response.text

