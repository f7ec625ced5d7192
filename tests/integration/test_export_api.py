"""Integration tests for the published-entries export API."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings, get_settings
from src.kernel.models.entry import EntryKind
from src.main import app

URL = "/api/v1/published"


@pytest.fixture
def published_mix(make_entry, ranking_payload, research_payload, partnership_payload):
    """One published entry of every kind plus unpublished rankings."""

    async def _make():
        ranking = await make_entry(
            kind=EntryKind.RANKING, status="published", payload=ranking_payload, created_by="dir@uni.edu"
        )
        await make_entry(kind=EntryKind.RESEARCH, status="published", payload=research_payload)
        await make_entry(kind=EntryKind.PARTNERSHIP, status=" Published ", payload=partnership_payload)
        await make_entry(kind=EntryKind.RANKING, status="approved", payload=ranking_payload)
        await make_entry(kind=EntryKind.RANKING, status="draft", payload=ranking_payload)
        return ranking

    return _make


@pytest.fixture
def export_key():
    app.dependency_overrides[get_settings] = lambda: Settings(export_api_key="s3cret-key")
    yield "s3cret-key"
    app.dependency_overrides.pop(get_settings, None)


class TestExportAPI:

    async def test_type_filter_returns_only_published_of_kind(self, client: AsyncClient, published_mix):
        ranking = await published_mix()

        response = await client.get(URL, params={"type": "ranking"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_results"] == 1
        assert [r["id"] for r in data["data"]] == [ranking.id]
        assert {r["entry_type"] for r in data["data"]} == {"ranking"}

    async def test_all_published_kinds(self, client: AsyncClient, published_mix):
        await published_mix()

        data = (await client.get(URL)).json()

        assert data["total_results"] == 3
        assert {r["entry_type"] for r in data["data"]} == {"research", "partnership", "ranking"}
        assert {r["status"] for r in data["data"]} == {"published"}
        assert data["meta"] is None

    async def test_records_are_flat(self, client: AsyncClient, published_mix, ranking_payload):
        await published_mix()

        record = (await client.get(URL, params={"type": "ranking"})).json()["data"][0]

        assert record["program_name"] == ranking_payload["program_name"]
        assert record["previous_rank"] == "12"
        assert record["accreditation_type"] is None
        assert record["created_by"] == "dir@uni.edu"
        assert not any(isinstance(v, (dict, list)) for v in record.values())

    async def test_academic_reads_as_research(self, client: AsyncClient, published_mix):
        await published_mix()

        for value in ("academic", " Academic "):
            data = (await client.get(URL, params={"type": value})).json()

            assert data["total_results"] == 1
            assert data["data"][0]["entry_type"] == "research"

    async def test_unknown_type(self, client: AsyncClient):
        response = await client.get(URL, params={"type": "news"})
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"
        assert response.json()["field"] == "type"

    async def test_meta_envelope(self, client: AsyncClient, published_mix):
        await published_mix()

        data = (await client.get(URL, params={"meta": "true"})).json()

        assert data["meta"]["total"] == 3
        assert data["meta"]["source"] == "university-data-portal"
        assert data["meta"]["stats"]["published"] == 3
        assert data["meta"]["stats"]["total"] == 5

    async def test_configured_key_required(self, client: AsyncClient, export_key):
        assert (await client.get(URL)).status_code == 401
        assert (await client.get(URL, headers={"X-Export-API-Key": "wrong"})).status_code == 401
        assert (await client.get(URL, headers={"X-Export-API-Key": export_key.upper()})).status_code == 401
        assert (await client.get(URL, headers={"X-Export-API-Key": export_key})).status_code == 200
