"""Integration tests for /api/v1/entries endpoints."""

from httpx import AsyncClient

BASE = "/api/v1/entries"


async def _create(client: AsyncClient, headers: dict, kind: str, payload: dict) -> dict:
    response = await client.post(BASE, json={"kind": kind, "payload": payload}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestEntriesAPI:

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get(BASE)
        assert response.status_code == 401

    async def test_create_entry_starts_as_draft(self, client: AsyncClient, auth_headers_for, research_payload):
        data = await _create(client, auth_headers_for("Alice@Uni.edu"), "research", research_payload)

        assert data["status"] == "draft"
        assert data["created_by"] == "alice@uni.edu"
        assert data["available_actions"] == ["submit"]
        assert "X-Request-ID" in (await client.get(f"{BASE}/{data['id']}", headers=auth_headers_for("alice@uni.edu"))).headers

    async def test_create_rejects_bad_payload(self, client: AsyncClient, auth_headers_for, research_payload):
        response = await client.post(
            BASE,
            json={"kind": "research", "payload": {**research_payload, "year": "twenty"}},
            headers=auth_headers_for("alice@uni.edu"),
        )

        assert response.status_code == 422

    async def test_full_workflow_over_http(self, client: AsyncClient, staff, auth_headers_for, ranking_payload):
        alice = auth_headers_for("alice@uni.edu")
        head = auth_headers_for("head@uni.edu")
        director = auth_headers_for("director@uni.edu")
        entry = await _create(client, alice, "ranking", ranking_payload)
        url = f"{BASE}/{entry['id']}/actions"

        response = await client.post(f"{url}/submit", headers=alice)
        assert response.json()["status"] == "pending_review"

        response = await client.post(f"{url}/approve", headers=head)
        assert response.json()["reviewed_by"] == "head@uni.edu"

        response = await client.post(f"{url}/publish", headers=director)
        data = response.json()
        assert data["status"] == "published"
        assert data["published_by"] == "director@uni.edu"
        assert data["available_actions"] == ["revert"]

        history = await client.get(f"{BASE}/{entry['id']}/history", headers=alice)
        assert history.status_code == 200
        assert len(history.json()) == 4

    async def test_workflow_errors_map_to_status_codes(self, client: AsyncClient, staff, auth_headers_for, ranking_payload):
        alice = auth_headers_for("alice@uni.edu")
        entry = await _create(client, alice, "ranking", ranking_payload)
        url = f"{BASE}/{entry['id']}/actions"

        response = await client.post(f"{url}/publish", headers=alice)
        assert response.status_code == 409
        assert response.json()["code"] == "invalid_transition"

        await client.post(f"{url}/submit", headers=alice)
        response = await client.post(f"{url}/approve", headers=alice)
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

        response = await client.post(f"{url}/reject", json={"reason": "  "}, headers=auth_headers_for("head@uni.edu"))
        assert response.status_code == 422
        assert response.json()["field"] == "reason"

        response = await client.get(f"{BASE}/{entry['id']}", headers=alice)
        assert response.json()["status"] == "pending_review"

    async def test_unknown_entry_and_action(self, client: AsyncClient, auth_headers_for):
        headers = auth_headers_for("alice@uni.edu")

        response = await client.get(f"{BASE}/does-not-exist", headers=headers)
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

        response = await client.post(f"{BASE}/does-not-exist/actions/archive", headers=headers)
        assert response.status_code == 422

    async def test_patch_draft_and_lock_after_submit(self, client: AsyncClient, auth_headers_for, ranking_payload):
        alice = auth_headers_for("alice@uni.edu")
        entry = await _create(client, alice, "ranking", ranking_payload)
        url = f"{BASE}/{entry['id']}"

        response = await client.patch(url, json={"payload": {"rank": "5"}}, headers=alice)
        assert response.status_code == 200
        assert response.json()["payload"]["rank"] == "5"
        assert response.json()["payload"]["ranking_body"] == ranking_payload["ranking_body"]

        response = await client.patch(url, json={"payload": {"rank": "4"}}, headers=auth_headers_for("bob@uni.edu"))
        assert response.status_code == 403

        response = await client.patch(url, json={"payload": {"year": "20x5"}}, headers=alice)
        assert response.status_code == 422

        await client.post(f"{url}/actions/submit", headers=alice)
        response = await client.patch(url, json={"payload": {"rank": "1"}}, headers=alice)
        assert response.status_code == 422

    async def test_list_filters_and_stats(
        self, client: AsyncClient, auth_headers_for, ranking_payload, research_payload
    ):
        alice = auth_headers_for("alice@uni.edu")
        bob = auth_headers_for("bob@uni.edu")
        ranking = await _create(client, alice, "ranking", ranking_payload)
        await _create(client, bob, "research", research_payload)
        await client.post(f"{BASE}/{ranking['id']}/actions/submit", headers=alice)

        response = await client.get(BASE, params={"status": "pending_review"}, headers=bob)
        assert [e["id"] for e in response.json()] == [ranking["id"]]

        response = await client.get(BASE, params={"mine": "true"}, headers=bob)
        assert [e["kind"] for e in response.json()] == ["research"]

        response = await client.get(BASE, params={"kind": "partnership"}, headers=bob)
        assert response.json() == []

        stats = (await client.get(f"{BASE}/stats", headers=bob)).json()
        assert stats["total"] == 2
        assert stats["pending_review"] == 1
        assert stats["draft"] == 1
