"""Integration tests for competition enrollment (requires running PG + Redis).

Relies on the 'Demo Cup' row seeded by migration 007.
"""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.integration]


async def _login_fresh_user(client: AsyncClient) -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    user = {"username": f"player_{uid}", "email": f"player_{uid}@example.com", "password": "TestPass1"}
    await client.post("/api/v1/auth/register", json=user)
    resp = await client.post(
        "/api/v1/auth/login", json={"email": user["email"], "password": user["password"]}
    )
    return {"Authorization": f"Bearer {resp.json()['data']['accessToken']}"}


async def _demo_cup_id(client: AsyncClient, headers: dict[str, str]) -> int:
    resp = await client.get("/api/v1/competitions", headers=headers)
    items = resp.json()["data"]["items"]
    return next(c["id"] for c in items if c["name"] == "Demo Cup")


class TestJoin:
    async def test_join_seeds_starting_balance(self, client: AsyncClient) -> None:
        headers = await _login_fresh_user(client)
        comp_id = await _demo_cup_id(client, headers)

        resp = await client.post(f"/api/v1/competitions/join/{comp_id}", headers=headers)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["competitionId"] == comp_id
        assert data["portfolioValue"] == 10000.0
        assert data["username"].startswith("player_")
        assert "email" not in data

    async def test_repeat_join_creates_new_enrollment(self, client: AsyncClient) -> None:
        headers = await _login_fresh_user(client)
        comp_id = await _demo_cup_id(client, headers)

        first = await client.post(f"/api/v1/competitions/join/{comp_id}", headers=headers)
        second = await client.post(f"/api/v1/competitions/join/{comp_id}", headers=headers)

        assert first.json()["data"]["id"] != second.json()["data"]["id"]

    async def test_unknown_competition(self, client: AsyncClient) -> None:
        headers = await _login_fresh_user(client)
        resp = await client.post("/api/v1/competitions/join/987654321", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["code"] == 6001

    async def test_regular_user_cannot_create(self, client: AsyncClient) -> None:
        headers = await _login_fresh_user(client)
        resp = await client.post(
            "/api/v1/competitions",
            json={
                "name": "Sneaky Cup",
                "startDate": "2026-01-01T00:00:00Z",
                "endDate": "2026-02-01T00:00:00Z",
                "startingBalance": 1,
            },
            headers=headers,
        )
        assert resp.status_code == 403
        assert resp.json()["code"] == 1007
