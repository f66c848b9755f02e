"""Friendship endpoints."""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient


class TestFriendsApi:
    """Request -> accept -> list -> remove."""

    @pytest.mark.asyncio
    async def test_lifecycle(self, client: AsyncClient, make_learner, headers_for):
        ana = await make_learner("ana")
        beto = await make_learner("beto")

        sent = await client.post("/api/v1/friends/requests", json={"receiver_id": beto}, headers=headers_for(ana))
        assert sent.status_code == 201
        assert sent.json()["status"] == "pending"

        dup = await client.post("/api/v1/friends/requests", json={"receiver_id": ana}, headers=headers_for(beto))
        assert dup.status_code == 409

        beto_view = (await client.get("/api/v1/friends", headers=headers_for(beto))).json()
        assert [r["username"] for r in beto_view["incoming"]] == ["ana"]

        accepted = await client.post(f"/api/v1/friends/requests/{ana}/accept", headers=headers_for(beto))
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "accepted"

        ana_view = (await client.get("/api/v1/friends", headers=headers_for(ana))).json()
        assert [r["user_id"] for r in ana_view["friends"]] == [beto]
        assert ana_view["friends"][0]["is_requester"] is True

        removed = await client.delete(f"/api/v1/friends/{beto}", headers=headers_for(ana))
        assert removed.status_code == 204

        again = await client.delete(f"/api/v1/friends/{beto}", headers=headers_for(ana))
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_decline(self, client: AsyncClient, make_learner, headers_for):
        ana = await make_learner("ana")
        beto = await make_learner("beto")
        await client.post("/api/v1/friends/requests", json={"receiver_id": beto}, headers=headers_for(ana))

        declined = await client.post(f"/api/v1/friends/requests/{ana}/decline", headers=headers_for(beto))
        assert declined.status_code == 204

        view = (await client.get("/api/v1/friends", headers=headers_for(ana))).json()
        assert view == {"friends": [], "incoming": [], "outgoing": []}

    @pytest.mark.asyncio
    async def test_self_and_unknown_targets(self, client: AsyncClient, make_learner, headers_for):
        ana = await make_learner("ana")

        self_request = await client.post(
            "/api/v1/friends/requests", json={"receiver_id": ana}, headers=headers_for(ana)
        )
        assert self_request.status_code == 400

        unknown = await client.post(
            "/api/v1/friends/requests", json={"receiver_id": str(uuid.uuid4())}, headers=headers_for(ana)
        )
        assert unknown.status_code == 404

        malformed = await client.post(
            "/api/v1/friends/requests", json={"receiver_id": "nope"}, headers=headers_for(ana)
        )
        assert malformed.status_code == 400

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient, make_learner, headers_for):
        ana = await make_learner("ana")
        await make_learner("anabel")

        response = await client.get("/api/v1/friends/search", params={"q": "ana"}, headers=headers_for(ana))
        assert [r["username"] for r in response.json()] == ["anabel"]

        blank = await client.get("/api/v1/friends/search", params={"q": ""}, headers=headers_for(ana))
        assert blank.json() == []
