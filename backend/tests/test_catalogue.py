"""
Tests for categories, tags and user administration.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_category_crud(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/events/categories",
        json={"name": "Live Music", "description": "Concerts and gigs"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    category = response.json()["data"]
    assert category["slug"] == "live-music"
    assert category["isActive"] is True

    listing = await client.get("/api/v1/events/categories")
    assert listing.json()["count"] == 1

    duplicate = await client.post(
        "/api/v1/events/categories", json={"name": "live music"}, headers=admin_headers
    )
    assert duplicate.status_code == 400

    response = await client.delete(f"/api/v1/events/categories/{category['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert (await client.get("/api/v1/events/categories")).json()["count"] == 0


@pytest.mark.asyncio
async def test_category_requires_admin(client: AsyncClient, organizer_headers):
    response = await client.post(
        "/api/v1/events/categories", json={"name": "Sports"}, headers=organizer_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_category_in_use_cannot_be_deleted(client: AsyncClient, admin_headers, organizer_headers, test_event):
    category_id = (
        await client.post("/api/v1/events/categories", json={"name": "Jazz"}, headers=admin_headers)
    ).json()["data"]["id"]
    await client.put(
        f"/api/v1/events/{test_event.id}", json={"category": category_id}, headers=organizer_headers
    )

    response = await client.delete(f"/api/v1/events/categories/{category_id}", headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_tag_ownership(client: AsyncClient, organizer_headers, other_organizer_headers, admin_headers):
    response = await client.post(
        "/api/v1/tags", json={"name": "Outdoor", "color": "#123abc"}, headers=organizer_headers
    )
    assert response.status_code == 201
    tag = response.json()["data"]
    assert tag["color"] == "#123abc"

    assert (await client.delete(f"/api/v1/tags/{tag['id']}", headers=other_organizer_headers)).status_code == 403
    assert (await client.delete(f"/api/v1/tags/{tag['id']}", headers=organizer_headers)).status_code == 200

    second = (
        await client.post("/api/v1/tags", json={"name": "Indoor"}, headers=organizer_headers)
    ).json()["data"]
    assert (await client.delete(f"/api/v1/tags/{second['id']}", headers=admin_headers)).status_code == 200


@pytest.mark.asyncio
async def test_tag_validation_and_permissions(client: AsyncClient, auth_headers, admin_headers):
    assert (await client.post("/api/v1/tags", json={"name": "x"}, headers=auth_headers)).status_code == 403

    response = await client.post(
        "/api/v1/tags", json={"name": "Bad", "color": "green"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "color"


@pytest.mark.asyncio
async def test_users_admin_only(client: AsyncClient, auth_headers, organizer_headers):
    assert (await client.get("/api/v1/users", headers=auth_headers)).status_code == 403
    assert (await client.get("/api/v1/users", headers=organizer_headers)).status_code == 403
    assert (await client.get("/api/v1/users")).status_code == 401


@pytest.mark.asyncio
async def test_admin_manages_users(client: AsyncClient, admin_headers, test_user, other_user):
    listing = await client.get("/api/v1/users", headers=admin_headers)
    assert listing.status_code == 200
    assert listing.json()["count"] == 3

    response = await client.put(
        f"/api/v1/users/{test_user.id}", json={"role": "organizer"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "organizer"

    response = await client.delete(f"/api/v1/users/{other_user.id}", headers=admin_headers)
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/users/{other_user.id}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_deactivated_user_is_locked_out(client: AsyncClient, admin_headers, test_user, auth_headers):
    await client.put(f"/api/v1/users/{test_user.id}", json={"isActive": False}, headers=admin_headers)
    assert (await client.get("/api/v1/auth/me", headers=auth_headers)).status_code == 401


@pytest.mark.asyncio
async def test_user_with_bookings_cannot_be_deleted(
    client: AsyncClient, admin_headers, auth_headers, test_user, test_event
):
    await client.post(
        "/api/v1/bookings", json={"event": test_event.id, "ticketCount": 1}, headers=auth_headers
    )
    response = await client.delete(f"/api/v1/users/{test_user.id}", headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["cache"] == {"status": "disabled"}

    metrics = await client.get("/metrics")
    assert metrics.status_code == 200
    assert "booking_attempts_total" in metrics.text


@pytest.mark.asyncio
async def test_unknown_route_envelope(client: AsyncClient):
    response = await client.get("/api/v1/nowhere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Resource not found"}
