"""
Tests for event CRUD, listing and lookup endpoints.
"""

import pytest
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient
from sqlalchemy.exc import InvalidRequestError

from eventhub.models.event import Event
from eventhub.models.user import User


def _event_payload(**overrides) -> dict:
    payload = {
        "title": "Python Conference 2026",
        "description": "Annual Python gathering",
        "location": "Convention Center",
        "date": (datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
        "startTime": "09:00",
        "endTime": "17:00",
        "capacity": 500,
        "price": 49.5,
        "isPublished": True,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, organizer_headers, organizer):
    """Organizers can create an event with every ticket available."""
    response = await client.post("/api/v1/events", json=_event_payload(), headers=organizer_headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["title"] == "Python Conference 2026"
    assert data["slug"] == "python-conference-2026"
    assert data["capacity"] == 500
    assert data["availableTickets"] == 500  # All tickets available initially
    assert data["organizerId"] == organizer.id
    assert data["isFull"] is False
    assert data["isUpcoming"] is True
    assert data["languages"] == ["en"]


@pytest.mark.asyncio
async def test_create_event_ignores_available_tickets(client: AsyncClient, organizer_headers):
    response = await client.post(
        "/api/v1/events",
        json=_event_payload(capacity=20, availableTickets=3),
        headers=organizer_headers,
    )
    assert response.status_code == 201
    assert response.json()["data"]["availableTickets"] == 20


@pytest.mark.asyncio
async def test_create_event_unauthenticated(client: AsyncClient):
    """Unauthenticated request returns 401."""
    response = await client.post("/api/v1/events", json=_event_payload())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_user_cannot_create_event(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/events", json=_event_payload(), headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_event_past_date(client: AsyncClient, organizer_headers):
    """Event with past date returns 400."""
    past_date = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    response = await client.post(
        "/api/v1/events", json=_event_payload(date=past_date), headers=organizer_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "date", "message": "Event date must be in the future"}
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("capacity", [0, -5])
async def test_create_event_invalid_capacity(client: AsyncClient, organizer_headers, capacity):
    """Zero or negative capacity fails validation."""
    response = await client.post(
        "/api/v1/events", json=_event_payload(capacity=capacity), headers=organizer_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "capacity"


@pytest.mark.asyncio
async def test_create_event_negative_price(client: AsyncClient, organizer_headers):
    response = await client.post(
        "/api/v1/events", json=_event_payload(price=-1), headers=organizer_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_event_with_category_and_tags(client: AsyncClient, admin_headers, organizer_headers):
    category = await client.post(
        "/api/v1/events/categories", json={"name": "Tech Talks"}, headers=admin_headers
    )
    tag = await client.post("/api/v1/tags", json={"name": "python"}, headers=admin_headers)
    category_id = category.json()["data"]["id"]
    tag_id = tag.json()["data"]["id"]

    response = await client.post(
        "/api/v1/events",
        json=_event_payload(category=category_id, tags=[tag_id]),
        headers=organizer_headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["categoryId"] == category_id
    assert [t["name"] for t in data["tags"]] == ["python"]

    listing = await client.get(f"/api/v1/events?tag={tag_id}")
    assert listing.json()["total"] == 1


@pytest.mark.asyncio
async def test_create_event_unknown_category(client: AsyncClient, organizer_headers):
    response = await client.post(
        "/api/v1/events", json=_event_payload(category=777), headers=organizer_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_event(client: AsyncClient, test_event):
    response = await client.get(f"/api/v1/events/{test_event.id}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == test_event.id
    assert data["availableTickets"] == 10


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    response = await client.get("/api/v1/events/99999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Event not found with id of 99999"}


@pytest.mark.asyncio
async def test_list_events_pagination(client: AsyncClient, organizer_headers):
    for index in range(3):
        await client.post(
            "/api/v1/events",
            json=_event_payload(title=f"Event {index}"),
            headers=organizer_headers,
        )

    response = await client.get("/api/v1/events?page=1&limit=2")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["total"] == 3
    assert body["count"] == 2
    assert body["pagination"]["next"] == {"page": 2, "limit": 2}
    assert body["pagination"]["prev"] is None

    second = (await client.get("/api/v1/events?page=2&limit=2")).json()
    assert second["count"] == 1
    assert second["pagination"]["prev"] == {"page": 1, "limit": 2}


@pytest.mark.asyncio
async def test_list_events_filters(client: AsyncClient, test_event, free_event):
    free_only = (await client.get("/api/v1/events?maxPrice=0")).json()
    assert [event["id"] for event in free_only["data"]] == [free_event.id]

    search = (await client.get("/api/v1/events?search=concert")).json()
    assert [event["id"] for event in search["data"]] == [test_event.id]

    by_price = (await client.get("/api/v1/events?sort=price")).json()
    assert [event["id"] for event in by_price["data"]] == [free_event.id, test_event.id]


@pytest.mark.asyncio
async def test_list_events_bad_sort(client: AsyncClient):
    response = await client.get("/api/v1/events?sort=secret")
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "sort"


@pytest.mark.asyncio
async def test_list_events_invalid_limit(client: AsyncClient):
    response = await client.get("/api/v1/events?limit=0")
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_featured_and_upcoming(client: AsyncClient, organizer_headers):
    await client.post(
        "/api/v1/events", json=_event_payload(title="Star Gig", isFeatured=True), headers=organizer_headers
    )
    await client.post(
        "/api/v1/events", json=_event_payload(title="Draft", isPublished=False), headers=organizer_headers
    )

    featured = (await client.get("/api/v1/events/featured")).json()
    assert [event["title"] for event in featured["data"]] == ["Star Gig"]

    upcoming = (await client.get("/api/v1/events/upcoming")).json()
    assert [event["title"] for event in upcoming["data"]] == ["Star Gig"]


@pytest.mark.asyncio
async def test_events_by_organizer(client: AsyncClient, organizer, test_event, free_event):
    response = await client.get(f"/api/v1/events/organizer/{organizer.id}")
    assert response.status_code == 200
    assert response.json()["count"] == 2


@pytest.mark.asyncio
async def test_update_event(client: AsyncClient, organizer_headers, test_event):
    response = await client.put(
        f"/api/v1/events/{test_event.id}",
        json={"title": "Renamed Concert", "price": 30},
        headers=organizer_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Renamed Concert"
    assert data["slug"] == "renamed-concert"
    assert data["price"] == 30


@pytest.mark.asyncio
async def test_update_cannot_touch_inventory(client: AsyncClient, organizer_headers, test_event):
    """capacity and availableTickets in an update body are ignored."""
    response = await client.put(
        f"/api/v1/events/{test_event.id}",
        json={"capacity": 1000, "availableTickets": 999, "location": "New Hall"},
        headers=organizer_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["location"] == "New Hall"
    assert data["capacity"] == 10
    assert data["availableTickets"] == 10


@pytest.mark.asyncio
async def test_update_event_other_organizer(client: AsyncClient, other_organizer_headers, test_event):
    response = await client.put(
        f"/api/v1/events/{test_event.id}",
        json={"title": "Hijacked"},
        headers=other_organizer_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_updates_any_event(client: AsyncClient, admin_headers, test_event):
    response = await client.put(
        f"/api/v1/events/{test_event.id}", json={"isFeatured": True}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["isFeatured"] is True


@pytest.mark.asyncio
async def test_delete_event(client: AsyncClient, organizer_headers, test_event):
    response = await client.delete(f"/api/v1/events/{test_event.id}", headers=organizer_headers)
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/events/{test_event.id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_event_with_bookings(client: AsyncClient, organizer_headers, auth_headers, test_event):
    await client.post(
        "/api/v1/bookings", json={"event": test_event.id, "ticketCount": 1}, headers=auth_headers
    )
    response = await client.delete(f"/api/v1/events/{test_event.id}", headers=organizer_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete event with existing bookings"


@pytest.mark.asyncio
async def test_delete_event_forbidden(client: AsyncClient, auth_headers, test_event):
    response = await client.delete(f"/api/v1/events/{test_event.id}", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unloaded_collections_raise(session_factory, organizer, test_event):
    """One-to-many collections are never loaded implicitly."""
    async with session_factory() as session:
        event = await session.get(Event, test_event.id)
        with pytest.raises(InvalidRequestError):
            event.bookings
        user = await session.get(User, organizer.id)
        with pytest.raises(InvalidRequestError):
            user.events
