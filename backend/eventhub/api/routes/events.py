"""
Event endpoints with Redis caching on the listing.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.deps import get_current_identity, require_permission
from eventhub.core.logging import get_logger
from eventhub.core.permissions import Identity, Permission
from eventhub.db.session import get_db
from eventhub.schemas.booking import BookingResponse, InventoryReport
from eventhub.schemas.common import DataResponse, ListResponse, PagedResponse
from eventhub.schemas.event import EventCreate, EventFilters, EventResponse, EventUpdate
from eventhub.services import event_service, inventory_service
from eventhub.services.booking_service import get_event_bookings
from eventhub.services.cache_service import (
    get_cached_events,
    invalidate_event_cache,
    set_cached_events,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


def _pagination(page: int, limit: int, total: int) -> dict:
    pagination = {}
    if page * limit < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if page > 1:
        pagination["prev"] = {"page": page - 1, "limit": limit}
    return pagination


def _event_list(events) -> dict:
    return {"success": True, "count": len(events), "data": events}


def get_event_filters(
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[int] = Query(None, ge=1),
    tag: Optional[int] = Query(None, ge=1),
    is_published: Optional[bool] = Query(None, alias="isPublished"),
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice"),
    upcoming: bool = Query(False),
    sort: str = Query("-date", max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> EventFilters:
    return EventFilters(
        search=search,
        category_id=category,
        tag_id=tag,
        is_published=is_published,
        is_featured=is_featured,
        min_price=min_price,
        max_price=max_price,
        upcoming=upcoming,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.get("", response_model=PagedResponse[EventResponse])
async def list_events_endpoint(
    filters: EventFilters = Depends(get_event_filters),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with filtering, sorting and pagination.
    Pages are cached in Redis and dropped whenever events or bookings change.
    """
    cache_key = filters.cache_key()
    cached = await get_cached_events(cache_key)
    if cached:
        logger.info("events_list_cache_hit", page=filters.page)
        return cached

    events, total = await event_service.list_events(db, filters)

    response_data = PagedResponse[EventResponse](
        count=len(events),
        total=total,
        page=filters.page,
        limit=filters.limit,
        pagination=_pagination(filters.page, filters.limit, total),
        data=[EventResponse.model_validate(e) for e in events],
    ).model_dump(mode="json", by_alias=True)

    await set_cached_events(cache_key, response_data)
    return response_data


@router.get("/featured", response_model=ListResponse[EventResponse])
async def featured_events(db: AsyncSession = Depends(get_db)):
    """Up to six featured, published events."""
    return _event_list(await event_service.get_featured_events(db))


@router.get("/upcoming", response_model=ListResponse[EventResponse])
async def upcoming_events(db: AsyncSession = Depends(get_db)):
    """The next published events, soonest first."""
    return _event_list(await event_service.get_upcoming_events(db))


@router.get("/organizer/{organizer_id}", response_model=ListResponse[EventResponse])
async def events_by_organizer(organizer_id: int, db: AsyncSession = Depends(get_db)):
    return _event_list(await event_service.get_events_by_organizer(db, organizer_id))


@router.post("", response_model=DataResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    identity: Identity = Depends(require_permission(Permission.CREATE_EVENT)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new event. Organizers and admins only."""
    event = await event_service.create_event(db, event_data, identity.id)
    await db.commit()
    await invalidate_event_cache()
    return {"success": True, "data": event}


@router.get("/{event_id}", response_model=DataResponse[EventResponse])
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single event by ID. Not cached (needs real-time ticket counts)."""
    event = await event_service.get_event(db, event_id)
    return {"success": True, "data": event}


@router.put("/{event_id}", response_model=DataResponse[EventResponse])
async def update_event_endpoint(
    event_id: int,
    event_data: EventUpdate,
    identity: Identity = Depends(
        require_permission(Permission.UPDATE_EVENT, Permission.UPDATE_OWN_EVENT)
    ),
    db: AsyncSession = Depends(get_db),
):
    """Update an event. Its organizer or an admin only."""
    event = await event_service.update_event(db, event_id, event_data, identity)
    await db.commit()
    await invalidate_event_cache()
    return {"success": True, "data": event}


@router.delete("/{event_id}", response_model=DataResponse[dict])
async def delete_event_endpoint(
    event_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event that has no bookings."""
    await event_service.delete_event(db, event_id, identity)
    await db.commit()
    await invalidate_event_cache()
    return {"success": True, "data": {}}


@router.get("/{event_id}/bookings", response_model=ListResponse[BookingResponse])
async def event_bookings_endpoint(
    event_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Bookings for one event. Its organizer or an admin only."""
    bookings = await get_event_bookings(db, event_id, identity)
    return {"success": True, "count": len(bookings), "data": bookings}


@router.get("/{event_id}/inventory", response_model=DataResponse[InventoryReport])
async def event_inventory_endpoint(
    event_id: int,
    identity: Identity = Depends(require_permission(Permission.VIEW_ALL_BOOKINGS)),
    db: AsyncSession = Depends(get_db),
):
    """Stored ticket counter next to the value recomputed from active bookings."""
    report = await inventory_service.reconcile(db, event_id)
    return {"success": True, "data": report}
