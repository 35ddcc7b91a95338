"""
Event service handling CRUD operations and listing queries.

The ticket counter is not writable from here: new events start with
available_tickets = capacity and every later change goes through
inventory_service.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.exceptions import Conflict, EventNotFound, Forbidden, NotFound, ValidationError
from eventhub.core.logging import get_logger
from eventhub.core.permissions import Identity, Permission, can_act_on_owned
from eventhub.core.text import slugify
from eventhub.models.booking import Booking
from eventhub.models.category import Category, Tag
from eventhub.models.event import Event
from eventhub.schemas.event import EventCreate, EventFilters, EventUpdate

logger = get_logger(__name__)

FEATURED_LIMIT = 6
UPCOMING_LIMIT = 10

SORTABLE_FIELDS = {
    "date": Event.date,
    "price": Event.price,
    "title": Event.title,
    "capacity": Event.capacity,
    "availableTickets": Event.available_tickets,
    "createdAt": Event.created_at,
}


def _ensure_future(date: datetime) -> None:
    if date <= datetime.now(timezone.utc):
        raise ValidationError(
            "Event date must be in the future",
            errors=[{"field": "date", "message": "Event date must be in the future"}],
        )


async def _check_category(db: AsyncSession, category_id: Optional[int]) -> None:
    if category_id is None:
        return
    result = await db.execute(select(Category.id).where(Category.id == category_id))
    if result.scalar_one_or_none() is None:
        raise NotFound("Category not found")


async def _resolve_tags(db: AsyncSession, tag_ids: list[int]) -> list[Tag]:
    if not tag_ids:
        return []
    result = await db.execute(select(Tag).where(Tag.id.in_(tag_ids)))
    tags = {tag.id: tag for tag in result.scalars().all()}
    for tag_id in tag_ids:
        if tag_id not in tags:
            raise NotFound(f"Tag with id {tag_id} not found")
    return [tags[tag_id] for tag_id in dict.fromkeys(tag_ids)]


def _order_by(sort: str) -> list:
    clauses = []
    for part in sort.split(","):
        part = part.strip()
        if not part:
            continue
        descending = part.startswith("-")
        column = SORTABLE_FIELDS.get(part.lstrip("-"))
        if column is None:
            raise ValidationError(
                f"Cannot sort by {part.lstrip('-')}",
                errors=[{"field": "sort", "message": f"Unknown sort field {part.lstrip('-')}"}],
            )
        clauses.append(column.desc() if descending else column.asc())
    return clauses or [Event.date.desc()]


async def create_event(db: AsyncSession, event_data: EventCreate, organizer_id: int) -> Event:
    """Create a new event with every ticket available."""
    _ensure_future(event_data.date)
    await _check_category(db, event_data.category_id)
    tags = await _resolve_tags(db, event_data.tag_ids)

    values = event_data.model_dump(exclude={"tag_ids", "image"})
    event = Event(
        **values,
        slug=slugify(event_data.title),
        image=event_data.image or "default-event.jpg",
        available_tickets=event_data.capacity,
        organizer_id=organizer_id,
    )
    event.tags = tags
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, capacity=event.capacity)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    result = await db.execute(
        select(Event)
        .where(Event.id == event_id)
        .execution_options(populate_existing=True)
    )
    event = result.scalar_one_or_none()

    if not event:
        raise EventNotFound(event_id)
    return event


async def list_events(db: AsyncSession, filters: EventFilters) -> tuple[list[Event], int]:
    """List events matching the filters, with pagination."""
    query = select(Event)

    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(
            or_(
                Event.title.ilike(pattern),
                Event.description.ilike(pattern),
                Event.location.ilike(pattern),
            )
        )
    if filters.category_id is not None:
        query = query.where(Event.category_id == filters.category_id)
    if filters.tag_id is not None:
        query = query.where(Event.tags.any(Tag.id == filters.tag_id))
    if filters.organizer_id is not None:
        query = query.where(Event.organizer_id == filters.organizer_id)
    if filters.is_published is not None:
        query = query.where(Event.is_published == filters.is_published)
    if filters.is_featured is not None:
        query = query.where(Event.is_featured == filters.is_featured)
    if filters.min_price is not None:
        query = query.where(Event.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Event.price <= filters.max_price)
    if filters.upcoming:
        query = query.where(Event.date >= datetime.now(timezone.utc))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(*_order_by(filters.sort), Event.id.asc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total


async def get_featured_events(db: AsyncSession) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.is_featured.is_(True), Event.is_published.is_(True))
        .order_by(Event.date.asc())
        .limit(FEATURED_LIMIT)
    )
    return list(result.scalars().all())


async def get_upcoming_events(db: AsyncSession) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.date >= datetime.now(timezone.utc), Event.is_published.is_(True))
        .order_by(Event.date.asc())
        .limit(UPCOMING_LIMIT)
    )
    return list(result.scalars().all())


async def get_events_by_organizer(db: AsyncSession, organizer_id: int) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.organizer_id == organizer_id)
        .order_by(Event.date.asc())
    )
    return list(result.scalars().all())


async def update_event(
    db: AsyncSession,
    event_id: int,
    event_data: EventUpdate,
    identity: Identity,
) -> Event:
    """
    Update descriptive fields of an event.

    Capacity and available_tickets are not part of EventUpdate, so a client
    cannot overwrite the ticket counter through this path.
    """
    event = await get_event(db, event_id)

    if not can_act_on_owned(
        identity, event.organizer_id, Permission.UPDATE_EVENT, Permission.UPDATE_OWN_EVENT
    ):
        raise Forbidden(f"User {identity.id} is not authorized to update this event")

    changes = event_data.model_dump(exclude_unset=True, exclude={"tag_ids"})
    if changes.get("date") is not None:
        _ensure_future(changes["date"])
    if "category_id" in changes:
        await _check_category(db, changes["category_id"])
    if event_data.tag_ids is not None:
        event.tags = await _resolve_tags(db, event_data.tag_ids)

    for field, value in changes.items():
        if value is None and field not in ("category_id", "image"):
            continue
        setattr(event, field, value)
    if "title" in changes and changes["title"]:
        event.slug = slugify(changes["title"])
    if not event.image:
        event.image = "default-event.jpg"

    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, fields=sorted(changes))
    return event


async def delete_event(db: AsyncSession, event_id: int, identity: Identity) -> None:
    """Delete an event. Refused while any booking still references it."""
    event = await get_event(db, event_id)

    if not can_act_on_owned(
        identity, event.organizer_id, Permission.DELETE_EVENT, Permission.DELETE_OWN_EVENT
    ):
        raise Forbidden(f"User {identity.id} is not authorized to delete this event")

    result = await db.execute(
        select(func.count()).select_from(Booking).where(Booking.event_id == event_id)
    )
    if result.scalar() > 0:
        raise Conflict("Cannot delete event with existing bookings")

    await db.delete(event)
    await db.flush()
    logger.info("event_deleted", event_id=event_id, requester=identity.id)
