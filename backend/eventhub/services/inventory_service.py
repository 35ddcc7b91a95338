"""
Ticket inventory: the only code allowed to change Event.available_tickets.

CONCURRENCY STRATEGY: Guarded Atomic Update
===========================================

Problem:
  Two users try to buy the last tickets simultaneously.
  Both read available_tickets=2, both see enough, both decrement.
  Result: Oversold event.

Solution:
  The check and the decrement are one statement:

    UPDATE events SET available_tickets = available_tickets - :n
    WHERE id = :event_id AND available_tickets >= :n

  The database evaluates the WHERE clause under the row lock the UPDATE
  takes, so concurrent reservations on one event are serialized by the
  database itself. rowcount == 1 means the tickets are ours; rowcount == 0
  means the event is missing or short, and only then do we read the row to
  report which.

  No version column and no retry loop are needed: a losing request fails
  with InsufficientInventory straight away instead of re-reading.
  The CHECK constraints on the events table hold the same bounds.

Release is the mirror image, clamped so the counter never exceeds capacity.
Callers run reserve/release inside the same transaction as the booking row
they belong to (see booking_service), so a failure between the two rolls
both back.
"""

from typing import Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.exceptions import EventNotFound, InsufficientInventory, ValidationError
from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_inventory_operation
from eventhub.models.booking import ACTIVE_STATUSES, Booking
from eventhub.models.event import Event

logger = get_logger(__name__)


async def _load_event(db: AsyncSession, event_id: int) -> Optional[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.id == event_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _check_count(ticket_count: int) -> None:
    if ticket_count < 1:
        raise ValidationError(
            "Ticket count must be a positive integer",
            errors=[{"field": "ticketCount", "message": "Ticket count must be a positive integer"}],
        )


async def reserve(db: AsyncSession, event_id: int, ticket_count: int) -> Event:
    """
    Take `ticket_count` tickets from the event and return the updated Event.

    Raises EventNotFound if the event does not exist and
    InsufficientInventory if fewer than `ticket_count` tickets are left.
    """
    _check_count(ticket_count)

    result = await db.execute(
        update(Event)
        .where(Event.id == event_id, Event.available_tickets >= ticket_count)
        .values(available_tickets=Event.available_tickets - ticket_count)
        .execution_options(synchronize_session=False)
    )

    event = await _load_event(db, event_id)

    if result.rowcount == 1:
        record_inventory_operation("reserve", "ok")
        logger.info(
            "inventory_reserved",
            event_id=event_id,
            tickets=ticket_count,
            available=event.available_tickets,
        )
        return event

    if event is None:
        record_inventory_operation("reserve", "missing")
        raise EventNotFound(event_id)

    record_inventory_operation("reserve", "rejected")
    logger.warning(
        "inventory_reserve_rejected",
        event_id=event_id,
        requested=ticket_count,
        available=event.available_tickets,
    )
    raise InsufficientInventory(event_id, ticket_count, event.available_tickets)


async def release(db: AsyncSession, event_id: int, ticket_count: int) -> Event:
    """
    Return `ticket_count` tickets to the event, never going above capacity.

    Must be called at most once per booking allocation. Raises EventNotFound
    when the event row is gone: the caller's transaction should then roll back
    rather than drop the release.
    """
    _check_count(ticket_count)

    restored = Event.available_tickets + ticket_count
    result = await db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(
            available_tickets=case(
                (restored > Event.capacity, Event.capacity),
                else_=restored,
            )
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        record_inventory_operation("release", "missing")
        logger.error("inventory_release_failed", event_id=event_id, tickets=ticket_count)
        raise EventNotFound(event_id)

    event = await _load_event(db, event_id)
    record_inventory_operation("release", "ok")
    logger.info(
        "inventory_released",
        event_id=event_id,
        tickets=ticket_count,
        available=event.available_tickets,
    )
    return event


async def active_ticket_count(db: AsyncSession, event_id: int) -> int:
    """Sum of ticket_count over the event's pending and confirmed bookings."""
    result = await db.execute(
        select(func.coalesce(func.sum(Booking.ticket_count), 0)).where(
            Booking.event_id == event_id,
            Booking.status.in_([status.value for status in ACTIVE_STATUSES]),
        )
    )
    return int(result.scalar_one())


async def reconcile(db: AsyncSession, event_id: int) -> dict:
    """
    Compare the stored counter with capacity minus active bookings.

    Read-only: drift is reported and logged, never silently rewritten.
    """
    event = await _load_event(db, event_id)
    if event is None:
        raise EventNotFound(event_id)

    active = await active_ticket_count(db, event_id)
    expected = event.capacity - active
    consistent = expected == event.available_tickets

    if not consistent:
        logger.error(
            "inventory_drift_detected",
            event_id=event_id,
            stored=event.available_tickets,
            expected=expected,
        )

    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "available_tickets": event.available_tickets,
        "active_tickets": active,
        "expected_available": expected,
        "consistent": consistent,
    }
