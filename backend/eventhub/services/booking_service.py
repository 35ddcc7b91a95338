"""
Booking lifecycle: create, cancel, confirm and read bookings.

Every change to the number of active tickets goes through exactly one
inventory call: create -> inventory_service.reserve, cancel ->
inventory_service.release. Both happen in the request's transaction
together with the booking row, so either both land or neither does.

Status changes are guarded updates as well
(`UPDATE bookings SET status = 'cancelled' WHERE id = :id AND status IN
('pending', 'confirmed')`), so two concurrent cancels of the same booking
cannot both release its tickets.

Cancelled bookings are kept with status "cancelled" for the audit trail.
"""

import random
import time
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.config import get_settings
from eventhub.core.exceptions import (
    AlreadyCancelled,
    BookingNotFound,
    DomainError,
    EventNotFound,
    Forbidden,
    InsufficientInventory,
    ValidationError,
)
from eventhub.core.logging import get_logger
from eventhub.core.metrics import booking_cancellations, booking_latency, record_booking_attempt
from eventhub.core.permissions import Identity, Permission, can_act_on_owned
from eventhub.models.booking import (
    ACTIVE_STATUSES,
    Booking,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
    check_transition,
)
from eventhub.models.event import Event
from eventhub.services import inventory_service

logger = get_logger(__name__)
settings = get_settings()

MAX_REFERENCE_ATTEMPTS = 5


def generate_booking_reference(prefix: Optional[str] = None) -> str:
    """BK-<last 8 digits of the ms clock>-<4 random digits>, e.g. BK-12345678-0042."""
    prefix = prefix or settings.BOOKING_REFERENCE_PREFIX
    timestamp = str(int(time.time() * 1000))[-8:].zfill(8)
    suffix = str(random.randint(0, 9999)).zfill(4)
    return f"{prefix}-{timestamp}-{suffix}"


async def _unique_reference(db: AsyncSession) -> str:
    for _ in range(MAX_REFERENCE_ATTEMPTS):
        reference = generate_booking_reference()
        taken = await db.execute(
            select(Booking.id).where(Booking.booking_reference == reference)
        )
        if taken.scalar_one_or_none() is None:
            return reference
    raise DomainError("Could not allocate a booking reference", 500)


def _validate_ticket_count(ticket_count: int) -> None:
    limit = settings.MAX_TICKETS_PER_BOOKING
    if not 1 <= ticket_count <= limit:
        message = f"Ticket count must be between 1 and {limit}"
        raise ValidationError(message, errors=[{"field": "ticketCount", "message": message}])


def _price_booking(price: float, ticket_count: int, payment_method: Optional[str]) -> tuple[float, str, str]:
    """Return (total_price, payment_method, payment_status)."""
    total_price = round(price * ticket_count, 2)
    if total_price == 0:
        return total_price, PaymentMethod.FREE.value, PaymentStatus.PAID.value
    method = PaymentMethod(payment_method or PaymentMethod.ONSITE.value)
    if method == PaymentMethod.FREE:
        raise ValidationError(
            "Paid events cannot be booked with the free payment method",
            errors=[{"field": "paymentMethod", "message": "Invalid payment method for a paid event"}],
        )
    return total_price, method.value, PaymentStatus.UNPAID.value


async def create_booking(
    db: AsyncSession,
    event_id: int,
    user_id: int,
    ticket_count: int,
    special_requests: Optional[str] = None,
    payment_method: Optional[str] = None,
    status: BookingStatus = BookingStatus.CONFIRMED,
) -> Booking:
    """
    Reserve tickets and record the booking.

    Bookings are created "confirmed". "pending" is accepted for callers that
    will confirm later (it holds inventory all the same); nothing in the API
    produces it yet.
    """
    with booking_latency.time():
        try:
            _validate_ticket_count(ticket_count)
            if BookingStatus(status) not in ACTIVE_STATUSES:
                raise ValidationError(f"Bookings cannot be created as {BookingStatus(status).value}")

            exists = await db.execute(select(Event.id).where(Event.id == event_id))
            if exists.scalar_one_or_none() is None:
                raise EventNotFound(event_id)

            event = await inventory_service.reserve(db, event_id, ticket_count)
        except InsufficientInventory:
            record_booking_attempt("insufficient")
            raise
        except EventNotFound:
            record_booking_attempt("not_found")
            raise
        except ValidationError:
            record_booking_attempt("invalid")
            raise

        total_price, method, payment_status = _price_booking(event.price, ticket_count, payment_method)

        booking = Booking(
            user_id=user_id,
            event_id=event_id,
            ticket_count=ticket_count,
            status=BookingStatus(status).value,
            total_price=total_price,
            payment_method=method,
            payment_status=payment_status,
            special_requests=special_requests,
            booking_reference=await _unique_reference(db),
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)

    record_booking_attempt("success")
    logger.info(
        "booking_created",
        booking_id=booking.id,
        reference=booking.booking_reference,
        user_id=user_id,
        event_id=event_id,
        tickets=ticket_count,
        total_price=total_price,
        available=event.available_tickets,
    )
    return booking


async def _get_booking_row(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking


async def _move_status(db: AsyncSession, booking: Booking, target: BookingStatus) -> bool:
    """Guarded status update; False if another request changed the status first."""
    result = await db.execute(
        update(Booking)
        .where(Booking.id == booking.id, Booking.status == booking.status)
        .values(status=target.value)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def cancel_booking(db: AsyncSession, booking_id: int, identity: Identity) -> Booking:
    """
    Cancel a booking and release its tickets back to the event.

    Only the booking's owner or an admin may cancel. The booking row is
    kept with status "cancelled".
    """
    booking = await _get_booking_row(db, booking_id)

    if not can_act_on_owned(identity, booking.user_id, Permission.DELETE_BOOKING):
        logger.warning("booking_cancel_forbidden", booking_id=booking_id, requester=identity.id)
        raise Forbidden(f"User {identity.id} is not authorized to cancel this booking")

    check_transition(booking.status, BookingStatus.CANCELLED)

    if not await _move_status(db, booking, BookingStatus.CANCELLED):
        raise AlreadyCancelled()

    await inventory_service.release(db, booking.event_id, booking.ticket_count)

    booking = await _get_booking_row(db, booking_id)
    booking_cancellations.inc()
    logger.info(
        "booking_cancelled",
        booking_id=booking.id,
        reference=booking.booking_reference,
        requester=identity.id,
        event_id=booking.event_id,
        tickets_released=booking.ticket_count,
    )
    return booking


async def confirm_booking(db: AsyncSession, booking_id: int) -> Booking:
    """Move a pending booking to confirmed. Inventory is untouched: both states are active."""
    booking = await _get_booking_row(db, booking_id)
    check_transition(booking.status, BookingStatus.CONFIRMED)

    if not await _move_status(db, booking, BookingStatus.CONFIRMED):
        raise AlreadyCancelled(BookingStatus.CONFIRMED.value)

    booking = await _get_booking_row(db, booking_id)
    logger.info("booking_confirmed", booking_id=booking.id, reference=booking.booking_reference)
    return booking


async def get_booking(db: AsyncSession, booking_id: int, identity: Identity) -> Booking:
    booking = await _get_booking_row(db, booking_id)
    if not can_act_on_owned(identity, booking.user_id, Permission.VIEW_ALL_BOOKINGS):
        raise Forbidden(f"User {identity.id} is not authorized to access this booking")
    return booking


async def get_user_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    """Get all bookings for a user, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_event_bookings(db: AsyncSession, event_id: int, identity: Identity) -> list[Booking]:
    """Bookings for one event; visible to the event's organizer and to admins."""
    result = await db.execute(select(Event.organizer_id).where(Event.id == event_id))
    organizer_id = result.scalar_one_or_none()
    if organizer_id is None:
        raise EventNotFound(event_id)

    if not can_act_on_owned(
        identity,
        organizer_id,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.VIEW_OWN_EVENT_BOOKINGS,
    ):
        raise Forbidden(f"User {identity.id} is not authorized to view bookings for this event")

    result = await db.execute(
        select(Booking)
        .where(Booking.event_id == event_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())
