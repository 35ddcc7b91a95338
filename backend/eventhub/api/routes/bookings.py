"""
Booking endpoints: create, list, fetch and cancel.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.deps import get_current_identity, require_permission
from eventhub.core.logging import get_logger
from eventhub.core.permissions import Identity, Permission
from eventhub.db.session import get_db
from eventhub.schemas.booking import BookingCreate, BookingResponse
from eventhub.schemas.common import DataResponse, ListResponse
from eventhub.services.booking_service import (
    cancel_booking,
    create_booking,
    get_booking,
    get_user_bookings,
)
from eventhub.services.cache_service import invalidate_event_cache

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=DataResponse[BookingResponse], status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    identity: Identity = Depends(require_permission(Permission.CREATE_BOOKING)),
    db: AsyncSession = Depends(get_db),
):
    """
    Book tickets for an event.

    The ticket check and decrement happen in one conditional UPDATE, so
    concurrent requests for the last tickets cannot oversell the event.
    """
    booking = await create_booking(
        db,
        event_id=booking_data.event_id,
        user_id=identity.id,
        ticket_count=booking_data.ticket_count,
        special_requests=booking_data.special_requests,
        payment_method=booking_data.payment_method,
    )
    # Listing pages show available tickets; drop them only once the counter is committed
    await db.commit()
    await invalidate_event_cache()
    return {"success": True, "data": booking}


@router.get("", response_model=ListResponse[BookingResponse])
async def list_user_bookings(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get all bookings for the authenticated user."""
    bookings = await get_user_bookings(db, identity.id)
    return {"success": True, "count": len(bookings), "data": bookings}


@router.get("/{booking_id}", response_model=DataResponse[BookingResponse])
async def get_booking_endpoint(
    booking_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get one booking. Owner or admin only."""
    booking = await get_booking(db, booking_id, identity)
    return {"success": True, "data": booking}


@router.put("/{booking_id}/cancel", response_model=DataResponse[BookingResponse])
async def cancel_booking_endpoint(
    booking_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking and release its tickets back to the event."""
    booking = await cancel_booking(db, booking_id, identity)
    await db.commit()
    await invalidate_event_cache()
    return {"success": True, "message": "Booking cancelled successfully", "data": booking}
