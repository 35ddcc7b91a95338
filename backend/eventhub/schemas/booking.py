"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, Field

from eventhub.schemas.common import CamelModel


class BookingCreate(CamelModel):
    event_id: int = Field(..., gt=0, validation_alias=AliasChoices("event", "eventId", "event_id"))
    ticket_count: int = Field(..., ge=1, le=10)
    special_requests: Optional[str] = Field(None, max_length=1000)
    payment_method: Optional[Literal["credit_card", "paypal", "onsite"]] = None


class BookingResponse(CamelModel):
    id: int
    event_id: int
    user_id: int
    ticket_count: int
    status: str
    total_price: float
    payment_status: str
    payment_method: str
    special_requests: Optional[str] = None
    booking_reference: str
    created_at: datetime
    updated_at: datetime


class InventoryReport(CamelModel):
    event_id: int
    capacity: int
    available_tickets: int
    active_tickets: int
    expected_available: int
    consistent: bool
