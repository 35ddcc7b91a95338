"""
Booking model and its status state machine.

Key design decisions:
- Status field allows cancellation without deleting records (audit trail)
- ticket_count is bounded 1..10 at the DB level as well as in the schemas
- booking_reference is a unique human-readable code, separate from the id
- pending/confirmed bookings are "active" and hold inventory
"""

from enum import Enum

from sqlalchemy import Column, Integer, String, Float, Text, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from eventhub.core.exceptions import AlreadyCancelled, InvalidTransition
from eventhub.db.base import Base, TimestampMixin


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    ONSITE = "onsite"
    FREE = "free"


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}


def is_active(status: str) -> bool:
    return BookingStatus(status) in ACTIVE_STATUSES


def check_transition(current: str, target: str) -> BookingStatus:
    """Validate a status change and return the target status."""
    current_status = BookingStatus(current)
    target_status = BookingStatus(target)
    if current_status == BookingStatus.CANCELLED:
        raise AlreadyCancelled(target_status.value)
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransition(current_status.value, target_status.value)
    return target_status


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    ticket_count = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    total_price = Column(Float, nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.UNPAID.value)
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.ONSITE.value)
    special_requests = Column(Text, nullable=True)
    booking_reference = Column(String(32), nullable=False, unique=True, index=True)

    user = relationship("User", back_populates="bookings")
    event = relationship("Event", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("ticket_count BETWEEN 1 AND 10", name="check_booking_ticket_count"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name="check_booking_status"
        ),
        CheckConstraint(
            "payment_status IN ('unpaid', 'paid', 'refunded')", name="check_booking_payment_status"
        ),
        CheckConstraint(
            "payment_method IN ('credit_card', 'paypal', 'onsite', 'free')",
            name="check_booking_payment_method",
        ),
        Index("ix_bookings_event_status", "event_id", "status"),
    )

    @property
    def is_active(self) -> bool:
        return is_active(self.status)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, ref={self.booking_reference}, event={self.event_id}, status={self.status})>"
