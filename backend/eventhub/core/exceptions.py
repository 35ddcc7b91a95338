"""
Domain exceptions raised by the service layer.

Each error carries the HTTP status it maps to; the API layer turns them
into the `{success: false, error: ...}` envelope (see eventhub.api.errors).
Services never raise HTTPException directly so they can be driven from
tests and scripts without a request.
"""

from typing import Optional


class DomainError(Exception):
    status_code: int = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(DomainError):
    """Malformed or out-of-range input. May carry per-field messages."""

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message, 400)
        self.errors = errors or []


class NotFound(DomainError):
    status_code = 404


class EventNotFound(NotFound):
    def __init__(self, event_id: int):
        super().__init__(f"Event not found with id of {event_id}")
        self.event_id = event_id


class BookingNotFound(NotFound):
    def __init__(self, booking_id: int):
        super().__init__(f"Booking not found with id of {booking_id}")
        self.booking_id = booking_id


class Forbidden(DomainError):
    status_code = 403


class Unauthenticated(DomainError):
    status_code = 401


class Conflict(DomainError):
    status_code = 400


class InsufficientInventory(DomainError):
    status_code = 400

    def __init__(self, event_id: int, requested: int, available: int):
        super().__init__("Not enough tickets available")
        self.event_id = event_id
        self.requested = requested
        self.available = available


class InvalidTransition(DomainError):
    status_code = 400

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move booking from {current} to {target}")
        self.current = current
        self.target = target


class AlreadyCancelled(InvalidTransition):
    def __init__(self, target: str = "cancelled"):
        super().__init__("cancelled", target)
        self.message = "Booking is already cancelled"
        self.args = (self.message,)
