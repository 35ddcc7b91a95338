from eventhub.models.user import User
from eventhub.models.category import Category, Tag
from eventhub.models.event import Event, event_tags
from eventhub.models.booking import Booking, BookingStatus, PaymentMethod, PaymentStatus

__all__ = [
    "User", "Category", "Tag", "Event", "event_tags",
    "Booking", "BookingStatus", "PaymentMethod", "PaymentStatus",
]
