from eventhub.schemas.common import DataResponse, ListResponse, PagedResponse, Pagination
from eventhub.schemas.user import (
    UserCreate, UserLogin, UserResponse, UserDetailsUpdate, PasswordUpdate,
    UserAdminUpdate, AuthPayload,
)
from eventhub.schemas.event import EventCreate, EventUpdate, EventResponse, EventFilters
from eventhub.schemas.booking import BookingCreate, BookingResponse, InventoryReport
from eventhub.schemas.category import CategoryCreate, CategoryResponse, TagCreate, TagResponse

__all__ = [
    "DataResponse", "ListResponse", "PagedResponse", "Pagination",
    "UserCreate", "UserLogin", "UserResponse", "UserDetailsUpdate", "PasswordUpdate",
    "UserAdminUpdate", "AuthPayload",
    "EventCreate", "EventUpdate", "EventResponse", "EventFilters",
    "BookingCreate", "BookingResponse", "InventoryReport",
    "CategoryCreate", "CategoryResponse", "TagCreate", "TagResponse",
]
