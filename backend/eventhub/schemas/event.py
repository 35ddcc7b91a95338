"""
Pydantic schemas for event-related request/response validation.

Neither `capacity` nor `availableTickets` appears on EventUpdate: capacity
is fixed at creation and the ticket counter belongs to the inventory
service. Unknown keys in a request body are ignored.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator

from eventhub.schemas.common import CamelModel

Language = Literal["en", "ar"]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TagSummary(CamelModel):
    id: int
    name: str
    color: str


class EventCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1, max_length=255)
    date: datetime
    start_time: str = Field(..., min_length=1, max_length=20)
    end_time: str = Field(..., min_length=1, max_length=20)
    capacity: int = Field(..., gt=0, le=100000)
    price: float = Field(0, ge=0)
    is_published: bool = False
    is_featured: bool = False
    image: Optional[str] = Field(None, max_length=255)
    languages: list[Language] = Field(default_factory=lambda: ["en"], min_length=1)
    category_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("category", "categoryId", "category_id")
    )
    tag_ids: list[int] = Field(
        default_factory=list, validation_alias=AliasChoices("tags", "tagIds", "tag_ids")
    )

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value):
        return _as_utc(value)


class EventUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[datetime] = None
    start_time: Optional[str] = Field(None, min_length=1, max_length=20)
    end_time: Optional[str] = Field(None, min_length=1, max_length=20)
    price: Optional[float] = Field(None, ge=0)
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    image: Optional[str] = Field(None, max_length=255)
    languages: Optional[list[Language]] = Field(None, min_length=1)
    category_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("category", "categoryId", "category_id")
    )
    tag_ids: Optional[list[int]] = Field(
        None, validation_alias=AliasChoices("tags", "tagIds", "tag_ids")
    )

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value):
        return _as_utc(value)


class EventResponse(CamelModel):
    id: int
    title: str
    slug: str
    description: str
    location: str
    date: datetime
    start_time: str
    end_time: str
    capacity: int
    available_tickets: int
    price: float
    is_published: bool
    is_featured: bool
    image: str
    languages: list[str]
    organizer_id: int
    category_id: Optional[int] = None
    tags: list[TagSummary] = []
    is_full: bool
    is_upcoming: bool
    created_at: datetime
    updated_at: datetime


class EventFilters(CamelModel):
    """Query-string filters for the event listing."""

    search: Optional[str] = None
    category_id: Optional[int] = None
    tag_id: Optional[int] = None
    organizer_id: Optional[int] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    upcoming: bool = False
    sort: str = "-date"
    page: int = 1
    limit: int = 10

    def cache_key(self) -> str:
        parts = [f"{name}={value}" for name, value in sorted(self.model_dump().items())]
        return "&".join(parts)
