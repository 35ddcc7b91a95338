"""
Event model with ticket inventory tracking.

Key design decisions:
- `available_tickets` is denormalized (avoids a SUM over bookings on every read)
  and is only ever changed by services.inventory_service
- `capacity` is fixed once the event exists
- CHECK constraints keep 0 <= available_tickets <= capacity at the DB level
- Index on `date` for range queries (upcoming events)
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from eventhub.db.base import Base, TimestampMixin

event_tags = Table(
    "event_tags",
    Base.metadata,
    Column("event_id", Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, index=True)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    start_time = Column(String(20), nullable=False)
    end_time = Column(String(20), nullable=False)
    capacity = Column(Integer, nullable=False)
    available_tickets = Column(Integer, nullable=False)
    price = Column(Float, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    image = Column(String(255), nullable=False, default="default-event.jpg")
    languages = Column(JSON, nullable=False, default=lambda: ["en"])
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)

    organizer = relationship("User", back_populates="events")
    category = relationship("Category", back_populates="events")
    tags = relationship("Tag", secondary=event_tags, lazy="selectin", order_by="Tag.name")
    bookings = relationship("Booking", back_populates="event", lazy="raise", passive_deletes="all")

    __table_args__ = (
        CheckConstraint("available_tickets >= 0", name="check_available_tickets_non_negative"),
        CheckConstraint("capacity > 0", name="check_capacity_positive"),
        CheckConstraint("available_tickets <= capacity", name="check_available_lte_capacity"),
        CheckConstraint("price >= 0", name="check_price_non_negative"),
        Index("ix_events_date", "date"),
        Index("ix_events_published_date", "is_published", "date"),
    )

    @property
    def is_full(self) -> bool:
        return self.available_tickets <= 0

    @property
    def is_upcoming(self) -> bool:
        date = self.date
        if date.tzinfo is None:
            # SQLite hands back naive datetimes; values are stored in UTC
            date = date.replace(tzinfo=timezone.utc)
        return date > datetime.now(timezone.utc)

    @property
    def tag_ids(self) -> list[int]:
        return [tag.id for tag in self.tags]

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, available={self.available_tickets}/{self.capacity})>"
