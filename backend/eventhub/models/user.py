"""
User model with role and profile preferences.
"""

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint
from sqlalchemy.orm import relationship

from eventhub.core.permissions import Role
from eventhub.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER.value)
    phone = Column(String(20), nullable=True)
    profile_image = Column(String(255), nullable=False, default="default-avatar.jpg")
    preferred_language = Column(String(2), nullable=False, default="en")
    dark_mode = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, default=True, nullable=False)

    events = relationship("Event", back_populates="organizer", lazy="raise", passive_deletes="all")
    bookings = relationship("Booking", back_populates="user", lazy="raise", passive_deletes="all")

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'organizer', 'user')", name="check_user_role"),
        CheckConstraint("preferred_language IN ('en', 'ar')", name="check_user_language"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
