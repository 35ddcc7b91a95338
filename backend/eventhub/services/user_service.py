"""
User administration (admin only at the route level).
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.exceptions import Conflict
from eventhub.core.logging import get_logger
from eventhub.models.booking import Booking
from eventhub.models.event import Event
from eventhub.models.user import User
from eventhub.schemas.user import UserAdminUpdate
from eventhub.services.auth_service import email_taken, get_user

logger = get_logger(__name__)


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.id.asc()))
    return list(result.scalars().all())


async def update_user(db: AsyncSession, user_id: int, data: UserAdminUpdate) -> User:
    user = await get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in changes:
        changes["email"] = changes["email"].lower()
        if await email_taken(db, changes["email"], exclude_user_id=user.id):
            raise Conflict("Email already registered")
    if "role" in changes:
        changes["role"] = changes["role"].value

    for field, value in changes.items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)

    logger.info("user_updated", user_id=user.id, fields=sorted(changes))
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Delete a user that owns no events and has no bookings."""
    user = await get_user(db, user_id)

    bookings = await db.execute(
        select(func.count()).select_from(Booking).where(Booking.user_id == user_id)
    )
    events = await db.execute(
        select(func.count()).select_from(Event).where(Event.organizer_id == user_id)
    )
    if bookings.scalar() or events.scalar():
        raise Conflict("Cannot delete a user with existing bookings or events")

    await db.delete(user)
    await db.flush()
    logger.info("user_deleted", user_id=user_id)
