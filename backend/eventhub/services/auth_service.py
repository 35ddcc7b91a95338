"""
Authentication service handling registration, login and self-service
profile changes.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.exceptions import Conflict, Forbidden, NotFound, Unauthenticated
from eventhub.core.logging import get_logger
from eventhub.core.permissions import Role
from eventhub.core.security import create_access_token, hash_password, verify_password
from eventhub.models.user import User
from eventhub.schemas.user import PasswordUpdate, UserCreate, UserDetailsUpdate, UserLogin

logger = get_logger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "role": user.role})


async def email_taken(db: AsyncSession, email: str, exclude_user_id: Optional[int] = None) -> bool:
    query = select(User.id).where(User.email == email.lower())
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query)
    return result.scalar_one_or_none() is not None


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new user with hashed password.
    Raises Conflict if the email is already registered.
    """
    if user_data.role == Role.ADMIN:
        logger.warning("registration_failed", reason="admin_role_requested", email=user_data.email)
        raise Forbidden("Admin accounts cannot be self-registered")

    if await email_taken(db, user_data.email):
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise Conflict("Email already registered")

    user = User(
        name=user_data.name.strip(),
        email=user_data.email.lower(),
        hashed_password=hash_password(user_data.password),
        role=user_data.role.value,
        phone=user_data.phone,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email, role=user.role)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> User:
    """
    Check credentials and return the user.
    Raises Unauthenticated if they are invalid.
    """
    result = await db.execute(select(User).where(User.email == login_data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise Unauthenticated("Invalid credentials")

    if not user.is_active:
        raise Forbidden("Account is deactivated")

    logger.info("user_logged_in", user_id=user.id)
    return user


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound(f"User not found with id of {user_id}")
    return user


async def update_details(db: AsyncSession, user_id: int, details: UserDetailsUpdate) -> User:
    user = await get_user(db, user_id)
    changes = details.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in changes:
        changes["email"] = changes["email"].lower()
        if await email_taken(db, changes["email"], exclude_user_id=user.id):
            raise Conflict("Email already registered")

    for field, value in changes.items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)

    logger.info("user_details_updated", user_id=user.id, fields=sorted(changes))
    return user


async def update_password(db: AsyncSession, user_id: int, passwords: PasswordUpdate) -> User:
    user = await get_user(db, user_id)
    if not verify_password(passwords.current_password, user.hashed_password):
        logger.warning("password_change_failed", user_id=user.id)
        raise Unauthenticated("Password is incorrect")

    user.hashed_password = hash_password(passwords.new_password)
    await db.flush()
    await db.refresh(user)

    logger.info("password_changed", user_id=user.id)
    return user
