"""
Request dependencies: current user / identity and permission gates.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from eventhub.core.exceptions import Forbidden, Unauthenticated
from eventhub.core.permissions import Identity, Permission, Role, has_any_permission, has_role
from eventhub.core.security import decode_access_token
from eventhub.db.session import get_db
from eventhub.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "token"


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token (or the `token` cookie) to an active user."""
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise Unauthenticated("Not authorized to access this route")

    user_id = decode_access_token(token)
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated("Not authorized to access this route")

    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


async def get_current_identity(user: User = Depends(get_current_user)) -> Identity:
    return Identity(id=user.id, role=Role(user.role))


def require_permission(*permissions: Permission):
    """Dependency factory: the caller's role must grant at least one of `permissions`."""

    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not has_any_permission(identity.role, permissions):
            raise Forbidden("You don't have permission to perform this action")
        return identity

    return dependency


def require_roles(*roles: Role):
    """Dependency factory: the caller must hold one of `roles`."""

    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not has_role(identity, roles):
            raise Forbidden(f"User role {identity.role.value} is not authorized to access this route")
        return identity

    return dependency
