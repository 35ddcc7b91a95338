"""
Roles and the capabilities each role grants.

The mapping is fixed at import time; checks are plain functions over it
so they can be used from route dependencies and services alike.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union


class Role(str, Enum):
    ADMIN = "admin"
    ORGANIZER = "organizer"
    USER = "user"


class Permission(str, Enum):
    MANAGE_USERS = "manage_users"
    VIEW_USERS = "view_users"
    CREATE_EVENT = "create_event"
    UPDATE_EVENT = "update_event"
    UPDATE_OWN_EVENT = "update_own_event"
    DELETE_EVENT = "delete_event"
    DELETE_OWN_EVENT = "delete_own_event"
    APPROVE_EVENT = "approve_event"
    VIEW_EVENT = "view_event"
    VIEW_ALL_EVENTS = "view_all_events"
    VIEW_OWN_EVENTS = "view_own_events"
    VIEW_OWN_EVENT_BOOKINGS = "view_own_event_bookings"
    CREATE_BOOKING = "create_booking"
    VIEW_BOOKING = "view_booking"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    VIEW_OWN_BOOKINGS = "view_own_bookings"
    CANCEL_OWN_BOOKING = "cancel_own_booking"
    DELETE_BOOKING = "delete_booking"
    MANAGE_CATEGORIES = "manage_categories"
    MANAGE_OWN_CATEGORIES = "manage_own_categories"
    MANAGE_TAGS = "manage_tags"
    MANAGE_OWN_TAGS = "manage_own_tags"


ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset({
        Permission.MANAGE_USERS,
        Permission.VIEW_USERS,
        Permission.CREATE_EVENT,
        Permission.UPDATE_EVENT,
        Permission.DELETE_EVENT,
        Permission.APPROVE_EVENT,
        Permission.VIEW_EVENT,
        Permission.VIEW_ALL_EVENTS,
        Permission.CREATE_BOOKING,
        Permission.VIEW_BOOKING,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.DELETE_BOOKING,
        Permission.MANAGE_CATEGORIES,
        Permission.MANAGE_TAGS,
    }),
    Role.ORGANIZER: frozenset({
        Permission.CREATE_EVENT,
        Permission.UPDATE_OWN_EVENT,
        Permission.DELETE_OWN_EVENT,
        Permission.VIEW_EVENT,
        Permission.VIEW_OWN_EVENTS,
        Permission.VIEW_OWN_EVENT_BOOKINGS,
        Permission.MANAGE_OWN_CATEGORIES,
        Permission.MANAGE_OWN_TAGS,
    }),
    Role.USER: frozenset({
        Permission.VIEW_EVENT,
        Permission.CREATE_BOOKING,
        Permission.VIEW_OWN_BOOKINGS,
        Permission.CANCEL_OWN_BOOKING,
    }),
}


@dataclass(frozen=True)
class Identity:
    """Verified caller identity handed to services by the API layer."""

    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _as_role(role: Union[Role, str]) -> Optional[Role]:
    try:
        return Role(role)
    except ValueError:
        return None


def get_permissions(role: Union[Role, str]) -> frozenset[Permission]:
    resolved = _as_role(role)
    if resolved is None:
        return frozenset()
    return ROLE_PERMISSIONS[resolved]


def has_permission(role: Union[Role, str], permission: Permission) -> bool:
    return permission in get_permissions(role)


def has_any_permission(role: Union[Role, str], permissions: Iterable[Permission]) -> bool:
    granted = get_permissions(role)
    return any(p in granted for p in permissions)


def has_role(identity: Identity, roles: Union[Role, str, Iterable[Union[Role, str]]]) -> bool:
    if isinstance(roles, (Role, str)):
        roles = [roles]
    return identity.role in {_as_role(r) for r in roles}


def can_act_on_owned(
    identity: Identity,
    owner_id: int,
    any_permission: Permission,
    own_permission: Optional[Permission] = None,
) -> bool:
    """
    True when the identity may act on a resource owned by `owner_id`.

    Holders of `any_permission` may act on any resource. Owners may act on
    their own resource if they hold `own_permission`, or unconditionally
    when no own-permission is given.
    """
    if has_permission(identity.role, any_permission):
        return True
    if identity.id != owner_id:
        return False
    return own_permission is None or has_permission(identity.role, own_permission)
