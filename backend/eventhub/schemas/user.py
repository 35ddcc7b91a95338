"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from eventhub.core.permissions import Role
from eventhub.schemas.common import CamelModel

Language = Literal["en", "ar"]


class UserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.USER
    phone: Optional[str] = Field(None, max_length=20)


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserDetailsUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    preferred_language: Optional[Language] = None
    dark_mode: Optional[bool] = None


class PasswordUpdate(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class UserAdminUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    phone: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: Role
    phone: Optional[str] = None
    profile_image: str
    preferred_language: str
    dark_mode: bool
    is_active: bool
    created_at: datetime


class AuthPayload(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse
