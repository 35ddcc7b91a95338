"""
Pydantic schemas for category and tag lookups.
"""

from typing import Optional

from pydantic import Field

from eventhub.schemas.common import CamelModel


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    is_active: bool


class TagCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=30)
    color: str = Field("#2ecc71", pattern=r"^#[0-9a-fA-F]{6}$")


class TagResponse(CamelModel):
    id: int
    name: str
    slug: str
    color: str
    created_by_id: Optional[int] = None
    is_active: bool
