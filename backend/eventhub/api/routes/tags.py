"""
Tag endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.deps import require_permission
from eventhub.core.permissions import Identity, Permission
from eventhub.db.session import get_db
from eventhub.schemas.category import TagCreate, TagResponse
from eventhub.schemas.common import DataResponse, ListResponse
from eventhub.services import category_service
from eventhub.services.cache_service import invalidate_event_cache

router = APIRouter(prefix="/tags", tags=["Tags"])

manage_tags = require_permission(Permission.MANAGE_TAGS, Permission.MANAGE_OWN_TAGS)


@router.get("", response_model=ListResponse[TagResponse])
async def list_tags(db: AsyncSession = Depends(get_db)):
    tags = await category_service.list_tags(db)
    return {"success": True, "count": len(tags), "data": tags}


@router.post("", response_model=DataResponse[TagResponse], status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreate,
    identity: Identity = Depends(manage_tags),
    db: AsyncSession = Depends(get_db),
):
    tag = await category_service.create_tag(db, data, identity.id)
    return {"success": True, "data": tag}


@router.delete("/{tag_id}", response_model=DataResponse[dict])
async def delete_tag(
    tag_id: int,
    identity: Identity = Depends(manage_tags),
    db: AsyncSession = Depends(get_db),
):
    await category_service.delete_tag(db, tag_id, identity)
    await db.commit()
    await invalidate_event_cache()
    return {"success": True, "data": {}}
