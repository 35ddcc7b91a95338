"""
Category endpoints. They live under /events/categories like the rest of
the event catalogue.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.deps import require_permission
from eventhub.core.permissions import Identity, Permission
from eventhub.db.session import get_db
from eventhub.schemas.category import CategoryCreate, CategoryResponse
from eventhub.schemas.common import DataResponse, ListResponse
from eventhub.services import category_service
from eventhub.services.cache_service import invalidate_event_cache

router = APIRouter(prefix="/events/categories", tags=["Categories"])


@router.get("", response_model=ListResponse[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await category_service.list_categories(db)
    return {"success": True, "count": len(categories), "data": categories}


@router.post("", response_model=DataResponse[CategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    identity: Identity = Depends(require_permission(Permission.MANAGE_CATEGORIES)),
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.create_category(db, data)
    return {"success": True, "data": category}


@router.delete("/{category_id}", response_model=DataResponse[dict])
async def delete_category(
    category_id: int,
    identity: Identity = Depends(require_permission(Permission.MANAGE_CATEGORIES)),
    db: AsyncSession = Depends(get_db),
):
    await category_service.delete_category(db, category_id)
    await db.commit()
    await invalidate_event_cache()
    return {"success": True, "data": {}}
