"""
User administration endpoints (admin only).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.deps import require_permission
from eventhub.core.permissions import Permission
from eventhub.db.session import get_db
from eventhub.schemas.common import DataResponse, ListResponse
from eventhub.schemas.user import UserAdminUpdate, UserResponse
from eventhub.services import user_service
from eventhub.services.auth_service import get_user

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_permission(Permission.MANAGE_USERS))],
)


@router.get("", response_model=ListResponse[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    users = await user_service.list_users(db)
    return {"success": True, "count": len(users), "data": users}


@router.get("/{user_id}", response_model=DataResponse[UserResponse])
async def get_user_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await get_user(db, user_id)}


@router.put("/{user_id}", response_model=DataResponse[UserResponse])
async def update_user_endpoint(
    user_id: int,
    data: UserAdminUpdate,
    db: AsyncSession = Depends(get_db),
):
    return {"success": True, "data": await user_service.update_user(db, user_id, data)}


@router.delete("/{user_id}", response_model=DataResponse[dict])
async def delete_user_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    await user_service.delete_user(db, user_id)
    return {"success": True, "data": {}}
