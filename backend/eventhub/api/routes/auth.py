"""
Authentication endpoints: register, login, profile and logout.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.deps import TOKEN_COOKIE, get_current_user
from eventhub.core.config import get_settings
from eventhub.db.session import get_db
from eventhub.models.user import User
from eventhub.schemas.common import DataResponse
from eventhub.schemas.user import (
    AuthPayload,
    PasswordUpdate,
    UserCreate,
    UserDetailsUpdate,
    UserLogin,
    UserResponse,
)
from eventhub.services.auth_service import (
    authenticate_user,
    issue_token,
    register_user,
    update_details,
    update_password,
)

settings = get_settings()
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(response: Response, user: User) -> dict:
    token = issue_token(user)
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return {"success": True, "data": {"token": token, "user": user}}


@router.post("/register", response_model=DataResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, response: Response, db: AsyncSession = Depends(get_db)):
    """Register a new account and log it in."""
    user = await register_user(db, user_data)
    return _token_response(response, user)


@router.post("/login", response_model=DataResponse[AuthPayload])
async def login(login_data: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token (also set as a cookie)."""
    user = await authenticate_user(db, login_data)
    return _token_response(response, user)


@router.get("/me", response_model=DataResponse[UserResponse])
async def me(user: User = Depends(get_current_user)):
    return {"success": True, "data": user}


@router.put("/updatedetails", response_model=DataResponse[UserResponse])
async def update_my_details(
    details: UserDetailsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"success": True, "data": await update_details(db, user.id, details)}


@router.put("/updatepassword", response_model=DataResponse[AuthPayload])
async def update_my_password(
    passwords: PasswordUpdate,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change password; a fresh token is issued."""
    user = await update_password(db, user.id, passwords)
    return _token_response(response, user)


@router.get("/logout", response_model=DataResponse[dict])
async def logout(response: Response, user: User = Depends(get_current_user)):
    response.delete_cookie(TOKEN_COOKIE)
    return {"success": True, "message": "User logged out", "data": {}}
