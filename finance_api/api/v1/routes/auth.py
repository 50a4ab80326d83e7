# finance_api/api/v1/routes/auth.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from finance_api.api.deps import get_current_user_id
from finance_api.core.database import get_async_session
from finance_api.crud.user import authenticate_user, delete_user, get_profile, register_user
from finance_api.schemas.user import (
    AuthResponse,
    MessageResponse,
    ProfileResponse,
    UserLogin,
    UserRead,
    UserRegister,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserRegister,
    db: AsyncSession = Depends(get_async_session),
):
    """Create an account with the default categories and return a session token"""
    user, token = await register_user(user_in, db)
    return AuthResponse(
        message="User created successfully",
        user=UserRead.model_validate(user),
        token=token,
    )

@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_async_session),
):
    user, token = await authenticate_user(credentials, db)
    return AuthResponse(
        message="Login successful",
        user=UserRead.model_validate(user),
        token=token,
    )

@router.get("/profile", response_model=ProfileResponse)
async def read_profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
):
    """Get current user's profile"""
    user = await get_profile(user_id, db)
    return ProfileResponse(user=UserRead.model_validate(user))

@router.delete("/profile", response_model=MessageResponse)
async def delete_profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
):
    """Delete current user's account permanently, with all of its data"""
    await delete_user(user_id, db)
    return MessageResponse(message="Account deleted successfully")
