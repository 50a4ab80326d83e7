# finance_api/api/v1/routes/categories.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from finance_api.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryRead,
    CategoryResponse,
    CategoryUpdate,
)
from finance_api.schemas.user import MessageResponse
from finance_api.crud.category import (
    create_category_for_user,
    get_categories_for_user,
    update_category,
    delete_category,
)
from finance_api.core.database import get_async_session
from finance_api.models.category import TransactionType
from finance_api.models.user import User
from finance_api.api.deps import get_current_user

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("", response_model=CategoryListResponse)
async def read_categories(
    category_type: Optional[TransactionType] = Query(None, alias="type"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    categories = await get_categories_for_user(user.id, db, category_type)
    return CategoryListResponse(categories=[CategoryRead.model_validate(c) for c in categories])

@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    cat_in: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await create_category_for_user(user.id, cat_in, db)
    return CategoryResponse(
        message="Category created successfully",
        category=CategoryRead.model_validate(category),
    )

@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category_endpoint(
    category_id: uuid.UUID,
    cat_in: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await update_category(category_id, user.id, cat_in, db)
    return CategoryResponse(
        message="Category updated successfully",
        category=CategoryRead.model_validate(category),
    )

@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category_endpoint(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await delete_category(category_id, user.id, db)
    return MessageResponse(message="Category deleted successfully")
