# finance_api/api/v1/routes/transactions.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional
import math
import uuid

from finance_api.schemas.transaction import (
    Pagination,
    TransactionCreate,
    TransactionDetailResponse,
    TransactionListResponse,
    TransactionRead,
    TransactionResponse,
    TransactionUpdate,
)
from finance_api.schemas.summary import GroupBy, SummaryResponse
from finance_api.schemas.user import MessageResponse
from finance_api.crud.transaction import (
    create_transaction_for_user,
    get_transactions_for_user,
    get_transaction_by_id,
    update_transaction,
    delete_transaction,
)
from finance_api.crud.summary import get_summary
from finance_api.core.database import get_async_session
from finance_api.core.errors import NotFound
from finance_api.models.category import TransactionType
from finance_api.models.user import User
from finance_api.api.deps import get_current_user

router = APIRouter(prefix="/transactions", tags=["transactions"])

# Keeps (page - 1) * limit within a signed 64-bit OFFSET
MAX_PAGE = 10**9

@router.get("", response_model=TransactionListResponse)
async def read_transactions(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(50, ge=1, le=100),
    tx_type: Optional[TransactionType] = Query(None, alias="type"),
    category_id: Optional[uuid.UUID] = Query(None, alias="categoryId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    transactions, total = await get_transactions_for_user(
        user.id,
        db,
        page=page,
        limit=limit,
        tx_type=tx_type,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
    )
    return TransactionListResponse(
        transactions=[TransactionRead.model_validate(tx) for tx in transactions],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )

# Declared before /{transaction_id} so "summary" is not parsed as an id
@router.get("/summary", response_model=SummaryResponse)
async def read_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    group_by: GroupBy = Query(GroupBy.month, alias="groupBy"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Totals, per-category breakdown and a monthly (or yearly) series over
    the optional inclusive date window.
    """
    return await get_summary(user.id, db, start_date=start_date, end_date=end_date, group_by=group_by)

@router.get("/{transaction_id}", response_model=TransactionDetailResponse)
async def read_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await get_transaction_by_id(transaction_id, user.id, db)
    if not tx:
        raise NotFound("Transaction not found")
    return TransactionDetailResponse(transaction=TransactionRead.model_validate(tx))

@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    tx_in: TransactionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await create_transaction_for_user(user.id, tx_in, db)
    return TransactionResponse(
        message="Transaction created successfully",
        transaction=TransactionRead.model_validate(tx),
    )

@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction_endpoint(
    transaction_id: uuid.UUID,
    tx_in: TransactionUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await update_transaction(transaction_id, user.id, tx_in, db)
    return TransactionResponse(
        message="Transaction updated successfully",
        transaction=TransactionRead.model_validate(tx),
    )

@router.delete("/{transaction_id}", response_model=MessageResponse)
async def delete_transaction_endpoint(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await delete_transaction(transaction_id, user.id, db)
    return MessageResponse(message="Transaction deleted successfully")
