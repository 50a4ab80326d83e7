# finance_api/crud/transaction.py
import logging
import uuid
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from finance_api.core.database import utcnow
from finance_api.core.errors import InvalidReference, NotFound, TypeMismatch
from finance_api.models.category import Category, TransactionType
from finance_api.models.transaction import Transaction
from finance_api.schemas.transaction import TransactionCreate, TransactionUpdate

logger = logging.getLogger(__name__)

def transaction_filters(
    user_id: uuid.UUID,
    tx_type: Optional[TransactionType] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list:
    """WHERE conditions shared by listing and reporting.

    Both date bounds are whole calendar days and inclusive.
    """
    conditions = [Transaction.user_id == user_id]
    if tx_type is not None:
        conditions.append(Transaction.type == tx_type)
    if category_id is not None:
        conditions.append(Transaction.category_id == category_id)
    if start_date is not None:
        conditions.append(Transaction.date >= datetime.combine(start_date, time.min))
    if end_date is not None:
        conditions.append(Transaction.date <= datetime.combine(end_date, time.max))
    return conditions

async def get_transactions_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    page: int = 1,
    limit: int = 50,
    tx_type: Optional[TransactionType] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[List[Transaction], int]:
    """One page of the user's transactions, newest first, plus the total match count."""
    conditions = transaction_filters(user_id, tx_type, category_id, start_date, end_date)

    result = await db.execute(
        select(Transaction)
        .where(*conditions)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc(), Transaction.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    transactions = result.scalars().all()

    total = await db.execute(select(func.count(Transaction.id)).where(*conditions))
    return transactions, total.scalar_one()

async def get_transaction_by_id(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Transaction]:
    result = await db.execute(
        select(Transaction)
        .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def _lock_owned_category(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    # Row lock keeps the category's type stable until the transaction commits
    result = await db.execute(
        select(Category)
        .where(Category.id == category_id, Category.user_id == user_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()

async def _check_category(
    category_id: uuid.UUID,
    tx_type: TransactionType,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> Category:
    category = await _lock_owned_category(category_id, user_id, db)
    # Rollback expires loaded rows, so the error is built before it
    if category is None:
        error = InvalidReference("Invalid category")
    elif category.type != tx_type:
        error = TypeMismatch(
            f"Category type ({category.type.value}) does not match transaction type ({tx_type.value})"
        )
    else:
        return category
    await db.rollback()
    raise error

async def create_transaction_for_user(user_id: uuid.UUID, tx_in: TransactionCreate, db: AsyncSession) -> Transaction:
    await _check_category(tx_in.category_id, tx_in.type, user_id, db)

    new_tx = Transaction(**tx_in.model_dump(), user_id=user_id)
    db.add(new_tx)
    try:
        await db.commit()
    except IntegrityError:
        # The category disappeared between the check and the insert
        await db.rollback()
        raise InvalidReference("Invalid category")
    return await get_transaction_by_id(new_tx.id, user_id, db)

async def update_transaction(
    transaction_id: uuid.UUID,
    user_id: uuid.UUID,
    tx_in: TransactionUpdate,
    db: AsyncSession,
) -> Transaction:
    """Apply only the fields present in the request; the rest keep their values.

    Whenever the type or the category changes, the resulting pair must still
    agree and the category must belong to the user.
    """
    result = await db.execute(
        select(Transaction)
        .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .with_for_update(of=Transaction)
        .execution_options(populate_existing=True)
    )
    tx = result.scalar_one_or_none()
    if tx is None:
        await db.rollback()
        raise NotFound("Transaction not found")

    values = tx_in.model_dump(exclude_unset=True)
    if not values:
        # Release the row lock; commit keeps the loaded attributes
        await db.commit()
        return tx

    if "type" in values or "category_id" in values:
        await _check_category(
            values.get("category_id", tx.category_id),
            values.get("type", tx.type),
            user_id,
            db,
        )

    values["updated_at"] = utcnow()
    try:
        result = await db.execute(
            update(Transaction)
            .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
    except IntegrityError:
        await db.rollback()
        raise InvalidReference("Invalid category")
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Transaction not found")

    await db.commit()
    return await get_transaction_by_id(transaction_id, user_id, db)

async def delete_transaction(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> None:
    result = await db.execute(
        delete(Transaction)
        .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Transaction not found")
    await db.commit()
