# finance_api/crud/category.py
import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from finance_api.core.errors import Conflict, NotFound
from finance_api.models.category import Category, TransactionType
from finance_api.models.transaction import Transaction
from finance_api.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

# Default categories created for every new user
DEFAULT_CATEGORIES: List[dict] = [
    {"name": "Salary", "type": TransactionType.INCOME},
    {"name": "Freelance", "type": TransactionType.INCOME},
    {"name": "Business", "type": TransactionType.INCOME},
    {"name": "Investment", "type": TransactionType.INCOME},
    {"name": "Other Income", "type": TransactionType.INCOME},
    {"name": "Food & Dining", "type": TransactionType.EXPENSE},
    {"name": "Transportation", "type": TransactionType.EXPENSE},
    {"name": "Shopping", "type": TransactionType.EXPENSE},
    {"name": "Entertainment", "type": TransactionType.EXPENSE},
    {"name": "Bills & Utilities", "type": TransactionType.EXPENSE},
    {"name": "Healthcare", "type": TransactionType.EXPENSE},
    {"name": "Education", "type": TransactionType.EXPENSE},
    {"name": "Travel", "type": TransactionType.EXPENSE},
    {"name": "Other Expenses", "type": TransactionType.EXPENSE},
]

def build_default_categories(user_id: uuid.UUID) -> List[Category]:
    """Unsaved default categories for a user; the caller adds and commits them."""
    return [Category(user_id=user_id, name=cat["name"], type=cat["type"]) for cat in DEFAULT_CATEGORIES]

def _duplicate_message(name: str, category_type: TransactionType) -> str:
    return f"Category '{name}' already exists for {category_type.value.lower()} transactions"

def _has_transactions(category_id: uuid.UUID):
    return select(Transaction.id).where(Transaction.category_id == category_id).exists()

async def get_categories_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    category_type: Optional[TransactionType] = None,
) -> List[Category]:
    query = select(Category).where(Category.user_id == user_id)
    if category_type is not None:
        query = query.where(Category.type == category_type)
    result = await db.execute(query.order_by(Category.type.asc(), Category.name.asc()))
    return result.scalars().all()

async def get_category_by_id(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    result = await db.execute(
        select(Category)
        .where(Category.id == category_id, Category.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def count_transactions_for_category(category_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(Transaction.id)).where(Transaction.category_id == category_id)
    )
    return result.scalar_one()

async def create_category_for_user(user_id: uuid.UUID, cat_in: CategoryCreate, db: AsyncSession) -> Category:
    existing = await db.execute(
        select(Category.id).where(
            Category.user_id == user_id,
            Category.name == cat_in.name,
            Category.type == cat_in.type,
        )
    )
    if existing.first() is not None:
        raise Conflict(_duplicate_message(cat_in.name, cat_in.type))

    new_cat = Category(user_id=user_id, name=cat_in.name, type=cat_in.type)
    db.add(new_cat)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(_duplicate_message(cat_in.name, cat_in.type))
    await db.refresh(new_cat)
    return new_cat

async def update_category(
    category_id: uuid.UUID,
    user_id: uuid.UUID,
    cat_in: CategoryUpdate,
    db: AsyncSession,
) -> Category:
    """Apply a partial update scoped to the owner in a single UPDATE statement.

    A type change only goes through while no transaction references the
    category, otherwise those transactions would disagree with it.
    """
    values = cat_in.model_dump(exclude_unset=True, exclude_none=True)
    if not values:
        category = await get_category_by_id(category_id, user_id, db)
        if category is None:
            raise NotFound("Category not found")
        return category

    stmt = update(Category).where(Category.id == category_id, Category.user_id == user_id)
    if "type" in values:
        stmt = stmt.where(or_(Category.type == values["type"], ~_has_transactions(category_id)))
    stmt = stmt.values(**values).execution_options(synchronize_session=False)

    try:
        result = await db.execute(stmt)
    except IntegrityError:
        await db.rollback()
        category = await get_category_by_id(category_id, user_id, db)
        category_type = values.get("type") or category.type
        raise Conflict(_duplicate_message(values.get("name", category.name), category_type))

    if result.rowcount == 0:
        await db.rollback()
        category = await get_category_by_id(category_id, user_id, db)
        if category is None:
            raise NotFound("Category not found")
        count = await count_transactions_for_category(category_id, db)
        logger.info(f"Blocked type change of category {category_id}: {count} transactions")
        raise Conflict(f"Cannot change category type. It has {count} associated transactions.")

    await db.commit()
    return await get_category_by_id(category_id, user_id, db)

async def delete_category(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> None:
    """Delete an owned category unless a transaction still references it."""
    result = await db.execute(
        delete(Category)
        .where(
            Category.id == category_id,
            Category.user_id == user_id,
            ~_has_transactions(category_id),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        category = await get_category_by_id(category_id, user_id, db)
        if category is None:
            raise NotFound("Category not found")
        count = await count_transactions_for_category(category_id, db)
        logger.info(f"Blocked delete of category {category_id}: {count} transactions")
        raise Conflict(f"Cannot delete category. It has {count} associated transactions.")
    await db.commit()
