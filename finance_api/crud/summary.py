# finance_api/crud/summary.py
"""
Read-only aggregation over a user's transactions.

All amounts are stored positive, so income and expenses are told apart by
the transaction type alone; ``balance`` is the only signed figure.
"""
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import extract, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from finance_api.crud.transaction import transaction_filters
from finance_api.models.category import Category, TransactionType
from finance_api.models.transaction import Transaction
from finance_api.schemas.summary import GroupBy

ZERO = Decimal("0")

def _amount(value) -> Decimal:
    # SUM comes back as Decimal on Postgres and may be float on SQLite
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))

async def get_totals(conditions: list, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(
            Transaction.type,
            func.sum(Transaction.amount).label("total"),
            func.count(Transaction.id).label("tx_count"),
        )
        .where(*conditions)
        .group_by(Transaction.type)
    )
    income, expenses, count = ZERO, ZERO, 0
    for row in result.all():
        if row.type == TransactionType.INCOME:
            income = _amount(row.total)
        else:
            expenses = _amount(row.total)
        count += row.tx_count

    return {
        "total_income": float(income),
        "total_expenses": float(expenses),
        "balance": float(income - expenses),
        "transaction_count": count,
    }

async def get_category_breakdown(conditions: list, db: AsyncSession) -> List[Dict[str, Any]]:
    """One row per (category, type) that has transactions in the filtered set."""
    total = func.sum(Transaction.amount)
    result = await db.execute(
        select(
            Category.id.label("category_id"),
            Category.name.label("category_name"),
            Category.type.label("category_type"),
            Transaction.type.label("tx_type"),
            total.label("total"),
            func.count(Transaction.id).label("tx_count"),
        )
        .select_from(Transaction)
        .join(Category, Transaction.category_id == Category.id)
        .where(*conditions)
        .group_by(Category.id, Category.name, Category.type, Transaction.type)
        .order_by(total.desc(), Category.name.asc())
    )
    return [
        {
            "category": {
                "id": row.category_id,
                "name": row.category_name,
                "type": row.category_type,
            },
            "type": row.tx_type,
            "total": float(_amount(row.total)),
            "count": row.tx_count,
        }
        for row in result.all()
    ]

async def get_period_series(conditions: list, group_by: GroupBy, db: AsyncSession) -> List[Dict[str, Any]]:
    """Income/expense totals per calendar month (YYYY-MM) or year (YYYY), oldest first."""
    year = extract("year", Transaction.date)
    buckets = [year.label("year")]
    group_cols = [year]
    if group_by == GroupBy.month:
        month = extract("month", Transaction.date)
        buckets.append(month.label("month"))
        group_cols.append(month)

    result = await db.execute(
        select(
            *buckets,
            Transaction.type.label("tx_type"),
            func.sum(Transaction.amount).label("total"),
            func.count(Transaction.id).label("tx_count"),
        )
        .where(*conditions)
        .group_by(*group_cols, Transaction.type)
    )

    periods: Dict[str, Dict[str, Any]] = {}
    for row in result.all():
        if group_by == GroupBy.month:
            key = f"{int(row.year):04d}-{int(row.month):02d}"
        else:
            key = f"{int(row.year):04d}"
        bucket = periods.setdefault(key, {"income": ZERO, "expenses": ZERO, "count": 0})
        if row.tx_type == TransactionType.INCOME:
            bucket["income"] += _amount(row.total)
        else:
            bucket["expenses"] += _amount(row.total)
        bucket["count"] += row.tx_count

    return [
        {
            "period": key,
            "income": float(bucket["income"]),
            "expenses": float(bucket["expenses"]),
            "balance": float(bucket["income"] - bucket["expenses"]),
            "transaction_count": bucket["count"],
        }
        for key, bucket in sorted(periods.items())
    ]

async def get_summary(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    group_by: GroupBy = GroupBy.month,
) -> Dict[str, Any]:
    conditions = transaction_filters(user_id, start_date=start_date, end_date=end_date)
    return {
        "summary": await get_totals(conditions, db),
        "category_summary": await get_category_breakdown(conditions, db),
        "periods": await get_period_series(conditions, group_by, db),
    }
