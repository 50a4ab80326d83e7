# finance_api/schemas/summary.py
from enum import Enum
from typing import List

from finance_api.models.category import TransactionType
from finance_api.schemas.base import APIModel
from finance_api.schemas.category import CategoryRef

class GroupBy(str, Enum):
    month = "month"
    year = "year"

class SummaryTotals(APIModel):
    total_income: float
    total_expenses: float
    balance: float
    transaction_count: int

class CategorySummaryItem(APIModel):
    category: CategoryRef
    type: TransactionType
    total: float
    count: int

class PeriodSummaryItem(APIModel):
    period: str
    income: float
    expenses: float
    balance: float
    transaction_count: int

class SummaryResponse(APIModel):
    summary: SummaryTotals
    category_summary: List[CategorySummaryItem]
    periods: List[PeriodSummaryItem]
