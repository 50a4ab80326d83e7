# finance_api/schemas/transaction.py
from typing import List, Optional
from pydantic import Field, field_validator, model_validator
from datetime import date, datetime, time, timezone
from decimal import Decimal
import uuid

from finance_api.models.category import TransactionType
from finance_api.schemas.base import APIModel
from finance_api.schemas.category import CategoryRef

def _parse_transaction_date(value):
    # A bare calendar day means midnight of that day
    if isinstance(value, str) and len(value) == 10:
        return datetime.combine(date.fromisoformat(value), time.min)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value

def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Dates are stored as naive UTC timestamps
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

class TransactionCreate(APIModel):
    type: TransactionType
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=255, description="E.g. Grocery at Costco")
    date: datetime = Field(..., description="ISO 8601 date or date/time of the transaction")
    category_id: uuid.UUID
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("description", "notes", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        return _parse_transaction_date(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)

class TransactionUpdate(APIModel):
    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[datetime] = None
    category_id: Optional[uuid.UUID] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("description", "notes", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        return _parse_transaction_date(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(value)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        # Only notes may be cleared; other fields are either omitted or set
        for field in ("type", "amount", "description", "date", "category_id"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

class TransactionRead(APIModel):
    id: uuid.UUID
    user_id: uuid.UUID
    category_id: uuid.UUID
    type: TransactionType
    amount: float
    description: str
    date: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    category: CategoryRef

class Pagination(APIModel):
    page: int
    limit: int
    total: int
    pages: int

class TransactionListResponse(APIModel):
    transactions: List[TransactionRead]
    pagination: Pagination

class TransactionDetailResponse(APIModel):
    transaction: TransactionRead

class TransactionResponse(APIModel):
    message: str
    transaction: TransactionRead
