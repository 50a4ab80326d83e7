# finance_api/schemas/category.py
from typing import List, Optional
from datetime import datetime
from pydantic import Field, field_validator
import uuid

from finance_api.models.category import TransactionType
from finance_api.schemas.base import APIModel

class CategoryCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=50)
    type: TransactionType

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

class CategoryUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[TransactionType] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

class CategoryRead(APIModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    type: TransactionType
    created_at: datetime

# Compact form embedded in transactions and summaries
class CategoryRef(APIModel):
    id: uuid.UUID
    name: str
    type: TransactionType

class CategoryListResponse(APIModel):
    categories: List[CategoryRead]

class CategoryResponse(APIModel):
    message: str
    category: CategoryRead
