# finance_api/models/category.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from finance_api.core.database import Base, utcnow

class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

def transaction_type_column() -> Enum:
    # Stored as VARCHAR so the same column type works on Postgres and SQLite
    return Enum(
        TransactionType,
        name="transaction_type",
        native_enum=False,
        length=10,
    )

class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", "type", name="uq_categories_user_name_type"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=50), nullable=False)
    type = Column(transaction_type_column(), nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="categories")
    transactions = relationship("Transaction", back_populates="category", passive_deletes="all")

    def __repr__(self):
        return f"<Category name={self.name} type={self.type} user_id={self.user_id}>"
