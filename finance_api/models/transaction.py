# finance_api/models/transaction.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Numeric, DateTime, Uuid
from sqlalchemy.orm import relationship
from finance_api.core.database import Base, utcnow
from finance_api.models.category import transaction_type_column

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # No ON DELETE action: a referenced category cannot be removed
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=False, index=True)
    type = Column(transaction_type_column(), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(length=255), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    notes = Column(String(length=500), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="transactions")
    category = relationship("Category", back_populates="transactions", lazy="joined", innerjoin=True)

    def __repr__(self):
        return f"<Transaction amount={self.amount} date={self.date} user_id={self.user_id}>"
