# backend/models/expense.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Business expense, optionally tied (advisory only) to a batch and/or product
class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False, index=True)
    amount = Column(Float, CheckConstraint("amount >= 0"), nullable=False)
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    notes = Column(String, nullable=True)

    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="SET NULL"), nullable=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    batch = relationship("Batch", back_populates="expenses")
    product = relationship("Product")
