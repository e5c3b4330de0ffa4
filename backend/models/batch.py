# backend/models/batch.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

BATCH_STATUSES = ("pending", "in-progress", "completed", "cancelled")

# A production run grouping products with their costs, timeline and status
class Batch(Base):
    __tablename__ = "batches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="pending", index=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    # Free-form planning notes
    target_segments = Column(String, nullable=True)
    target_sales_locations = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("BatchProduct", back_populates="batch", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="batch")
    sales = relationship("Sale", back_populates="batch")

# Cost line: how many units of a product the batch produced and what they cost in total
class BatchProduct(Base):
    __tablename__ = "batch_products"

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    cost = Column(Float, CheckConstraint("cost >= 0"), nullable=False)

    batch = relationship("Batch", back_populates="products")
    product = relationship("Product")
