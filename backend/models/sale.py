# backend/models/sale.py
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, CheckConstraint, func, event
from sqlalchemy.orm import relationship
from database import Base

# Point of sale (shop, market stall, online store)
class SalesLocation(Base):
    __tablename__ = "sales_locations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    type = Column(String, nullable=True)
    address = Column(String, nullable=True)
    contact_person = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    sales = relationship("Sale", back_populates="location")

# A sale of one product from one batch at one location
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("sales_locations.id"), nullable=False, index=True)

    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    unit_price = Column(Float, CheckConstraint("unit_price >= 0"), nullable=False)
    # Always quantity * unit_price, see _sync_total_price
    total_price = Column(Float, nullable=False)

    sale_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    batch = relationship("Batch", back_populates="sales")
    product = relationship("Product", back_populates="sales")
    location = relationship("SalesLocation", back_populates="sales")


@event.listens_for(Sale, "before_insert")
@event.listens_for(Sale, "before_update")
def _sync_total_price(mapper, connection, target):
    target.total_price = (target.quantity or 0) * (target.unit_price or 0.0)
