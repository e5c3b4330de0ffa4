# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Model Product
# A sellable item made in production batches.
# Stores catalogue data, its unit cost and selling price;
# profit (price - cost) is derived and may be negative.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String)
    formula = Column(String)

    # Prices, guarded by constraints.
    cost = Column(Float, CheckConstraint("cost >= 0"), nullable=False, default=0.0)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    components = relationship("ProductComponent", back_populates="product", cascade="all, delete-orphan")
    sales = relationship("Sale", back_populates="product")

    @property
    def profit(self):
        return (self.price or 0.0) - (self.cost or 0.0)


# Bill-of-materials entry (fabric, print, label...) of a product
class ProductComponent(Base):
    __tablename__ = "product_components"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    cost = Column(Float, CheckConstraint("cost >= 0"), nullable=False, default=0.0)
    notes = Column(String, nullable=True)

    product = relationship("Product", back_populates="components")
