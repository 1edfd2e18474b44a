from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from stockledger.database import Base


class StockStatus(str, enum.Enum):
    """Derived stock level classification."""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def classify_stock(current_stock: int, min_stock_level: int) -> StockStatus:
    """
    Classify a stock level against its minimum threshold.

    A product sitting exactly on its threshold counts as low stock.
    """
    if current_stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock <= min_stock_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class Product(Base):
    """
    Product model representing a catalog item and its current stock snapshot.

    Attributes:
        id: Unique identifier for the product
        product_code: Human-readable code (e.g. PRD000001)
        name: Product name
        sku: Stock keeping unit, unique across the catalog
        category: Free-text category
        price: Current unit price (non-negative)
        current_stock: Units on hand (never negative)
        min_stock_level: Threshold at or below which the product is low on stock
        description: Free-text description
        supplier: Supplier name
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    product_code = Column(String(20), unique=True, nullable=False)
    name = Column(String(100), nullable=False, index=True)
    sku = Column(String(50), unique=True, nullable=False)
    category = Column(String(50))
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    current_stock = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=0)
    description = Column(Text)
    supplier = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # History goes with the product when it is deleted
    movements = relationship(
        "StockMovement", back_populates="product", cascade="all, delete-orphan"
    )
    sales = relationship("Sale", back_populates="product", cascade="all, delete-orphan")

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
        CheckConstraint('current_stock >= 0', name='check_stock_non_negative'),
        CheckConstraint('min_stock_level >= 0', name='check_min_stock_non_negative'),
    )

    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.current_stock or 0, self.min_stock_level or 0)

    def __repr__(self):
        return f"<Product(id={self.id}, code='{self.product_code}', stock={self.current_stock})>"
