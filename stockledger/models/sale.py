from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stockledger.database import Base


class Sale(Base):
    """
    Append-only record of a sale.

    unit_price is the price charged at the time of sale and is never
    recomputed from the product's current price.
    """
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    sale_code = Column(String(20), unique=True, nullable=False)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    total_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    customer_name = Column(String(100))
    created_by = Column(String(50), nullable=False, default="system")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    product = relationship("Product", back_populates="sales")
    creator = relationship(
        "User",
        primaryjoin="foreign(Sale.created_by) == User.username",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_sale_quantity_positive'),
        CheckConstraint('unit_price >= 0', name='check_sale_unit_price_non_negative'),
    )

    @property
    def product_name(self):
        return self.product.name if self.product else None

    @property
    def product_sku(self):
        return self.product.sku if self.product else None

    @property
    def created_by_name(self):
        if self.creator is not None:
            return self.creator.display_name
        return self.created_by

    def __repr__(self):
        return f"<Sale(id={self.id}, product_id={self.product_id}, total={self.total_amount})>"
