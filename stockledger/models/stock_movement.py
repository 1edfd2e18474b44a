from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from stockledger.database import Base


class MovementType(str, enum.Enum):
    """Direction of a stock movement."""
    IN = "in"
    OUT = "out"


class StockMovement(Base):
    """
    Append-only record of a single stock change.

    Attributes:
        id: Unique identifier for the movement
        movement_code: Human-readable code (e.g. STK000001)
        product_id: Product whose stock changed
        movement_type: "in" or "out"
        quantity: Units moved (always positive)
        reason: Free-text reason
        notes: Optional free-text notes (sales reference their sale code here)
        created_by: Username of the actor, or "system"
        created_at: Timestamp when the movement was recorded
    """
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    movement_code = Column(String(20), unique=True, nullable=False)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    movement_type = Column(
        Enum(MovementType, name="movement_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    quantity = Column(Integer, nullable=False)
    reason = Column(String(255))
    notes = Column(Text)
    created_by = Column(String(50), nullable=False, default="system")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    product = relationship("Product", back_populates="movements")
    creator = relationship(
        "User",
        primaryjoin="foreign(StockMovement.created_by) == User.username",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_movement_quantity_positive'),
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
        return (
            f"<StockMovement(id={self.id}, product_id={self.product_id}, "
            f"type='{self.movement_type}', quantity={self.quantity})>"
        )
