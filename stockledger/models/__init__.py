from stockledger.models.product import Product, StockStatus, classify_stock
from stockledger.models.stock_movement import StockMovement, MovementType
from stockledger.models.sale import Sale
from stockledger.models.user import User, UserRole

__all__ = [
    "Product",
    "StockStatus",
    "classify_stock",
    "StockMovement",
    "MovementType",
    "Sale",
    "User",
    "UserRole",
]
