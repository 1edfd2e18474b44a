from sqlalchemy.orm import Session
from sqlalchemy import select, func, extract
from sqlalchemy.exc import SQLAlchemyError
from typing import List
import logging

from stockledger.models.product import Product
from stockledger.models.stock_movement import StockMovement, MovementType
from stockledger.models.sale import Sale
from stockledger.schemas.dashboard import DashboardStats, TopProduct, MonthlySales
from stockledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Read-only aggregates over the ledger.

    Nothing here is cached: every call runs the queries again. The dashboard
    figures are computed by independent sub-queries, and a failing sub-query
    is logged and reported as zero (or an empty list) instead of failing the
    whole response.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_stats(self) -> DashboardStats:
        """Compute the dashboard totals."""
        low_stock = Product.current_stock <= Product.min_stock_level
        return DashboardStats(
            total_products=self._scalar("total_products", select(func.count(Product.id))),
            total_stock=self._scalar(
                "total_stock", select(func.coalesce(func.sum(Product.current_stock), 0))
            ),
            low_stock_products=self._scalar(
                "low_stock_products", select(func.count(Product.id)).where(low_stock)
            ),
            total_revenue=self._scalar(
                "total_revenue",
                select(func.coalesce(func.sum(Sale.total_amount), 0)),
                cast=float,
            ),
            stock_in=self._movement_total(MovementType.IN),
            stock_out=self._movement_total(MovementType.OUT),
        )

    def get_dashboard(self, recent_limit: int = 5) -> dict:
        """Stats, low stock products and recent sales, each degrading independently."""
        return {
            "stats": self._guard("stats", self.get_stats, DashboardStats()),
            "low_stock_products": self._guard("low_stock_products", self.get_low_stock_products, []),
            "recent_sales": self._guard(
                "recent_sales", lambda: LedgerService(self.db).get_sales(limit=recent_limit), []
            ),
        }

    def get_low_stock_products(self) -> List[Product]:
        """Products at or below their minimum level, lowest stock first."""
        return (
            self.db.query(Product)
            .filter(Product.current_stock <= Product.min_stock_level)
            .order_by(Product.current_stock.asc(), Product.name.asc())
            .all()
        )

    def get_top_products(self, limit: int = 5) -> List[TopProduct]:
        """
        Best selling products by revenue.

        Args:
            limit: Number of products to return

        Returns:
            Products with summed quantity and revenue, highest revenue first
        """
        revenue = func.sum(Sale.total_amount).label("revenue")
        rows = self.db.execute(
            select(
                Sale.product_id,
                Product.name,
                Product.sku,
                func.sum(Sale.quantity).label("quantity_sold"),
                revenue,
            )
            .join(Product, Product.id == Sale.product_id)
            .group_by(Sale.product_id, Product.name, Product.sku)
            .order_by(revenue.desc(), Sale.product_id.asc())
            .limit(limit)
        ).all()

        return [
            TopProduct(
                product_id=row.product_id,
                product_name=row.name,
                sku=row.sku,
                quantity_sold=int(row.quantity_sold or 0),
                revenue=float(row.revenue or 0),
            )
            for row in rows
        ]

    def get_monthly_sales(self) -> List[MonthlySales]:
        """Quantity and revenue per calendar month, most recent month first."""
        year = extract("year", Sale.created_at).label("year")
        month = extract("month", Sale.created_at).label("month")
        rows = self.db.execute(
            select(
                year,
                month,
                func.sum(Sale.quantity).label("quantity_sold"),
                func.sum(Sale.total_amount).label("revenue"),
            )
            .group_by(year, month)
            .order_by(year.desc(), month.desc())
        ).all()

        return [
            MonthlySales(
                year=int(row.year),
                month=int(row.month),
                quantity_sold=int(row.quantity_sold or 0),
                revenue=float(row.revenue or 0),
            )
            for row in rows
        ]

    def _movement_total(self, movement_type: MovementType) -> int:
        return self._scalar(
            f"stock_{movement_type.value}",
            select(func.coalesce(func.sum(StockMovement.quantity), 0)).where(
                StockMovement.movement_type == movement_type
            ),
        )

    def _scalar(self, name: str, stmt, cast=int):
        """Run one aggregate; on failure log it and return zero."""
        try:
            return cast(self.db.execute(stmt).scalar() or 0)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Dashboard query '{name}' failed: {e}")
            return cast(0)

    def _guard(self, name: str, fn, default):
        try:
            return fn()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Dashboard section '{name}' failed: {e}")
            return default
