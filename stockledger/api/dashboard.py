from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.services.dashboard_service import DashboardService
from stockledger.services.ledger_service import LedgerService
from stockledger.schemas.dashboard import (
    DashboardStats,
    DashboardResponse,
    TopProduct,
    MonthlySales,
)
from stockledger.schemas.product import ProductResponse
from stockledger.schemas.ledger import SaleResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
reports_router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get(
    "/stats",
    response_model=DashboardStats,
    summary="Dashboard statistics",
    description="Product count, stock units, low stock count, revenue and stock in/out totals."
)
def dashboard_stats(db: Session = Depends(get_db)):
    """Aggregate statistics. A failing figure is reported as 0."""
    return DashboardService(db).get_stats()


@router.get(
    "/",
    response_model=DashboardResponse,
    summary="Dashboard overview",
    description="Statistics, low stock products and the most recent sales."
)
def dashboard(
    recent: int = Query(5, ge=1, le=50, description="Number of recent sales"),
    db: Session = Depends(get_db)
):
    """Dashboard overview; each section degrades to an empty default on failure."""
    return DashboardService(db).get_dashboard(recent_limit=recent)


@reports_router.get(
    "/top-products",
    response_model=list[TopProduct],
    summary="Top products by revenue"
)
def top_products(
    limit: int = Query(5, ge=1, le=100, description="Number of products"),
    db: Session = Depends(get_db)
):
    return DashboardService(db).get_top_products(limit)


@reports_router.get(
    "/monthly-sales",
    response_model=list[MonthlySales],
    summary="Monthly sales trend"
)
def monthly_sales(db: Session = Depends(get_db)):
    return DashboardService(db).get_monthly_sales()


@reports_router.get(
    "/low-stock",
    response_model=list[ProductResponse],
    summary="Products at or below their minimum stock level"
)
def low_stock(db: Session = Depends(get_db)):
    return DashboardService(db).get_low_stock_products()


@reports_router.get(
    "/recent-sales",
    response_model=list[SaleResponse],
    summary="Most recent sales"
)
def recent_sales(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return LedgerService(db).get_sales(limit=limit)
