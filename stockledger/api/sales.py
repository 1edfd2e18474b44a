from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.api.deps import get_actor
from stockledger.services.ledger_service import LedgerService
from stockledger.services.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from stockledger.schemas.ledger import SaleCreate, SaleResponse
from stockledger.tasks.stock_tasks import dispatch_low_stock_check

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post(
    "/",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a sale",
    description="""
    Record a sale at the given unit price.

    In one transaction the sale is stored with its total, the product's stock
    is decremented and a companion 'out' stock movement referencing the sale
    is recorded. If the product is left low or out of stock, a background
    low stock check is queued.
    """
)
def create_sale(
    sale_data: SaleCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Record a sale.

    - **product_id**: Product sold (required)
    - **quantity**: Positive number of units (required)
    - **unit_price**: Price charged per unit (required)
    - **customer_name** / **customer**: Customer (required)
    """
    service = LedgerService(db)

    try:
        sale = service.record_sale(sale_data, actor=actor)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (InsufficientStockError, InvalidQuantityError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    dispatch_low_stock_check(service.get_product(sale.product_id))

    return sale


@router.get(
    "/",
    response_model=list[SaleResponse],
    summary="List sales",
    description="Full sales history, newest first, with product and creator names."
)
def list_sales(db: Session = Depends(get_db)):
    """Get all sales."""
    service = LedgerService(db)
    return service.get_sales()
