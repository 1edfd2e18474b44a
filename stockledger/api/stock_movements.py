from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.api.deps import get_actor
from stockledger.models.stock_movement import MovementType
from stockledger.services.ledger_service import LedgerService
from stockledger.services.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from stockledger.schemas.ledger import StockMovementCreate, StockMovementResponse
from stockledger.tasks.stock_tasks import dispatch_low_stock_check

# Mounted at both /stock-movements and /stock
router = APIRouter(tags=["Stock Movements"])


@router.post(
    "/",
    response_model=StockMovementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a stock movement",
    description="""
    Record stock coming in or going out and apply it to the product's stock.

    **Stock consistency:**
    The movement row and the stock change are committed together. The stock
    change is a single atomic UPDATE, so concurrent movements never overwrite
    each other. Outgoing stock floors at zero (STOCK_POLICY=clamp) or is
    rejected with a 400 when it exceeds the stock on hand (STOCK_POLICY=reject).
    """
)
def create_movement(
    movement_data: StockMovementCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Record a stock movement.

    - **product_id**: Product whose stock changes (required)
    - **movement_type** / **type**: 'in' or 'out' (required)
    - **quantity**: Positive number of units (required)
    - **reason**: Why the stock changed (required)
    - **notes**: Optional notes
    """
    service = LedgerService(db)

    try:
        movement = service.record_movement(movement_data, actor=actor)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (InsufficientStockError, InvalidQuantityError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if movement.movement_type == MovementType.OUT:
        dispatch_low_stock_check(service.get_product(movement.product_id))

    return movement


@router.get(
    "/",
    response_model=list[StockMovementResponse],
    summary="List stock movements",
    description="Full movement history, newest first, with product and creator names."
)
def list_movements(db: Session = Depends(get_db)):
    """Get all stock movements."""
    service = LedgerService(db)
    return service.get_movements()
