from sqlalchemy.orm import Session, joinedload
from sqlalchemy import update, case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
import logging

from stockledger.config import get_settings
from stockledger.models.product import Product
from stockledger.models.stock_movement import StockMovement, MovementType
from stockledger.models.sale import Sale
from stockledger.schemas.ledger import StockMovementCreate, SaleCreate
from stockledger.services.code_service import CodeGenerator, MOVEMENT_PREFIX, SALE_PREFIX
from stockledger.services.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)

logger = logging.getLogger(__name__)

CLAMP = "clamp"
REJECT = "reject"

SYSTEM_ACTOR = "system"

_CENTS = Decimal("0.01")


def sale_total(quantity: int, unit_price: float) -> Decimal:
    """quantity * unit_price rounded to cents."""
    return (Decimal(str(unit_price)) * quantity).quantize(_CENTS, rounding=ROUND_HALF_UP)


class LedgerService:
    """
    Service class for stock movements and sales.

    STOCK CONSISTENCY STRATEGY:
    ===========================
    Stock is never read, modified in Python, and written back. Every change
    is a single server-side arithmetic UPDATE:

        in:  current_stock = current_stock + :q
        out: current_stock = CASE WHEN current_stock > :q
                                  THEN current_stock - :q ELSE 0 END   (clamp)
             current_stock = current_stock - :q
                 WHERE current_stock >= :q                             (reject)

    so concurrent writers cannot lose each other's updates, and the row
    never goes negative. Each operation (movement insert + stock update, or
    sale insert + stock update + companion movement insert) is committed as
    one transaction and rolled back as a whole on any failure.

    Which rule applies to outgoing stock is set by STOCK_POLICY:
    - clamp (default): over-selling floors the stock at zero
    - reject: over-selling raises InsufficientStockError and writes nothing
    """

    MAX_CODE_RETRIES = 3

    def __init__(self, db: Session, policy: str = None, codes: CodeGenerator = None):
        self.db = db
        self.policy = policy or get_settings().STOCK_POLICY
        self.codes = codes or CodeGenerator(db)

    def record_movement(
        self,
        movement_data: StockMovementCreate,
        actor: Optional[str] = None,
    ) -> StockMovement:
        """
        Record a stock movement and apply it to the product's stock.

        Args:
            movement_data: Product, direction, quantity, reason and notes
            actor: Username recorded as creator (defaults to "system")

        Returns:
            The inserted movement

        Raises:
            InvalidQuantityError: If quantity is not positive
            ProductNotFoundError: If the product doesn't exist
            InsufficientStockError: If the reject policy blocks an outgoing movement
        """
        self._check_quantity(movement_data.quantity)
        actor = actor or SYSTEM_ACTOR

        def unit_of_work():
            self._require_product(movement_data.product_id)
            movement = StockMovement(
                movement_code=self.codes.generate(MOVEMENT_PREFIX),
                product_id=movement_data.product_id,
                movement_type=movement_data.movement_type,
                quantity=movement_data.quantity,
                reason=movement_data.reason,
                notes=movement_data.notes,
                created_by=actor,
            )
            self.db.add(movement)
            delta = movement_data.quantity
            if movement_data.movement_type == MovementType.OUT:
                delta = -delta
            self._apply_stock_delta(movement_data.product_id, delta)
            return movement

        movement = self._run(unit_of_work, "stock movement")
        logger.info(
            f"Movement {movement.movement_code}: {movement.movement_type.value} "
            f"{movement.quantity} of product #{movement.product_id} by {actor}"
        )
        return movement

    def record_sale(self, sale_data: SaleCreate, actor: Optional[str] = None) -> Sale:
        """
        Record a sale, decrement stock and log the companion 'out' movement.

        Args:
            sale_data: Product, quantity, unit price snapshot and customer
            actor: Username recorded as creator (defaults to "system")

        Returns:
            The inserted sale

        Raises:
            InvalidQuantityError: If quantity is not positive
            ProductNotFoundError: If the product doesn't exist
            InsufficientStockError: If the reject policy blocks the sale
        """
        self._check_quantity(sale_data.quantity)
        actor = actor or SYSTEM_ACTOR

        def unit_of_work():
            self._require_product(sale_data.product_id)
            sale = Sale(
                sale_code=self.codes.generate(SALE_PREFIX),
                product_id=sale_data.product_id,
                quantity=sale_data.quantity,
                unit_price=sale_data.unit_price,
                total_amount=sale_total(sale_data.quantity, sale_data.unit_price),
                customer_name=sale_data.customer_name,
                created_by=actor,
            )
            self.db.add(sale)
            self._apply_stock_delta(sale_data.product_id, -sale_data.quantity)
            self.db.add(
                StockMovement(
                    movement_code=self.codes.generate(MOVEMENT_PREFIX),
                    product_id=sale_data.product_id,
                    movement_type=MovementType.OUT,
                    quantity=sale_data.quantity,
                    reason=f"Sale to {sale_data.customer_name}",
                    notes=f"Sale #{sale.sale_code}",
                    created_by=actor,
                )
            )
            return sale

        sale = self._run(unit_of_work, "sale")
        logger.info(
            f"Sale {sale.sale_code}: {sale.quantity} of product #{sale.product_id} "
            f"to {sale.customer_name} for {sale.total_amount}"
        )
        return sale

    def get_movements(self) -> List[StockMovement]:
        """Full movement history, newest first, with product and creator loaded."""
        return (
            self.db.query(StockMovement)
            .options(joinedload(StockMovement.product), joinedload(StockMovement.creator))
            .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
            .all()
        )

    def get_sales(self, limit: Optional[int] = None) -> List[Sale]:
        """Sales history, newest first, with product and creator loaded."""
        query = (
            self.db.query(Sale)
            .options(joinedload(Sale.product), joinedload(Sale.creator))
            .order_by(Sale.created_at.desc(), Sale.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def _check_quantity(self, quantity: int) -> None:
        if quantity is None or quantity <= 0:
            raise InvalidQuantityError(f"Quantity must be positive, got {quantity}")

    def _require_product(self, product_id: int) -> None:
        exists = self.db.query(Product.id).filter(Product.id == product_id).first()
        if not exists:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

    def _apply_stock_delta(self, product_id: int, delta: int) -> None:
        """Apply a stock change as one atomic UPDATE."""
        stmt = update(Product).where(Product.id == product_id)

        if delta >= 0:
            new_stock = Product.current_stock + delta
        elif self.policy == REJECT:
            new_stock = Product.current_stock + delta
            stmt = stmt.where(Product.current_stock >= -delta)
        else:
            new_stock = case(
                (Product.current_stock > -delta, Product.current_stock + delta),
                else_=0,
            )

        result = self.db.execute(
            stmt.values(current_stock=new_stock, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            if self.policy == REJECT and delta < 0:
                raise InsufficientStockError(
                    f"Insufficient stock for product {product_id}: requested {-delta}"
                )
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

    def _run(self, unit_of_work, label: str):
        """
        Run a unit of work in its own transaction and commit it.

        Retries the whole unit when the commit collides with a unique code;
        any other failure rolls everything back and is re-raised.
        """
        for attempt in range(1, self.MAX_CODE_RETRIES + 1):
            try:
                record = unit_of_work()
                self.db.commit()
                self.db.refresh(record)
                return record
            except (ProductNotFoundError, InsufficientStockError):
                self.db.rollback()
                raise
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(f"Integrity error recording {label} (attempt {attempt}): {e}")
                if attempt == self.MAX_CODE_RETRIES:
                    raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error recording {label}: {e}")
                raise
