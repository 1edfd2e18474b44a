import logging

from sqlalchemy.exc import SQLAlchemyError

from stockledger.tasks.celery_app import celery_app
from stockledger.database import SessionLocal
from stockledger.models import Product, StockStatus

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="check_low_stock")
def check_low_stock(self, product_id: int) -> dict:
    """
    Background task that re-reads a product after a stock decrease and
    raises a low stock alert if it is at or below its minimum level.

    The product is read again rather than trusting the caller's view, so an
    alert is never raised for stock that was replenished in the meantime.

    Args:
        product_id: ID of the product to check

    Returns:
        Dictionary with the product's stock status
    """
    db = SessionLocal()

    try:
        product = db.query(Product).filter(Product.id == product_id).first()

        if not product:
            logger.info(f"Low stock check skipped: product #{product_id} no longer exists")
            return {"status": "skipped", "product_id": product_id}

        status = product.stock_status
        if status == StockStatus.OUT_OF_STOCK:
            logger.warning(f"Product {product.product_code} ({product.name}) is out of stock")
        elif status == StockStatus.LOW_STOCK:
            logger.warning(
                f"Product {product.product_code} ({product.name}) is low on stock: "
                f"{product.current_stock} left, minimum {product.min_stock_level}"
            )

        return {
            "status": status.value,
            "product_id": product_id,
            "product_code": product.product_code,
            "current_stock": product.current_stock,
            "min_stock_level": product.min_stock_level,
            "alert": status != StockStatus.IN_STOCK,
        }

    except SQLAlchemyError as e:
        logger.error(f"Error checking stock of product #{product_id}: {e}")
        raise self.retry(exc=e, countdown=30, max_retries=3)

    finally:
        db.close()


def dispatch_low_stock_check(product) -> bool:
    """
    Queue a low stock check for a product that is now low or out of stock.

    The ledger write is already committed at this point, so a broker
    failure is logged and reported instead of raised.
    """
    if product is None or product.stock_status == StockStatus.IN_STOCK:
        return False
    try:
        check_low_stock.delay(product.id)
        return True
    except Exception as e:
        logger.error(f"Could not queue low stock check for product #{product.id}: {e}")
        return False
