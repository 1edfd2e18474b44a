from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional, List
import logging

from stockledger.models.product import Product
from stockledger.schemas.product import ProductCreate, ProductUpdate
from stockledger.services.code_service import CodeGenerator, PRODUCT_PREFIX
from stockledger.services.errors import DuplicateSKUError

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating new products (with a generated PRD code)
    - Reading products
    - Updating products (partial, coalesce-style)
    - Deleting products (history is deleted with them)

    Catalog operations never write stock movements or sales.
    """

    MAX_CODE_RETRIES = 3

    def __init__(self, db: Session, codes: CodeGenerator = None):
        self.db = db
        self.codes = codes or CodeGenerator(db)

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Args:
            product_data: Product creation data

        Returns:
            Created product instance

        Raises:
            DuplicateSKUError: If the SKU is already in use
        """
        for attempt in range(1, self.MAX_CODE_RETRIES + 1):
            self._ensure_sku_available(product_data.sku)
            product = Product(
                product_code=self.codes.generate(PRODUCT_PREFIX),
                **product_data.model_dump(),
            )
            self.db.add(product)
            try:
                self.db.commit()
            except IntegrityError as e:
                # Lost a race on the SKU or the code; the SKU check above reports the former
                self.db.rollback()
                logger.warning(f"Integrity error creating product (attempt {attempt}): {e}")
                if attempt == self.MAX_CODE_RETRIES:
                    raise
                continue
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error creating product: {e}")
                raise
            self.db.refresh(product)
            logger.info(f"Product {product.product_code} created (sku={product.sku})")
            return product

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """
        Get a product by ID.

        Args:
            product_id: Product ID to look up

        Returns:
            Product instance or None if not found
        """
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_all(self) -> List[Product]:
        """Get every product, newest first."""
        return (
            self.db.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    def update(self, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        """
        Update an existing product.

        Args:
            product_id: ID of product to update
            product_data: Update data (only non-None fields are updated)

        Returns:
            Updated product or None if not found

        Raises:
            DuplicateSKUError: If the new SKU belongs to another product
        """
        product = self.get_by_id(product_id)

        if not product:
            return None

        # Update only provided fields
        update_data = product_data.model_dump(exclude_unset=True)
        new_sku = update_data.get("sku")
        if new_sku is not None and new_sku != product.sku:
            self._ensure_sku_available(new_sku)

        for field, value in update_data.items():
            if value is not None:
                setattr(product, field, value)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error updating product #{product_id}: {e}")
            raise DuplicateSKUError(f"SKU '{new_sku}' is already in use") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating product #{product_id}: {e}")
            raise
        self.db.refresh(product)

        return product

    def delete(self, product_id: int) -> bool:
        """
        Delete a product together with its movements and sales.

        Args:
            product_id: ID of product to delete

        Returns:
            True if deleted, False if not found
        """
        product = self.get_by_id(product_id)

        if not product:
            return False

        self.db.delete(product)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting product #{product_id}: {e}")
            raise

        logger.info(f"Product #{product_id} deleted with its stock history")
        return True

    def _ensure_sku_available(self, sku: str) -> None:
        exists = self.db.query(Product.id).filter(Product.sku == sku).first()
        if exists:
            raise DuplicateSKUError(f"SKU '{sku}' is already in use")
