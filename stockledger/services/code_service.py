from sqlalchemy.orm import Session
from sqlalchemy import select, func, union_all
import logging
import random
import time

from stockledger.models.product import Product
from stockledger.models.stock_movement import StockMovement
from stockledger.models.sale import Sale
from stockledger.utils.counters import counter_service, CounterService, CounterUnavailableError

logger = logging.getLogger(__name__)

PRODUCT_PREFIX = "PRD"
MOVEMENT_PREFIX = "STK"
SALE_PREFIX = "SAL"

CODE_DIGITS = 6


def format_code(prefix: str, number: int) -> str:
    """Format a counter value as a code, e.g. ('PRD', 1) -> 'PRD000001'."""
    return f"{prefix}{number:0{CODE_DIGITS}d}"


def fallback_code(prefix: str) -> str:
    """
    Best-effort code used when the counter store is unavailable:
    prefix + last 6 digits of the millisecond timestamp + 3 random digits.
    """
    millis = int(time.time() * 1000) % 10 ** CODE_DIGITS
    return f"{prefix}{millis:0{CODE_DIGITS}d}{random.randint(0, 999):03d}"


class CodeGenerator:
    """
    Generates human-readable codes for products, movements and sales.

    CODE GENERATION STRATEGY:
    =========================
    Primary: a Redis counter per prefix (atomic INCR, shared by all server
    instances). Every candidate is checked against the codes stored in all
    three tables. If the candidate is already taken (e.g. Redis was flushed),
    the counter is moved forward once to the highest code issued for the
    prefix and incremented again.

    Fallback: if Redis cannot be reached, or no free candidate is found within
    MAX_ATTEMPTS, a timestamp-based code is returned instead.

    The unique constraints on the code columns remain the final guard; the
    ledger retries its unit of work if a commit hits one of them.
    """

    MAX_ATTEMPTS = 10

    def __init__(self, db: Session, counters: CounterService = None):
        self.db = db
        self.counters = counters or counter_service

    def generate(self, prefix: str) -> str:
        """
        Return a fresh code for the given prefix.

        Args:
            prefix: One of PRD, STK, SAL

        Returns:
            Code string such as 'STK000042'
        """
        try:
            code = self._next_from_counter(prefix)
            if code is not None:
                return code
            logger.warning(f"No free {prefix} code after {self.MAX_ATTEMPTS} attempts, using fallback")
        except CounterUnavailableError as e:
            logger.warning(f"Code counter unavailable ({e}), using fallback for {prefix}")
        return fallback_code(prefix)

    def _next_from_counter(self, prefix: str):
        resynced = False
        for _ in range(self.MAX_ATTEMPTS):
            candidate = format_code(prefix, self.counters.incr(prefix))
            if not self.code_exists(candidate):
                return candidate
            if not resynced:
                self.counters.advance_to(prefix, self.highest_issued(prefix))
                resynced = True
        return None

    def code_exists(self, code: str) -> bool:
        """Check whether a code is used by any product, movement or sale."""
        stmt = union_all(
            select(Product.id).where(Product.product_code == code),
            select(StockMovement.id).where(StockMovement.movement_code == code),
            select(Sale.id).where(Sale.sale_code == code),
        )
        return self.db.execute(stmt).first() is not None

    def highest_issued(self, prefix: str) -> int:
        """Highest counter value among stored counter-style codes for a prefix."""
        highest = 0
        for column in (Product.product_code, StockMovement.movement_code, Sale.sale_code):
            value = self.db.execute(
                select(func.max(column)).where(
                    column.like(f"{prefix}%"),
                    func.length(column) == len(prefix) + CODE_DIGITS,
                )
            ).scalar()
            if value and value[len(prefix):].isdigit():
                highest = max(highest, int(value[len(prefix):]))
        return highest
