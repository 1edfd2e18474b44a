"""Service-level tests for stock consistency rules."""
import random

import pytest

from stockledger.models import Product, Sale, StockMovement, MovementType, StockStatus, classify_stock
from stockledger.schemas.ledger import StockMovementCreate, SaleCreate
from stockledger.schemas.product import ProductCreate
from stockledger.services.ledger_service import LedgerService, sale_total
from stockledger.services.product_service import ProductService
from stockledger.services.dashboard_service import DashboardService
from stockledger.services.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)


def make_product(db, stock, min_stock=0, sku="SKU-1"):
    return ProductService(db).create(
        ProductCreate(name="Widget", sku=sku, price=10.00, stock=stock, min_stock=min_stock)
    )


def movement(product_id, movement_type, quantity):
    return StockMovementCreate(
        product_id=product_id, movement_type=movement_type, quantity=quantity, reason="test"
    )


def sale(product_id, quantity, unit_price=10.00, customer="Alice"):
    return SaleCreate(
        product_id=product_id, quantity=quantity, unit_price=unit_price, customer_name=customer
    )


def stock_of(db, product_id):
    db.expire_all()
    return db.get(Product, product_id).current_stock


@pytest.mark.parametrize(
    "stock, min_stock, expected",
    [
        (0, 0, StockStatus.OUT_OF_STOCK),
        (0, 5, StockStatus.OUT_OF_STOCK),
        (1, 5, StockStatus.LOW_STOCK),
        (5, 5, StockStatus.LOW_STOCK),
        (6, 5, StockStatus.IN_STOCK),
        (1, 0, StockStatus.IN_STOCK),
    ],
)
def test_classify_stock(stock, min_stock, expected):
    assert classify_stock(stock, min_stock) == expected


def test_sale_total_uses_decimal_arithmetic():
    assert str(sale_total(3, 0.1)) == "0.30"
    assert str(sale_total(2, 10.00)) == "20.00"


def test_widget_scenario(db_session):
    """Create, restock, sell, then oversell a product under the clamp policy."""
    service = LedgerService(db_session, policy="clamp")
    product = make_product(db_session, stock=5, min_stock=5)
    assert product.stock_status == StockStatus.LOW_STOCK

    service.record_movement(movement(product.id, MovementType.IN, 3))
    db_session.expire_all()
    product = db_session.get(Product, product.id)
    assert product.current_stock == 8
    assert product.stock_status == StockStatus.IN_STOCK

    first = service.record_sale(sale(product.id, 2, 10.00, "Alice"))
    assert first.total_amount == 20.00
    assert stock_of(db_session, product.id) == 6
    outs = db_session.query(StockMovement).filter(StockMovement.movement_type == MovementType.OUT).all()
    assert [(m.quantity, m.reason) for m in outs] == [(2, "Sale to Alice")]

    service.record_sale(sale(product.id, 100, 10.00, "Bob"))
    assert stock_of(db_session, product.id) == 0

    stats = DashboardService(db_session).get_stats()
    assert stats.total_revenue == 20.00 + 1000.00


def test_reject_policy_blocks_oversell(db_session):
    service = LedgerService(db_session, policy="reject")
    product = make_product(db_session, stock=6)

    with pytest.raises(InsufficientStockError):
        service.record_sale(sale(product.id, 100, customer="Bob"))

    assert stock_of(db_session, product.id) == 6
    assert db_session.query(Sale).count() == 0
    assert db_session.query(StockMovement).count() == 0


def test_reject_policy_blocks_out_movement(db_session):
    service = LedgerService(db_session, policy="reject")
    product = make_product(db_session, stock=2)

    with pytest.raises(InsufficientStockError):
        service.record_movement(movement(product.id, MovementType.OUT, 3))

    assert stock_of(db_session, product.id) == 2
    assert db_session.query(StockMovement).count() == 0


def test_reject_policy_allows_exact_stock(db_session):
    service = LedgerService(db_session, policy="reject")
    product = make_product(db_session, stock=4)

    service.record_movement(movement(product.id, MovementType.OUT, 4))

    assert stock_of(db_session, product.id) == 0


def test_non_positive_quantity_rejected_before_write(db_session):
    service = LedgerService(db_session)
    product = make_product(db_session, stock=4)
    bad_movement = StockMovementCreate.model_construct(
        product_id=product.id, movement_type=MovementType.IN, quantity=0, reason="x", notes=None
    )
    bad_sale = SaleCreate.model_construct(
        product_id=product.id, quantity=-1, unit_price=1.0, customer_name="x"
    )

    with pytest.raises(InvalidQuantityError):
        service.record_movement(bad_movement)
    with pytest.raises(InvalidQuantityError):
        service.record_sale(bad_sale)

    assert db_session.query(StockMovement).count() == 0
    assert stock_of(db_session, product.id) == 4


def test_missing_product_writes_nothing(db_session):
    service = LedgerService(db_session)

    with pytest.raises(ProductNotFoundError):
        service.record_sale(sale(404, 1))
    with pytest.raises(ProductNotFoundError):
        service.record_movement(movement(404, MovementType.IN, 1))

    assert db_session.query(Sale).count() == 0
    assert db_session.query(StockMovement).count() == 0


def test_stock_never_negative_for_random_sequences(db_session):
    """Stock follows max(0, ...) step by step and never drops below zero."""
    rng = random.Random(1234)
    service = LedgerService(db_session, policy="clamp")
    product = make_product(db_session, stock=10)
    expected = 10

    for _ in range(60):
        quantity = rng.randint(1, 8)
        kind = rng.choice(["in", "out", "sale"])
        if kind == "in":
            service.record_movement(movement(product.id, MovementType.IN, quantity))
            expected += quantity
        elif kind == "out":
            service.record_movement(movement(product.id, MovementType.OUT, quantity))
            expected = max(0, expected - quantity)
        else:
            service.record_sale(sale(product.id, quantity))
            expected = max(0, expected - quantity)

        current = stock_of(db_session, product.id)
        assert current >= 0
        assert current == expected


def test_each_sale_has_one_companion_movement(db_session):
    service = LedgerService(db_session)
    product = make_product(db_session, stock=100)

    sales = [service.record_sale(sale(product.id, q)) for q in (1, 2, 3)]

    for recorded in sales:
        companions = (
            db_session.query(StockMovement)
            .filter(StockMovement.notes == f"Sale #{recorded.sale_code}")
            .all()
        )
        assert len(companions) == 1
        assert companions[0].movement_type == MovementType.OUT
        assert companions[0].quantity == recorded.quantity


def test_generated_codes_unique_across_tables(db_session):
    service = LedgerService(db_session)
    products = [make_product(db_session, stock=50, sku=f"SKU-{i}") for i in range(3)]
    for product in products:
        service.record_movement(movement(product.id, MovementType.IN, 1))
        service.record_sale(sale(product.id, 1))

    codes = (
        [p.product_code for p in db_session.query(Product)]
        + [m.movement_code for m in db_session.query(StockMovement)]
        + [s.sale_code for s in db_session.query(Sale)]
    )

    assert len(codes) == len(set(codes))
