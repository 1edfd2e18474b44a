"""Tests for Product API endpoints."""
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from stockledger.services.product_service import ProductService


def test_create_product(client):
    """Test creating a new product."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Test Product",
            "sku": "TP-1",
            "price": 99.99,
            "current_stock": 10,
            "min_stock_level": 3,
            "category": "Tools",
            "supplier": "Acme",
        }
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Test Product"
    assert data["price"] == 99.99
    assert data["current_stock"] == 10
    assert data["min_stock_level"] == 3
    assert data["stock_status"] == "in_stock"
    assert data["product_code"] == "PRD000001"
    assert "id" in data
    assert "created_at" in data


def test_create_product_accepts_short_field_names(client):
    """`stock` and `min_stock` are accepted as aliases."""
    response = client.post(
        "/api/v1/products/",
        json={"name": "Widget", "sku": "W-1", "price": 10.00, "stock": 5, "min_stock": 5}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["current_stock"] == 5
    assert data["min_stock_level"] == 5
    assert data["stock_status"] == "low_stock"


def test_create_product_defaults_stock_to_zero(client):
    response = client.post(
        "/api/v1/products/",
        json={"name": "Empty", "sku": "E-1", "price": 1.50}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["current_stock"] == 0
    assert data["min_stock_level"] == 0
    assert data["stock_status"] == "out_of_stock"


def test_create_product_missing_fields(client):
    """name, sku and price are required."""
    response = client.post("/api/v1/products/", json={"name": "No SKU"})

    assert response.status_code == 422
    missing = {error["loc"][-1] for error in response.json()["detail"]}
    assert {"sku", "price"} <= missing


def test_create_product_invalid_price(client):
    """Test creating product with invalid price fails."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Test Product",
            "sku": "TP-1",
            "price": -10.00,  # Invalid: negative price
            "stock": 10
        }
    )

    assert response.status_code == 422  # Validation error


def test_create_product_invalid_stock(client):
    """Test creating product with negative stock fails."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Test Product",
            "sku": "TP-1",
            "price": 99.99,
            "stock": -5  # Invalid: negative stock
        }
    )

    assert response.status_code == 422


def test_create_product_duplicate_sku(client, create_product):
    create_product(sku="DUP-1")

    response = client.post(
        "/api/v1/products/",
        json={"name": "Second", "sku": "DUP-1", "price": 5.00}
    )

    assert response.status_code == 409
    assert "DUP-1" in response.json()["detail"]


def test_product_codes_increment(client, create_product):
    codes = [create_product()["product_code"] for _ in range(3)]

    assert codes == ["PRD000001", "PRD000002", "PRD000003"]


def test_get_product(client, create_product):
    """Test getting a product by ID."""
    product_id = create_product(name="Test Product")["id"]

    # Get the product
    response = client.get(f"/api/v1/products/{product_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == product_id
    assert data["name"] == "Test Product"


def test_get_product_not_found(client):
    """Test getting non-existent product returns 404."""
    response = client.get("/api/v1/products/9999")

    assert response.status_code == 404


def test_list_products_newest_first(client, create_product):
    """Products are listed newest first, without pagination."""
    ids = [create_product()["id"] for _ in range(15)]

    response = client.get("/api/v1/products/")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 15
    assert [p["id"] for p in data] == list(reversed(ids))


def test_list_products_is_repeatable(client, create_product):
    """Two reads with no write in between return identical rows."""
    for _ in range(4):
        create_product()

    first = client.get("/api/v1/products/").json()
    second = client.get("/api/v1/products/").json()

    assert first == second


def test_update_product(client, create_product):
    """Test updating a product."""
    product = create_product(name="Original Name", price=50.00, stock=10)

    # Update product
    response = client.put(
        f"/api/v1/products/{product['id']}",
        json={"name": "Updated Name", "price": 75.00}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Updated Name"
    assert data["price"] == 75.00
    assert data["current_stock"] == 10  # Stock should remain unchanged
    assert data["sku"] == product["sku"]
    assert data["product_code"] == product["product_code"]


def test_update_product_does_not_record_movement(client, create_product):
    product = create_product(stock=10)

    client.put(f"/api/v1/products/{product['id']}", json={"stock": 3})

    assert client.get("/api/v1/stock-movements/").json() == []


def test_update_product_not_found(client):
    response = client.put("/api/v1/products/9999", json={"name": "Ghost"})

    assert response.status_code == 404


def test_update_product_duplicate_sku(client, create_product):
    create_product(sku="A-1")
    other = create_product(sku="B-1")

    response = client.put(f"/api/v1/products/{other['id']}", json={"sku": "A-1"})

    assert response.status_code == 409


def test_delete_product(client, create_product):
    """Test deleting a product."""
    product_id = create_product()["id"]

    # Delete product
    response = client.delete(f"/api/v1/products/{product_id}")
    assert response.status_code == 204

    # Verify it's deleted
    get_response = client.get(f"/api/v1/products/{product_id}")
    assert get_response.status_code == 404


def test_delete_product_cascades_history(client, create_product):
    """Deleting a product deletes its movements and sales."""
    doomed = create_product(stock=10)
    kept = create_product(stock=10)

    for product in (doomed, kept):
        client.post(
            "/api/v1/stock-movements/",
            json={"product_id": product["id"], "type": "in", "quantity": 1, "reason": "restock"}
        )
        client.post(
            "/api/v1/sales/",
            json={"product_id": product["id"], "quantity": 1, "unit_price": 10.0, "customer": "Ann"}
        )

    client.delete(f"/api/v1/products/{doomed['id']}")

    movements = client.get("/api/v1/stock-movements/").json()
    sales = client.get("/api/v1/sales/").json()
    assert {m["product_id"] for m in movements} == {kept["id"]}
    assert {s["product_id"] for s in sales} == {kept["id"]}


def test_delete_product_not_found(client):
    response = client.delete("/api/v1/products/9999")

    assert response.status_code == 404


def test_store_failure_returns_generic_500(client):
    """Database errors are reported without internal details."""
    with patch.object(
        ProductService, "get_all", side_effect=OperationalError("SELECT", {}, Exception("db gone"))
    ):
        response = client.get("/api/v1/products/")

    assert response.status_code == 500
    assert response.json() == {"detail": "Database error, please try again later"}
