import os

# stockledger.database refuses to import without DATABASE_URL and builds the
# engine from it, so the app engine itself is pointed at in-memory SQLite here
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STOCK_POLICY"] = "clamp"

import pytest
import redis
from unittest.mock import patch
from fastapi.testclient import TestClient

from stockledger.config import get_settings
from stockledger.main import app
from stockledger.database import Base, engine, SessionLocal
from stockledger.utils.counters import counter_service


class FakeRedis:
    """In-memory stand-in for the few Redis commands the counters use."""

    def __init__(self):
        self.store = {}

    def incr(self, key):
        self.store[key] = int(self.store.get(key, 0)) + 1
        return self.store[key]

    def get(self, key):
        value = self.store.get(key)
        return None if value is None else str(value)

    def set(self, key, value):
        self.store[key] = int(value)
        return True

    def ping(self):
        return True


class UnreachableRedis:
    """Redis client whose every command fails as if the server were down."""

    def _fail(self, *args, **kwargs):
        raise redis.ConnectionError("Connection refused")

    incr = get = set = ping = _fail


@pytest.fixture(autouse=True)
def fake_redis():
    """Give every test a fresh counter store."""
    original = counter_service.client
    counter_service.client = FakeRedis()
    yield counter_service.client
    counter_service.client = original


@pytest.fixture
def unreachable_redis():
    original = counter_service.client
    counter_service.client = UnreachableRedis()
    yield counter_service.client
    counter_service.client = original


@pytest.fixture(autouse=True)
def low_stock_delay():
    """Keep Celery out of the tests; the mock records queued low stock checks."""
    with patch("stockledger.tasks.stock_tasks.check_low_stock.delay") as delay:
        yield delay


@pytest.fixture
def reject_policy(monkeypatch):
    """Switch outgoing stock to the reject policy for one test."""
    monkeypatch.setattr(get_settings(), "STOCK_POLICY", "reject")


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    # Create tables
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def create_product(client):
    """Factory creating a product through the API and returning its JSON."""
    counter = {"n": 0}

    def _create(**overrides):
        counter["n"] += 1
        payload = {
            "name": f"Product {counter['n']}",
            "sku": f"SKU-{counter['n']}",
            "price": 10.00,
            "stock": 10,
            "min_stock": 2,
        }
        payload.update(overrides)
        response = client.post("/api/v1/products/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
