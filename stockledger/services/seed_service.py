from sqlalchemy.orm import Session
import logging

from stockledger.models.product import Product
from stockledger.models.user import User
from stockledger.services.auth_service import DEMO_ACCOUNTS, hash_password
from stockledger.services.code_service import CodeGenerator, PRODUCT_PREFIX

logger = logging.getLogger(__name__)


SAMPLE_PRODUCTS = (
    {
        "name": "Laptop Dell XPS 13",
        "description": "High-performance ultrabook",
        "sku": "DELL-XPS-13",
        "price": 129999.99,
        "current_stock": 15,
        "min_stock_level": 5,
        "category": "Electronics",
    },
    {
        "name": "iPhone 15 Pro",
        "description": "Latest Apple smartphone",
        "sku": "IPHONE-15-PRO",
        "price": 99999.99,
        "current_stock": 8,
        "min_stock_level": 3,
        "category": "Electronics",
    },
    {
        "name": "Office Chair",
        "description": "Ergonomic office chair",
        "sku": "CHAIR-ERG-001",
        "price": 29999.99,
        "current_stock": 25,
        "min_stock_level": 10,
        "category": "Furniture",
    },
    {
        "name": "Wireless Mouse",
        "description": "Bluetooth wireless mouse",
        "sku": "MOUSE-BT-001",
        "price": 2599.99,
        "current_stock": 50,
        "min_stock_level": 20,
        "category": "Accessories",
    },
    {
        "name": 'Monitor 27"',
        "description": "4K UHD monitor",
        "sku": "MON-27-4K",
        "price": 45999.99,
        "current_stock": 12,
        "min_stock_level": 5,
        "category": "Electronics",
    },
)


def ensure_demo_users(db: Session) -> int:
    """Insert the demo accounts whose username is not taken yet. Returns the number added."""
    added = 0
    for account in DEMO_ACCOUNTS:
        exists = db.query(User.id).filter(User.username == account["username"]).first()
        if exists:
            continue
        db.add(
            User(
                username=account["username"],
                email=account["email"],
                full_name=account["full_name"],
                role=account["role"],
                password_hash=hash_password(account["password"]),
            )
        )
        added += 1
    db.commit()
    return added


def seed_sample_products(db: Session) -> int:
    """Insert the sample catalog, but only into an empty products table."""
    if db.query(Product.id).first():
        return 0
    codes = CodeGenerator(db)
    for data in SAMPLE_PRODUCTS:
        db.add(Product(product_code=codes.generate(PRODUCT_PREFIX), **data))
        # Codes are checked against stored rows, so flush before generating the next one
        db.flush()
    db.commit()
    return len(SAMPLE_PRODUCTS)


def seed_demo_data(db: Session) -> None:
    """Seed demo users and sample products."""
    users = ensure_demo_users(db)
    products = seed_sample_products(db)
    logger.info(f"Seeded {users} demo users and {products} sample products")
