from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
import logging

from stockledger.config import get_settings
from stockledger.database import engine, Base, SessionLocal
from stockledger import models  # noqa: F401  registers every table on Base
from stockledger.services.seed_service import seed_demo_data
from stockledger.api import products, stock_movements, sales, dashboard, auth, users, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    # Create database tables
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    if settings.SEED_ON_STARTUP:
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()

    yield

    # Shutdown
    logger.info("Shutting down application...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Inventory and sales tracker for a small business:

    - **Products**: Catalog CRUD with low stock classification
    - **Stock Movements**: Append-only log of stock coming in and going out
    - **Sales**: Append-only sales log; every sale also records an 'out' movement
    - **Dashboard & Reports**: Totals, top products, monthly trend
    - **Users**: Admin/user accounts with bcrypt password hashes

    ## Stock consistency
    Stock is changed only through single atomic UPDATE statements and every
    ledger write runs in one transaction, so `current_stock` never goes
    negative and never loses a concurrent update.

    ## Codes
    Products, movements and sales get readable codes (PRD000001, STK000001,
    SAL000001) from Redis counters, unique across all three tables.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Report store failures as a generic 500; details stay in the log."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error, please try again later"},
    )


# Include API routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(stock_movements.router, prefix="/api/v1/stock-movements")
app.include_router(stock_movements.router, prefix="/api/v1/stock", include_in_schema=False)
app.include_router(sales.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(dashboard.reports_router, prefix="/api/v1")
app.include_router(auth.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "stock_policy": settings.STOCK_POLICY,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health"
    }
