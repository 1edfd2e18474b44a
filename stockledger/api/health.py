from fastapi import APIRouter
from stockledger.utils.counters import counter_service
from stockledger.services.code_service import PRODUCT_PREFIX, MOVEMENT_PREFIX, SALE_PREFIX
from stockledger.database import engine
from sqlalchemy import text

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if all services (DB, Redis) are ready."
)
def readiness_check():
    """
    Readiness check for all dependencies.

    Returns status of:
    - Database connection
    - Redis connection (code counters; codes fall back to timestamps without it)
    """
    checks = {
        "database": False,
        "redis": False
    }

    # Check database
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            checks["database"] = True
    except Exception as e:
        checks["database_error"] = str(e)

    # Check Redis
    try:
        counter_service.client.ping()
        checks["redis"] = True
    except Exception as e:
        checks["redis_error"] = str(e)

    # Determine overall status
    all_healthy = all([checks["database"], checks["redis"]])

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks
    }


@router.get(
    "/counters",
    summary="Code counters",
    description="Current value of the product, movement and sale code counters."
)
def code_counters():
    """Current counter values (null when unset or Redis is unreachable)."""
    return {
        prefix: counter_service.current(prefix)
        for prefix in (PRODUCT_PREFIX, MOVEMENT_PREFIX, SALE_PREFIX)
    }
