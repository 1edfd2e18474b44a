from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (or a .env file).

    DATABASE_URL has no default on purpose: the database module refuses to
    start without it.
    """
    APP_NAME: str = "Stock Ledger"
    APP_VERSION: str = "1.0.0"

    # Database
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Redis (code counters)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # Ledger behaviour
    STOCK_POLICY: Literal["clamp", "reject"] = "clamp"

    # Bootstrap & auth
    SEED_ON_STARTUP: bool = True
    DEMO_LOGIN_ENABLED: bool = True
    BCRYPT_ROUNDS: int = 12

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
