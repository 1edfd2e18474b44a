from celery import Celery

from stockledger.config import get_settings

settings = get_settings()

celery_app = Celery(
    "stockledger",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["stockledger.tasks.stock_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Low stock checks are a single indexed read
    task_time_limit=30,
    task_soft_time_limit=20,
    result_expires=3600,

    worker_prefetch_multiplier=4,
)
