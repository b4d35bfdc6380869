from celery import Celery

from coupon_drop.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "coupon_drop",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "coupon_drop.workers.tasks.pool_maintenance",
    ],
)

celery_app.conf.update(
    task_default_queue="q_maintenance",
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # A sweep that misses its slot is superseded by the next tick.
    task_time_limit=max(10, settings.sweep_interval_seconds * 2),
    result_expires=3600,
)


@celery_app.task(name="coupon_drop.workers.celery_app.ping")
def ping() -> str:
    return "pong"
