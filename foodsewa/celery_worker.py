# foodsewa/celery_worker.py
from celery import Celery

from foodsewa.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CART_CLEANUP_INTERVAL_SECONDS,
)

celery_app = Celery(
    "foodsewa",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#tasks have to be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "foodsewa.tasks.expire",
    "foodsewa.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "expire-carts": {
        "task": "foodsewa.tasks.expire.expire_carts_task",
        "schedule": CART_CLEANUP_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
