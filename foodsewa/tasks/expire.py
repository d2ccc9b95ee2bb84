# foodsewa/tasks/expire.py
from foodsewa.celery_worker import celery_app
from foodsewa.data.database import SessionLocal
from foodsewa.repos.cart_repo import CartRepo
from foodsewa.utils.logging import get_logger
from foodsewa.utils.timeutil import utcnow

logger = get_logger(__name__)


def expire_carts(db) -> int:
    repo = CartRepo(db)
    carts = repo.get_expired_carts(utcnow())

    logger.info(f"Found {len(carts)} carts to expire")

    for cart in carts:
        repo.delete_cart(cart)
    repo.commit()

    return len(carts)


@celery_app.task(name="foodsewa.tasks.expire.expire_carts_task")
def expire_carts_task():
    logger.info("Expire carts task started")

    db = SessionLocal()
    try:
        return expire_carts(db)
    finally:
        db.close()
