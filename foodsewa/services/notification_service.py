# foodsewa/services/notification_service.py
from kombu.exceptions import OperationalError

from foodsewa.celery_worker import celery_app
from foodsewa.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_MESSAGES = {
    "order-placed": "Your order #{order_number} has been placed and is awaiting confirmation.",
    "order-confirmed": "Your order #{order_number} has been confirmed by the restaurant.",
    "order-preparing": "Your order #{order_number} is being prepared.",
    "order-ready": "Your order #{order_number} is ready.",
    "order-out-for-delivery": "Your order #{order_number} is on its way.",
    "order-delivered": "Your order #{order_number} has been delivered. Enjoy!",
    "order-cancelled": "Your order #{order_number} has been cancelled.",
}


class NotificationService:
    """
    Customer notifications about their orders.
    Sending goes through Celery so checkout never waits on it. Called after the
    order is committed, so a broker outage is logged and never fails the request.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int, order_number: str, kind: str) -> bool:
        try:
            send_order_notification_task.delay(user_id, order_id, order_number, kind)
        except OperationalError:
            logger.exception(f"Could not queue {kind} notification for order {order_number}")
            return False
        return True


@celery_app.task(name="foodsewa.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, order_number: str, kind: str):
    """
    Only logs for now, a real channel (email / SMS / push) plugs in here.
    """
    template = ORDER_MESSAGES.get(kind, "Your order #{order_number} was updated.")
    message = template.format(order_number=order_number)

    logger.info(f"[NOTIFICATION] User {user_id}: {message}")

    return {"user_id": user_id, "order_id": order_id, "kind": kind, "status": "sent"}
