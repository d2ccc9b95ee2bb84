# foodsewa/services/order_service.py
import math
import random
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from sqlalchemy.orm import Session

from foodsewa.data.models import OrderModel, OrderItemModel, UserModel
from foodsewa.data.models.order import TRANSITIONS
from foodsewa.domain.enums import OrderStatus, OrderType, UserRole
from foodsewa.domain.errors import (
    NotFoundError,
    OrderStateError,
    UnavailableItemsError,
    ValidationError,
)
from foodsewa.domain.schemas import CreateOrderIn, OrderQuery, OrderOut
from foodsewa.repos.cart_repo import CartRepo
from foodsewa.repos.order_repo import OrderRepo
from foodsewa.services.cart_service import CartService
from foodsewa.services.notification_service import NotificationService
from foodsewa.services.restaurant_client import RestaurantClient, is_orderable
from foodsewa.utils.settings import TAX_RATE, SERVICE_FEE_RATE
from foodsewa.utils.logging import get_logger
from foodsewa.utils.timeutil import utcnow

logger = get_logger(__name__)

CENT = Decimal("0.01")
PICKUP_BUFFER_MINUTES = 5

_ACTION_NOTIFICATIONS = {
    "confirm": "order-confirmed",
    "start-preparing": "order-preparing",
    "mark-ready": "order-ready",
    "out-for-delivery": "order-out-for-delivery",
    "deliver": "order-delivered",
    "cancel": "order-cancelled",
}


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderService:
    """
    Orders are created from a cart snapshot and then only move forward:
    pending -> confirmed -> preparing -> ready -> (out-for-delivery) -> delivered,
    with cancellation allowed in the early states.
    """

    def __init__(self, db: Session, restaurant_client: RestaurantClient):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.restaurant_client = restaurant_client
        self.notification_service = NotificationService()

    def create_order_from_cart(self, user_id: int, payload: CreateOrderIn) -> Dict[str, Any]:
        """
        Checkout.

        1. cart must be non-empty, available and over the minimum order
        2. restaurant must still be orderable
        3. order insert and cart clear go in one transaction
        4. notification is queued after commit
        """
        cart = self.carts.get_active_cart_by_user(user_id)
        if not cart or not cart.items:
            raise ValidationError("Cart is empty")

        validation = CartService(self.db, self.restaurant_client).validate_availability(cart)
        if not validation["is_valid"]:
            if validation.get("error"):
                raise ValidationError("Restaurant is not available")
            raise UnavailableItemsError(
                "Some items in your cart are no longer available",
                validation["unavailable_items"],
            )

        if not cart.meets_minimum_order():
            raise ValidationError(
                f"Order does not meet the minimum order amount of "
                f"${Decimal(str(cart.minimum_order_amount)):.2f}"
            )

        restaurant = self.restaurant_client.fetch_restaurant(cart.restaurant_id)
        if not is_orderable(restaurant):
            raise ValidationError("Restaurant is not available")

        is_delivery = payload.order_type == OrderType.DELIVERY

        subtotal = _money(cart.subtotal)
        tax = _money(subtotal * TAX_RATE)
        service_fee = _money(subtotal * SERVICE_FEE_RATE)
        delivery_fee = _money(cart.delivery_fee) if is_delivery else _money(0)
        discount = _money(cart.discount or 0)
        tip = _money(payload.tip)
        total = max(subtotal + tax + delivery_fee + service_fee + tip - discount, _money(0))

        now = utcnow()
        prep_time = cart.estimated_prep_time
        estimated_delivery = estimated_pickup = None
        if is_delivery:
            delivery_min = (restaurant.get("delivery_time") or {}).get("min", 0)
            estimated_delivery = now + timedelta(minutes=prep_time + delivery_min)
        else:
            estimated_pickup = now + timedelta(minutes=prep_time + PICKUP_BUFFER_MINUTES)

        order = OrderModel(
            order_number=self._new_order_number(),
            customer_id=user_id,
            restaurant_id=cart.restaurant_id,
            restaurant_name=restaurant.get("name") or cart.restaurant_name,
            status=OrderStatus.PENDING.value,
            order_type=payload.order_type.value,
            delivery_address=payload.delivery_address.model_dump() if is_delivery else None,
            subtotal=subtotal,
            tax=tax,
            delivery_fee=delivery_fee,
            service_fee=service_fee,
            discount=discount,
            tip=tip,
            total=total,
            payment_method=payload.payment_method.value,
            payment_status="pending",
            coupon_code=cart.coupon_code,
            special_instructions=payload.special_instructions,
            preparation_time=prep_time,
            estimated_delivery_time=estimated_delivery,
            estimated_pickup_time=estimated_pickup,
            tracking_history=[],
            created_at=now,
            items=[
                OrderItemModel(
                    menu_item_id=line.menu_item_id,
                    name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                    special_instructions=line.special_instructions or "",
                    customizations=list(line.customizations or []),
                )
                for line in cart.items
            ],
        )
        order.add_tracking(OrderStatus.PENDING.value, "Order pending", "System")

        self.repo.add(order)
        cart.clear_cart()

        try:
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            logger.exception(f"Checkout failed for user {user_id}")
            raise

        logger.info(f"Order {order.order_number} created from cart {cart.id}, total {total}")

        self.notification_service.send_order_notification(
            user_id, order.id, order.order_number, "order-placed"
        )

        return {
            "order": OrderOut.model_validate(order),
            "redirect_url": f"/user/orderconfirmation/{order.id}",
        }

    #query
    def list_orders(self, user_id: int, query: OrderQuery) -> Dict[str, Any]:
        statuses = [s.strip() for s in query.status.split(",") if s.strip()]
        sort_column = OrderModel.total if query.sort_by == "total" else OrderModel.created_at

        rows, total = self.repo.list_for_customer(
            customer_id=user_id,
            statuses=statuses,
            sort_column=sort_column,
            descending=query.sort_order == "desc",
            offset=(query.page - 1) * query.limit,
            limit=query.limit,
        )
        total_pages = math.ceil(total / query.limit) if total else 0

        stats = self.repo.customer_stats(user_id)
        stats["status_counts"] = {
            s.value: stats["status_counts"].get(s.value, 0) for s in OrderStatus
        }

        return {
            "orders": [OrderOut.model_validate(o) for o in rows],
            "pagination": {
                "current_page": query.page,
                "total_pages": total_pages,
                "total_orders": total,
                "has_next_page": query.page < total_pages,
                "has_prev_page": query.page > 1,
            },
            "stats": stats,
        }

    def get_order(self, user_id: int, order_id: int) -> Dict[str, Any]:
        order = self._customer_order(user_id, order_id)
        return {
            "order": OrderOut.model_validate(order),
            "tracking_history": order.tracking_history or [],
            "can_cancel": order.can_cancel(),
        }

    #commands
    def cancel_order(self, user_id: int, order_id: int, reason: str | None = None) -> Dict[str, Any]:
        order = self._customer_order(user_id, order_id)

        if not order.can_cancel():
            raise OrderStateError("Order cannot be cancelled at this stage")

        reason = reason or "Customer request"
        self._cancel(order, reason, cancelled_by="customer", location="Customer App")
        self.repo.commit()

        logger.info(f"Order {order.order_number} cancelled by customer {user_id}")
        self.notification_service.send_order_notification(
            user_id, order.id, order.order_number, "order-cancelled"
        )
        return {"order": OrderOut.model_validate(order)}

    def advance_order(
        self,
        actor: UserModel,
        order_id: int,
        action: str,
        reason: str | None = None,
    ) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        self._check_restaurant_access(actor, order)

        sources, target = TRANSITIONS[action]
        if order.status not in sources:
            raise OrderStateError(f"Cannot {action} an order that is {order.status}")

        if action == "out-for-delivery" and order.order_type != OrderType.DELIVERY.value:
            raise OrderStateError("Only delivery orders can go out for delivery")

        if action == "cancel":
            self._cancel(order, reason or "Restaurant request", cancelled_by="restaurant", location="Restaurant")
        else:
            order.status = target
            if target == OrderStatus.DELIVERED.value:
                order.actual_delivery_time = utcnow()
            order.add_tracking(target, f"Order {target}", "Restaurant")

        self.repo.commit()

        logger.info(f"Order {order.order_number}: {action} -> {order.status}")
        self.notification_service.send_order_notification(
            order.customer_id, order.id, order.order_number, _ACTION_NOTIFICATIONS[action]
        )
        return {"order": OrderOut.model_validate(order)}

    # =====================================================
    # helpers
    # =====================================================
    def _customer_order(self, user_id: int, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")
        if order.customer_id != user_id:
            raise PermissionError("Access denied to this order")
        return order

    def _check_restaurant_access(self, actor: UserModel, order: OrderModel) -> None:
        if actor.role == UserRole.ADMIN.value:
            return

        restaurant = self.restaurant_client.fetch_restaurant(order.restaurant_id)
        if not restaurant or restaurant.get("owner_id") != actor.id:
            raise PermissionError("Access denied to this order")

    def _cancel(self, order: OrderModel, reason: str, cancelled_by: str, location: str) -> None:
        order.status = OrderStatus.CANCELLED.value
        order.cancellation = {
            "reason": reason,
            "cancelled_by": cancelled_by,
            "cancelled_at": utcnow().isoformat(),
            "refund_amount": float(order.total),
        }
        order.add_tracking(
            OrderStatus.CANCELLED.value,
            f"Order cancelled by {cancelled_by}. Reason: {reason}",
            location,
        )

    def _new_order_number(self) -> str:
        while True:
            stamp = str(int(utcnow().timestamp() * 1000))[-6:]
            number = f"FS{stamp}{random.randint(0, 999):03d}"
            if not self.repo.order_number_exists(number):
                return number
