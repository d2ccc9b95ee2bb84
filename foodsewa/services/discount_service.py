# foodsewa/services/discount_service.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from foodsewa.data.models import DiscountModel
from foodsewa.domain.enums import CustomerSegment, DiscountType, OrderStatus
from foodsewa.domain.errors import DiscountError, NotFoundError
from foodsewa.repos.discount_repo import DiscountRepo
from foodsewa.repos.order_repo import OrderRepo
from foodsewa.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
VIP_ORDER_COUNT = 10

#orders that count as "used the code"
_REDEEMED_STATUSES = [
    OrderStatus.CONFIRMED.value,
    OrderStatus.PREPARING.value,
    OrderStatus.READY.value,
    OrderStatus.DELIVERED.value,
]


class DiscountService:
    """
    Coupon validation. Applying the resulting amount to a cart is the cart's job,
    this service only decides whether a code is usable and how much it is worth.
    """

    def __init__(self, db: Session):
        self.repo = DiscountRepo(db)
        self.orders = OrderRepo(db)

    def validate(
        self,
        user_id: int,
        code: str,
        restaurant_id: str,
        order_amount: Decimal,
        items: List[Dict[str, Any]] | None = None,
        delivery_fee: Decimal = ZERO,
    ) -> Dict[str, Any]:
        items = items or []
        order_amount = Decimal(str(order_amount))

        discount = self.repo.get_active_by_code(code, restaurant_id)
        if not discount:
            logger.warning(f"Discount code {code.upper()} not found for restaurant {restaurant_id}")
            raise NotFoundError("Invalid discount code")

        self._check_dates(discount)
        self._check_usage(discount)

        min_amount = Decimal(str(discount.min_order_amount or 0))
        if order_amount < min_amount:
            raise DiscountError(f"Minimum order amount of ${min_amount:.2f} required")

        self._check_segment(discount, user_id)
        self._check_user_limit(discount, user_id)
        self._check_applicable_items(discount, items)

        amount = self.compute_amount(discount, order_amount, items, delivery_fee)

        logger.info(f"Discount {discount.code} valid for user {user_id}: -{amount}")

        return {
            "discount": {
                "id": discount.id,
                "code": discount.code,
                "name": discount.name,
                "type": discount.type,
                "value": discount.value,
                "discount_amount": amount,
            },
            "final_amount": (order_amount - amount).quantize(CENT, rounding=ROUND_HALF_UP),
        }

    @staticmethod
    def compute_amount(
        discount: DiscountModel,
        order_amount: Decimal,
        items: List[Dict[str, Any]],
        delivery_fee: Decimal = ZERO,
    ) -> Decimal:
        value = Decimal(str(discount.value))
        max_discount = Decimal(str(discount.max_discount or 0))

        if discount.type == DiscountType.PERCENTAGE.value:
            amount = order_amount * value / 100
            if max_discount > 0:
                amount = min(amount, max_discount)
        elif discount.type == DiscountType.FIXED.value:
            amount = value
        elif discount.type == DiscountType.FREE_DELIVERY.value:
            amount = Decimal(str(delivery_fee))
        elif discount.type == DiscountType.BOGO.value:
            amount = ZERO
            if len(items) >= 2:
                cheapest = min(Decimal(str(i["price"])) for i in items)
                amount = cheapest * value / 100
        else:
            amount = ZERO

        amount = min(amount, order_amount)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)

    # =====================================================
    # rules
    # =====================================================
    def _check_dates(self, discount: DiscountModel) -> None:
        status = discount.status
        if status == "scheduled":
            raise DiscountError("Discount is not yet active")
        if status == "expired":
            raise DiscountError("Discount has expired")

    def _check_usage(self, discount: DiscountModel) -> None:
        if discount.usage_limit > 0 and discount.used_count >= discount.usage_limit:
            raise DiscountError("Discount usage limit reached")

    def _check_segment(self, discount: DiscountModel, user_id: int) -> None:
        segment = discount.customer_segment
        if segment == CustomerSegment.ALL.value:
            return

        delivered = self.orders.count_delivered(user_id)

        if segment == CustomerSegment.NEW.value and delivered > 0:
            raise DiscountError("This discount is only for new customers")
        if segment == CustomerSegment.RETURNING.value and delivered == 0:
            raise DiscountError("This discount is only for returning customers")
        if segment == CustomerSegment.VIP.value and delivered < VIP_ORDER_COUNT:
            raise DiscountError("This discount is only for VIP customers")

    def _check_user_limit(self, discount: DiscountModel, user_id: int) -> None:
        if discount.user_limit <= 0:
            return
        used = self.orders.count_coupon_uses(user_id, discount.code, _REDEEMED_STATUSES)
        if used >= discount.user_limit:
            raise DiscountError("You have reached the usage limit for this discount")

    def _check_applicable_items(self, discount: DiscountModel, items: List[Dict[str, Any]]) -> None:
        applicable = [a.lower() for a in (discount.applicable_items or [])]
        if not applicable or "all" in applicable:
            return

        matches = [
            i for i in items
            if any(fragment in i["name"].lower() for fragment in applicable)
        ]
        if not matches:
            raise DiscountError("This discount is not applicable to your selected items")
