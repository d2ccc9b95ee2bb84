#foodsewa/data/models/cart.py
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Boolean
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from foodsewa.data.database import Base
from foodsewa.data.models.cart_item import (
    CartItemModel,
    MIN_QUANTITY,
    MAX_QUANTITY,
    DEFAULT_IMAGE,
    DEFAULT_PREPARATION_TIME,
)
from foodsewa.domain.errors import CrossRestaurantError, QuantityError, InvalidItemIndexError
from foodsewa.utils.settings import CART_TTL_SECONDS
from foodsewa.utils.timeutil import utcnow

ZERO = Decimal("0.00")
DEFAULT_DELIVERY_TIME = 30


class CartModel(Base):
    """
    Per-user basket tied to a single restaurant.

    The aggregate methods below only touch in-memory state; the caller owns the
    session and commits. There is no stored total, summaries are computed on read.
    """

    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    restaurant_id = Column(String(64), nullable=True, index=True)
    restaurant_name = Column(String(100), nullable=True)

    delivery_fee = Column(Numeric(10, 2), nullable=False, default=ZERO)
    minimum_order_amount = Column(Numeric(10, 2), nullable=False, default=ZERO)
    estimated_delivery_time = Column(Integer, nullable=False, default=DEFAULT_DELIVERY_TIME)

    coupon_code = Column(String(50), nullable=True)
    discount = Column(Numeric(10, 2), nullable=False, default=ZERO)

    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    last_updated = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        order_by="CartItemModel.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )

    @classmethod
    def new(cls, user_id: int) -> "CartModel":
        now = utcnow()
        return cls(
            user_id=user_id,
            items=[],
            delivery_fee=ZERO,
            minimum_order_amount=ZERO,
            estimated_delivery_time=DEFAULT_DELIVERY_TIME,
            discount=ZERO,
            is_active=True,
            last_updated=now,
            expires_at=now + timedelta(seconds=CART_TTL_SECONDS),
            created_at=now,
        )

    # =====================================================
    # COMMANDS
    # =====================================================
    def add_item(self, item: dict) -> CartItemModel:
        """
        Merge `item` into the cart.

        `item` carries the menu snapshot: menu_item_id, restaurant_id,
        restaurant_name, name, price, category and optionally quantity,
        description, image, customizations, special_instructions,
        is_available, preparation_time.
        """
        restaurant_id = str(item["restaurant_id"])
        quantity = item.get("quantity", 1)

        if self.restaurant_id and self.restaurant_id != restaurant_id:
            raise CrossRestaurantError(
                "Cannot add items from different restaurants. Please clear your cart first."
            )

        _check_quantity(quantity)

        customizations = item.get("customizations") or []
        special_instructions = (item.get("special_instructions") or "").strip()

        existing = next(
            (
                line
                for line in self.items
                if line.same_line_as(item["menu_item_id"], customizations, special_instructions)
            ),
            None,
        )

        if existing:
            merged = existing.quantity + quantity
            if merged > MAX_QUANTITY:
                raise QuantityError(f"Maximum {MAX_QUANTITY} items allowed per menu item")
            existing.quantity = merged
            line = existing
        else:
            line = CartItemModel(
                menu_item_id=str(item["menu_item_id"]),
                restaurant_id=restaurant_id,
                name=item["name"],
                description=item.get("description"),
                price=Decimal(str(item["price"])),
                quantity=quantity,
                image=item.get("image") or DEFAULT_IMAGE,
                category=item["category"],
                customizations=customizations,
                special_instructions=special_instructions,
                is_available=item.get("is_available", True) is not False,
                preparation_time=item.get("preparation_time") or DEFAULT_PREPARATION_TIME,
            )
            self.items.append(line)

        #first item decides the restaurant
        if not self.restaurant_id:
            self.restaurant_id = restaurant_id
            self.restaurant_name = item.get("restaurant_name")

        self.touch()
        return line

    def update_item_quantity(self, index: int, quantity: int) -> None:
        self._check_index(index)
        _check_quantity(quantity)

        self.items[index].quantity = quantity
        self.touch()

    def remove_item(self, index: int) -> None:
        self._check_index(index)

        self.items.pop(index)

        if not self.items:
            self._reset_restaurant()

        self.touch()

    def apply_coupon(self, coupon_code: str, discount_amount) -> None:
        self.coupon_code = coupon_code
        self.discount = Decimal(str(discount_amount))
        self.touch()

    def remove_coupon(self) -> None:
        self.coupon_code = None
        self.discount = ZERO
        self.touch()

    def clear_cart(self) -> None:
        self.items = []
        self._reset_restaurant()
        self.touch()

    def touch(self) -> None:
        now = utcnow()
        self.last_updated = now
        self.expires_at = now + timedelta(seconds=CART_TTL_SECONDS)

    # =====================================================
    # QUERIES
    # =====================================================
    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.items), ZERO)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def estimated_prep_time(self) -> int:
        if not self.items:
            return 0
        return max(line.preparation_time or DEFAULT_PREPARATION_TIME for line in self.items)

    def meets_minimum_order(self) -> bool:
        return self.subtotal >= Decimal(str(self.minimum_order_amount or 0))

    def get_summary(self) -> dict:
        subtotal = self.subtotal
        discount = Decimal(str(self.discount or 0))
        delivery_fee = Decimal(str(self.delivery_fee or 0))

        return {
            "item_count": self.item_count,
            "subtotal": subtotal,
            "discount": discount,
            "delivery_fee": delivery_fee,
            "total": max(subtotal + delivery_fee - discount, ZERO),
            "restaurant": {"id": self.restaurant_id, "name": self.restaurant_name},
            "estimated_delivery_time": self.estimated_delivery_time,
            "meets_minimum_order": self.meets_minimum_order(),
        }

    # =====================================================
    # helpers
    # =====================================================
    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self.items):
            raise InvalidItemIndexError("Invalid item index")

    def _reset_restaurant(self) -> None:
        self.restaurant_id = None
        self.restaurant_name = None
        self.coupon_code = None
        self.discount = ZERO


def _check_quantity(quantity: int) -> None:
    if quantity < MIN_QUANTITY:
        raise QuantityError(f"Quantity must be at least {MIN_QUANTITY}")
    if quantity > MAX_QUANTITY:
        raise QuantityError(f"Maximum {MAX_QUANTITY} items allowed per menu item")
