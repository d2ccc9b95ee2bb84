# foodsewa/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from foodsewa.domain.enums import FavoriteType, OrderType, PaymentMethod


class StrictIn(BaseModel):
    """Base for request bodies: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


# =====================================================
# CART
# =====================================================
class CustomizationIn(StrictIn):
    name: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)
    additional_price: float = Field(0, ge=0)


class AddCartItemIn(StrictIn):
    """Schema for adding a menu item to the cart."""

    restaurant_id: str = Field(..., min_length=1)
    menu_item_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=10, description="Quantity must be between 1 and 10")
    customizations: List[CustomizationIn] = Field(default_factory=list)
    special_instructions: str = Field("", max_length=200)


CartAction = Literal["update-quantity", "remove-item", "apply-coupon", "remove-coupon", "clear-cart"]


class UpdateCartIn(StrictIn):
    action: CartAction
    item_index: Optional[int] = None
    quantity: Optional[int] = None
    coupon_code: Optional[str] = None

    @model_validator(mode="after")
    def _check_action_fields(self):
        if self.action == "update-quantity" and (self.item_index is None or self.quantity is None):
            raise ValueError("Item index and quantity are required")
        if self.action == "remove-item" and self.item_index is None:
            raise ValueError("Item index is required")
        if self.action == "apply-coupon" and not (self.coupon_code or "").strip():
            raise ValueError("Coupon code is required")
        return self


class CustomizationOut(BaseModel):
    name: str
    value: str
    additional_price: float = 0


class CartItemOut(BaseModel):
    menu_item_id: str
    restaurant_id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    quantity: int
    image: str
    category: str
    customizations: List[CustomizationOut] = []
    special_instructions: str = ""
    is_available: bool
    preparation_time: int

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    id: int
    user_id: int
    restaurant_id: Optional[str] = None
    restaurant_name: Optional[str] = None
    items: List[CartItemOut]
    delivery_fee: Decimal
    minimum_order_amount: Decimal
    coupon_code: Optional[str] = None
    discount: Decimal
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CartSummaryOut(BaseModel):
    item_count: int
    subtotal: Decimal
    discount: Decimal
    delivery_fee: Decimal
    total: Decimal
    restaurant: dict
    estimated_delivery_time: int
    meets_minimum_order: bool


# =====================================================
# FAVORITES
# =====================================================
class DishDetailsIn(StrictIn):
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    image: Optional[str] = None
    category: Optional[str] = None


class AddFavoriteIn(StrictIn):
    restaurant_id: str = Field(..., min_length=1)
    type: FavoriteType
    menu_item_id: Optional[str] = None
    dish_details: Optional[DishDetailsIn] = None

    @model_validator(mode="after")
    def _dish_needs_item(self):
        if self.type == FavoriteType.DISH and (not self.menu_item_id or self.dish_details is None):
            raise ValueError("Menu item ID and dish details are required for dish favorites")
        return self


class RestaurantFavoriteIn(StrictIn):
    restaurant_id: str = Field(..., min_length=1)


class DishFavoriteIn(StrictIn):
    restaurant_id: str = Field(..., min_length=1)
    menu_item_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    image: Optional[str] = None
    category: Optional[str] = None


class FavoriteQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(12, ge=1, le=50)
    type: Literal["all", "restaurant", "dish"] = "all"
    search: str = ""
    category: str = ""
    sort_by: Literal["added_at", "dish_name", "dish_price"] = "added_at"
    sort_order: Literal["asc", "desc"] = "desc"


class FavoriteOut(BaseModel):
    id: int
    type: str
    restaurant_id: str
    menu_item_id: Optional[str] = None
    dish: Optional[dict] = None
    added_at: datetime


# =====================================================
# ORDERS
# =====================================================
class DeliveryAddressIn(StrictIn):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    apartment_number: Optional[str] = None
    delivery_instructions: Optional[str] = Field(None, max_length=200)


class CreateOrderIn(StrictIn):
    order_type: OrderType
    payment_method: PaymentMethod
    delivery_address: Optional[DeliveryAddressIn] = None
    special_instructions: str = Field("", max_length=500)
    tip: Decimal = Field(Decimal("0"), ge=0)

    @model_validator(mode="after")
    def _delivery_needs_address(self):
        if self.order_type == OrderType.DELIVERY and self.delivery_address is None:
            raise ValueError("Complete delivery address is required for delivery orders")
        return self


class CancelOrderIn(StrictIn):
    action: Literal["cancel"]
    reason: Optional[str] = Field(None, max_length=300)


RestaurantOrderAction = Literal[
    "confirm", "start-preparing", "mark-ready", "out-for-delivery", "deliver", "cancel"
]


class RestaurantOrderActionIn(StrictIn):
    action: RestaurantOrderAction
    reason: Optional[str] = Field(None, max_length=300)


class OrderQuery(BaseModel):
    status: str = ""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=50)
    sort_by: Literal["created_at", "total"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("status")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class OrderItemOut(BaseModel):
    menu_item_id: str
    name: str
    price: Decimal
    quantity: int
    special_instructions: str = ""
    customizations: List[CustomizationOut] = []

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    order_number: str
    customer_id: int
    restaurant_id: str
    restaurant_name: Optional[str] = None
    status: str
    order_type: str
    delivery_address: Optional[dict] = None
    items: List[OrderItemOut]
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    service_fee: Decimal
    discount: Decimal
    tip: Decimal
    total: Decimal
    payment_method: str
    payment_status: str
    coupon_code: Optional[str] = None
    special_instructions: str = ""
    estimated_delivery_time: Optional[datetime] = None
    estimated_pickup_time: Optional[datetime] = None
    tracking_history: List[dict] = []
    cancellation: Optional[dict] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# DISCOUNTS
# =====================================================
class DiscountItemIn(BaseModel):
    name: str
    price: Decimal = Field(..., ge=0)


class ValidateDiscountIn(StrictIn):
    code: str = Field(..., min_length=1)
    restaurant_id: str = Field(..., min_length=1)
    order_amount: Decimal = Field(..., gt=0)
    delivery_fee: Decimal = Field(Decimal("0"), ge=0)
    items: List[DiscountItemIn] = Field(default_factory=list)


# =====================================================
# USERS
# =====================================================
class UserRead(BaseModel):
    """Schema for a user (response)."""

    id: int
    name: str
    email: Optional[str] = None
    role: str

    model_config = ConfigDict(from_attributes=True)
