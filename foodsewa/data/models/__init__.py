#every model is imported here once so Base.metadata knows all tables

from foodsewa.data.models.user import UserModel
from foodsewa.data.models.cart import CartModel
from foodsewa.data.models.cart_item import CartItemModel
from foodsewa.data.models.favorite import FavoriteModel
from foodsewa.data.models.order import OrderModel
from foodsewa.data.models.order_item import OrderItemModel
from foodsewa.data.models.discount import DiscountModel

__all__ = [
    "UserModel",
    "CartModel",
    "CartItemModel",
    "FavoriteModel",
    "OrderModel",
    "OrderItemModel",
    "DiscountModel",
]
