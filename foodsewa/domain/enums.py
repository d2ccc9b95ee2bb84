# foodsewa/domain/enums.py
from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    RESTAURANT = "restaurant"
    ADMIN = "admin"


class FavoriteType(str, Enum):
    RESTAURANT = "restaurant"
    DISH = "dish"


class FavoriteState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderType(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    DIGITAL_WALLET = "digital-wallet"
    ONLINE = "online"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    BOGO = "bogo"
    FREE_DELIVERY = "free_delivery"


class CustomerSegment(str, Enum):
    ALL = "all"
    NEW = "new"
    RETURNING = "returning"
    VIP = "vip"
