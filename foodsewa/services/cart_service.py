# foodsewa/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from foodsewa.data.models import CartModel
from foodsewa.domain.errors import NotFoundError
from foodsewa.domain.schemas import AddCartItemIn, UpdateCartIn, CartOut, CartSummaryOut
from foodsewa.repos.cart_repo import CartRepo
from foodsewa.services.discount_service import DiscountService
from foodsewa.services.restaurant_client import RestaurantClient, find_menu_item, is_orderable
from foodsewa.utils.logging import get_logger

logger = get_logger(__name__)

#minutes added on top of kitchen time for the ride
DELIVERY_BUFFER_MINUTES = 20


class CartService:
    """
    Use cases of the cart domain.
    queries (get, validate_availability) only read,
    commands (add, update, clear) change the user's single active cart.
    """

    def __init__(self, db: Session, restaurant_client: RestaurantClient):
        self.db = db
        self.repo = CartRepo(db)
        self.restaurant_client = restaurant_client

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.get_or_create_cart(user_id)
        payload = self._payload(cart)
        payload["validation"] = self.validate_availability(cart)
        return payload

    def get_or_create_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_active_cart_by_user(user_id)
        if cart:
            return cart

        created = self.repo.create_cart(CartModel.new(user_id))
        logger.info(f"Created cart {created.id} for user {user_id}")
        return created

    def validate_availability(self, cart: CartModel) -> Dict[str, Any]:
        """
        Compare the cart lines with the current menu. Never mutates the cart,
        the caller decides whether to block checkout.
        """
        if not cart.restaurant_id:
            return {"is_valid": True, "unavailable_items": []}

        restaurant = self.restaurant_client.fetch_restaurant(cart.restaurant_id)
        if not restaurant:
            return {"is_valid": False, "unavailable_items": [], "error": "Restaurant not found"}

        unavailable = []
        for index, line in enumerate(cart.items):
            menu_item = find_menu_item(restaurant, line.menu_item_id)

            if not menu_item:
                unavailable.append(
                    {"index": index, "name": line.name, "reason": "Item no longer available"}
                )
            elif not menu_item.get("is_available", True):
                unavailable.append(
                    {"index": index, "name": line.name, "reason": "Item temporarily unavailable"}
                )
            elif Decimal(str(menu_item["price"])) != Decimal(str(line.price)):
                unavailable.append(
                    {
                        "index": index,
                        "name": line.name,
                        "reason": "Price changed",
                        "current_price": Decimal(str(menu_item["price"])),
                    }
                )

        return {"is_valid": not unavailable, "unavailable_items": unavailable}

    #commands
    def add_item(self, user_id: int, payload: AddCartItemIn) -> Dict[str, Any]:
        restaurant = self.restaurant_client.fetch_restaurant(payload.restaurant_id)
        if not is_orderable(restaurant):
            raise NotFoundError("Restaurant not found or not available")

        menu_item = find_menu_item(restaurant, payload.menu_item_id)
        if not menu_item or not menu_item.get("is_available", True):
            raise NotFoundError("Menu item not found or not available")

        cart = self.get_or_create_cart(user_id)

        try:
            cart.add_item(
                {
                    "menu_item_id": payload.menu_item_id,
                    "restaurant_id": payload.restaurant_id,
                    "restaurant_name": restaurant["name"],
                    "name": menu_item["name"],
                    "description": menu_item.get("description"),
                    "price": menu_item["price"],
                    "quantity": payload.quantity,
                    "image": menu_item.get("image"),
                    "category": menu_item.get("category") or "main",
                    "customizations": [c.model_dump() for c in payload.customizations],
                    "special_instructions": payload.special_instructions,
                    "is_available": menu_item.get("is_available", True),
                    "preparation_time": menu_item.get("preparation_time"),
                }
            )
        except ValueError:
            self.repo.rollback()
            logger.warning(
                f"Rejected item {payload.menu_item_id} from restaurant {payload.restaurant_id} "
                f"for cart of user {user_id}"
            )
            raise

        cart.delivery_fee = Decimal(str(restaurant.get("delivery_fee") or 0))
        cart.minimum_order_amount = Decimal(str(restaurant.get("minimum_order") or 0))
        delivery_min = (restaurant.get("delivery_time") or {}).get("min", 0)
        cart.estimated_delivery_time = max(
            delivery_min,
            cart.estimated_prep_time + DELIVERY_BUFFER_MINUTES,
        )

        self.repo.save(cart)

        logger.info(
            f"Added {payload.quantity} x {payload.menu_item_id} to cart {cart.id} "
            f"(restaurant {cart.restaurant_id})"
        )
        return self._payload(cart)

    def update_cart(self, user_id: int, payload: UpdateCartIn) -> Dict[str, Any]:
        cart = self._require_cart(user_id)

        try:
            if payload.action == "update-quantity":
                cart.update_item_quantity(payload.item_index, payload.quantity)
                message = "Item quantity updated successfully"
            elif payload.action == "remove-item":
                cart.remove_item(payload.item_index)
                message = "Item removed from cart successfully"
            elif payload.action == "apply-coupon":
                self._apply_coupon(user_id, cart, payload.coupon_code.strip())
                message = "Coupon applied successfully"
            elif payload.action == "remove-coupon":
                cart.remove_coupon()
                message = "Coupon removed successfully"
            else:
                cart.clear_cart()
                message = "Cart cleared successfully"
        except (ValueError, LookupError):
            self.repo.rollback()
            raise

        self.repo.save(cart)

        logger.info(f"Cart {cart.id}: {payload.action}")
        result = self._payload(cart)
        result["message"] = message
        return result

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._require_cart(user_id)
        cart.clear_cart()
        self.repo.save(cart)

        logger.info(f"Cart {cart.id} cleared")
        return self._payload(cart)

    # =====================================================
    # helpers
    # =====================================================
    def _require_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_active_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    def _apply_coupon(self, user_id: int, cart: CartModel, code: str) -> None:
        if not cart.items:
            raise ValueError("Cannot apply a coupon to an empty cart")

        result = DiscountService(self.db).validate(
            user_id=user_id,
            code=code,
            restaurant_id=cart.restaurant_id,
            order_amount=cart.subtotal,
            items=[{"name": line.name, "price": line.price} for line in cart.items],
            delivery_fee=Decimal(str(cart.delivery_fee or 0)),
        )
        cart.apply_coupon(result["discount"]["code"], result["discount"]["discount_amount"])

    @staticmethod
    def _payload(cart: CartModel) -> Dict[str, Any]:
        return {
            "cart": CartOut.model_validate(cart),
            "summary": CartSummaryOut(**cart.get_summary()),
        }
