# foodsewa/services/favorite_service.py
import math
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from foodsewa.data.models import FavoriteModel
from foodsewa.domain.enums import FavoriteState, FavoriteType
from foodsewa.domain.errors import AlreadyFavoriteError, NotFoundError, ValidationError
from foodsewa.domain.schemas import AddFavoriteIn, FavoriteQuery, FavoriteOut
from foodsewa.repos.favorite_repo import FavoriteRepo
from foodsewa.services.restaurant_client import RestaurantClient, find_menu_item
from foodsewa.utils.logging import get_logger

logger = get_logger(__name__)

_SORT_COLUMNS = {
    "added_at": FavoriteModel.added_at,
    "dish_name": FavoriteModel.dish_name,
    "dish_price": FavoriteModel.dish_price,
}


def _label(type: str) -> str:
    return "Dish" if type == FavoriteType.DISH.value else "Restaurant"


class FavoriteService:
    """
    Favorites with soft delete.

    One row per (user, restaurant) for restaurant favorites and per
    (user, restaurant, menu item) for dish favorites. Removing flips the row to
    inactive, adding again reactivates the same row.
    """

    def __init__(self, db: Session, restaurant_client: RestaurantClient):
        self.repo = FavoriteRepo(db)
        self.restaurant_client = restaurant_client

    def add_favorite(self, user_id: int, payload: AddFavoriteIn) -> Dict[str, Any]:
        type = payload.type.value
        menu_item_id = payload.menu_item_id if type == FavoriteType.DISH.value else None

        restaurant = self.restaurant_client.fetch_restaurant(payload.restaurant_id)
        if not restaurant or not restaurant.get("is_active"):
            raise NotFoundError("Restaurant not found")

        if type == FavoriteType.DISH.value and not find_menu_item(restaurant, menu_item_id):
            raise NotFoundError("Menu item not found")

        dish_details = payload.dish_details.model_dump() if payload.dish_details else None

        existing = self.repo.find(user_id, payload.restaurant_id, type, menu_item_id)

        if existing and existing.is_active:
            raise AlreadyFavoriteError(f"{_label(type)} is already in favorites")

        try:
            if existing:
                existing.reactivate(dish_details)
                favorite = self.repo.save(existing)
                logger.info(f"Reactivated favorite {favorite.id} for user {user_id}")
            else:
                favorite = FavoriteModel(
                    user_id=user_id,
                    restaurant_id=payload.restaurant_id,
                    menu_item_id=menu_item_id,
                    type=type,
                    state=FavoriteState.ACTIVE.value,
                )
                if dish_details:
                    favorite.set_dish_details(dish_details)
                favorite = self.repo.add(favorite)
                logger.info(f"Created favorite {favorite.id} for user {user_id}")
        except IntegrityError:
            #concurrent insert of the same key
            self.repo.rollback()
            raise AlreadyFavoriteError("Item is already in favorites")

        return {
            "message": f"{_label(type)} added to favorites",
            "favorite": self.to_out(favorite),
            "total_favorites": self.repo.count_active(user_id),
        }

    def remove_favorite(
        self,
        user_id: int,
        restaurant_id: str,
        type: str,
        menu_item_id: str | None = None,
    ) -> Dict[str, Any]:
        if type == FavoriteType.DISH.value and menu_item_id in (None, "", "undefined", "null"):
            raise ValidationError("Menu item ID is required for dish favorites")

        favorite = self.repo.find(
            user_id,
            restaurant_id,
            type,
            menu_item_id,
            state=FavoriteState.ACTIVE.value,
        )
        if not favorite:
            raise ValidationError(f"{_label(type)} is not in favorites")

        favorite.deactivate()
        self.repo.save(favorite)

        logger.info(f"Deactivated favorite {favorite.id} for user {user_id}")

        return {
            "message": f"{_label(type)} removed from favorites",
            "restaurant_id": restaurant_id,
            "menu_item_id": menu_item_id,
            "total_favorites": self.repo.count_active(user_id),
        }

    def remove_all(self, user_id: int, type: str | None = None) -> Dict[str, Any]:
        favorites = self.repo.active_for_user(user_id, type)
        for favorite in favorites:
            favorite.deactivate()
        self.repo.commit()

        logger.info(f"Deactivated {len(favorites)} favorites for user {user_id}")

        return {
            "removed_count": len(favorites),
            "total_favorites": self.repo.count_active(user_id),
        }

    def list_favorites(self, user_id: int, query: FavoriteQuery) -> Dict[str, Any]:
        type = None if query.type == "all" else query.type

        rows, total = self.repo.search_active(
            user_id=user_id,
            type=type,
            search=query.search.strip(),
            category=query.category.strip(),
            sort_column=_SORT_COLUMNS[query.sort_by],
            descending=query.sort_order == "desc",
            offset=(query.page - 1) * query.limit,
            limit=query.limit,
        )

        total_pages = math.ceil(total / query.limit) if total else 0

        return {
            "favorites": [self.to_out(f) for f in rows],
            "pagination": {
                "current_page": query.page,
                "total_pages": total_pages,
                "total_favorites": total,
                "has_next_page": query.page < total_pages,
                "has_prev_page": query.page > 1,
            },
            "stats": {
                "total_favorites": self.repo.count_active(user_id),
                "restaurant_count": self.repo.count_active(user_id, FavoriteType.RESTAURANT.value),
                "dish_count": self.repo.count_active(user_id, FavoriteType.DISH.value),
            },
        }

    @staticmethod
    def to_out(favorite: FavoriteModel) -> FavoriteOut:
        dish = None
        if favorite.type == FavoriteType.DISH.value:
            dish = {"id": favorite.menu_item_id, **favorite.dish_details}
        return FavoriteOut(
            id=favorite.id,
            type=favorite.type,
            restaurant_id=favorite.restaurant_id,
            menu_item_id=favorite.menu_item_id,
            dish=dish,
            added_at=favorite.added_at,
        )
