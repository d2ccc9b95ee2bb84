# foodsewa/api/routers/favorites.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from foodsewa.api.auth import authenticate
from foodsewa.api.deps import get_restaurant_client, ok
from foodsewa.data.database import get_db
from foodsewa.data.models import UserModel
from foodsewa.domain.enums import FavoriteType
from foodsewa.domain.schemas import (
    AddFavoriteIn,
    DishDetailsIn,
    DishFavoriteIn,
    FavoriteQuery,
    RestaurantFavoriteIn,
)
from foodsewa.services.favorite_service import FavoriteService
from foodsewa.services.restaurant_client import RestaurantClient

router = APIRouter(tags=["favorites"])


def get_service(
    db: Session = Depends(get_db),
    restaurant_client: RestaurantClient = Depends(get_restaurant_client),
) -> FavoriteService:
    return FavoriteService(db=db, restaurant_client=restaurant_client)


def _add(svc: FavoriteService, user_id: int, payload: AddFavoriteIn) -> dict:
    try:
        data = svc.add_favorite(user_id, payload)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    message = data.pop("message")
    return ok(data, message)


def _remove(
    svc: FavoriteService,
    user_id: int,
    restaurant_id: Optional[str],
    type: Optional[str],
    menu_item_id: Optional[str],
    remove_all: bool,
) -> dict:
    if remove_all:
        data = svc.remove_all(user_id, type)
        noun = {"dish": "dishes", "restaurant": "restaurants"}.get(type, "favorites")
        return ok(data, f"{data['removed_count']} {noun} removed from favorites")

    if not restaurant_id or not type:
        raise HTTPException(status_code=400, detail="Restaurant ID and type are required")

    try:
        data = svc.remove_favorite(user_id, restaurant_id, type, menu_item_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    message = data.pop("message")
    return ok(data, message)


# =====================================================
# /api/favorites - restaurants and dishes together
# =====================================================
@router.get("/api/favorites")
def list_favorites(
    query: Annotated[FavoriteQuery, Query()],
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    return ok(svc.list_favorites(user.id, query))


@router.post("/api/favorites")
def add_favorite(
    payload: AddFavoriteIn,
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    return _add(svc, user.id, payload)


@router.delete("/api/favorites")
def remove_favorite(
    restaurant_id: Optional[str] = Query(None),
    type: Optional[FavoriteType] = Query(None),
    menu_item_id: Optional[str] = Query(None),
    remove_all: bool = Query(False),
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    return _remove(
        svc,
        user.id,
        restaurant_id,
        type.value if type else None,
        menu_item_id,
        remove_all,
    )


# =====================================================
# /api/user/favorites - restaurants only
# =====================================================
@router.get("/api/user/favorites")
def list_restaurant_favorites(
    query: Annotated[FavoriteQuery, Query()],
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    query.type = FavoriteType.RESTAURANT.value
    return ok(svc.list_favorites(user.id, query))


@router.post("/api/user/favorites")
def add_restaurant_favorite(
    payload: RestaurantFavoriteIn,
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    return _add(
        svc,
        user.id,
        AddFavoriteIn(restaurant_id=payload.restaurant_id, type=FavoriteType.RESTAURANT),
    )


@router.delete("/api/user/favorites")
def remove_restaurant_favorite(
    restaurant_id: Optional[str] = Query(None),
    remove_all: bool = Query(False),
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    return _remove(svc, user.id, restaurant_id, FavoriteType.RESTAURANT.value, None, remove_all)


# =====================================================
# /api/user/favorites/dishes - dishes only
# =====================================================
@router.get("/api/user/favorites/dishes")
def list_dish_favorites(
    query: Annotated[FavoriteQuery, Query()],
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    query.type = FavoriteType.DISH.value
    return ok(svc.list_favorites(user.id, query))


@router.post("/api/user/favorites/dishes")
def add_dish_favorite(
    payload: DishFavoriteIn,
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    return _add(
        svc,
        user.id,
        AddFavoriteIn(
            restaurant_id=payload.restaurant_id,
            type=FavoriteType.DISH,
            menu_item_id=payload.menu_item_id,
            dish_details=DishDetailsIn(
                name=payload.name,
                price=payload.price,
                image=payload.image,
                category=payload.category,
            ),
        ),
    )


@router.delete("/api/user/favorites/dishes")
def remove_dish_favorite(
    restaurant_id: Optional[str] = Query(None),
    menu_item_id: Optional[str] = Query(None),
    remove_all: bool = Query(False),
    user: UserModel = Depends(authenticate),
    svc: FavoriteService = Depends(get_service),
):
    if not remove_all and (not restaurant_id or not menu_item_id):
        raise HTTPException(status_code=400, detail="Restaurant ID and menu item ID are required")
    return _remove(svc, user.id, restaurant_id, FavoriteType.DISH.value, menu_item_id, remove_all)
