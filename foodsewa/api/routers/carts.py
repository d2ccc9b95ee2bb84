#foodsewa/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from foodsewa.api.auth import authenticate
from foodsewa.api.deps import get_restaurant_client, ok
from foodsewa.data.database import get_db
from foodsewa.data.models import UserModel
from foodsewa.domain.schemas import AddCartItemIn, UpdateCartIn
from foodsewa.services.cart_service import CartService
from foodsewa.services.restaurant_client import RestaurantClient

router = APIRouter(prefix="/api/user/cart", tags=["cart"])


def get_service(
    db: Session = Depends(get_db),
    restaurant_client: RestaurantClient = Depends(get_restaurant_client),
) -> CartService:
    return CartService(db=db, restaurant_client=restaurant_client)


@router.get("")
def get_cart(
    user: UserModel = Depends(authenticate),
    svc: CartService = Depends(get_service),
):
    return ok(svc.get_cart(user.id))


@router.post("")
def add_item(
    payload: AddCartItemIn,
    user: UserModel = Depends(authenticate),
    svc: CartService = Depends(get_service),
):
    try:
        data = svc.add_item(user.id, payload)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ok(data, "Item added to cart successfully")


@router.put("")
def update_cart(
    payload: UpdateCartIn,
    user: UserModel = Depends(authenticate),
    svc: CartService = Depends(get_service),
):
    try:
        data = svc.update_cart(user.id, payload)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    message = data.pop("message")
    return ok(data, message)


@router.delete("")
def clear_cart(
    user: UserModel = Depends(authenticate),
    svc: CartService = Depends(get_service),
):
    try:
        data = svc.clear_cart(user.id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ok(data, "Cart cleared successfully")
