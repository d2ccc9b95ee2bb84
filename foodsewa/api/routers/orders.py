# foodsewa/api/routers/orders.py
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from foodsewa.api.auth import authenticate, require_role
from foodsewa.api.deps import get_restaurant_client, ok
from foodsewa.data.database import get_db
from foodsewa.data.models import UserModel
from foodsewa.domain.enums import UserRole
from foodsewa.domain.errors import UnavailableItemsError
from foodsewa.domain.schemas import (
    CancelOrderIn,
    CreateOrderIn,
    OrderQuery,
    RestaurantOrderActionIn,
)
from foodsewa.services.order_service import OrderService
from foodsewa.services.restaurant_client import RestaurantClient

router = APIRouter(tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    restaurant_client: RestaurantClient = Depends(get_restaurant_client),
) -> OrderService:
    return OrderService(db=db, restaurant_client=restaurant_client)


@router.get("/api/user/orders")
def list_orders(
    query: Annotated[OrderQuery, Query()],
    user: UserModel = Depends(authenticate),
    svc: OrderService = Depends(get_service),
):
    return ok(svc.list_orders(user.id, query))


@router.post("/api/user/orders", status_code=201)
def create_order(
    payload: CreateOrderIn,
    user: UserModel = Depends(authenticate),
    svc: OrderService = Depends(get_service),
):
    """
    Checkout: turns the user's cart into an order and empties the cart.
    """
    try:
        data = svc.create_order_from_cart(user.id, payload)
    except UnavailableItemsError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": str(e), "data": {"unavailable_items": e.unavailable_items}},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ok(data, "Order placed successfully")


@router.get("/api/user/orders/{order_id}")
def get_order(
    order_id: int,
    user: UserModel = Depends(authenticate),
    svc: OrderService = Depends(get_service),
):
    try:
        return ok(svc.get_order(user.id, order_id))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/api/user/orders/{order_id}")
def cancel_order(
    order_id: int,
    payload: CancelOrderIn,
    user: UserModel = Depends(authenticate),
    svc: OrderService = Depends(get_service),
):
    try:
        data = svc.cancel_order(user.id, order_id, payload.reason)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ok(data, "Order cancelled successfully")


@router.put("/api/restaurant/orders/{order_id}")
def update_order_status(
    order_id: int,
    payload: RestaurantOrderActionIn,
    user: UserModel = Depends(require_role(UserRole.RESTAURANT.value, UserRole.ADMIN.value)),
    svc: OrderService = Depends(get_service),
):
    try:
        data = svc.advance_order(user, order_id, payload.action, payload.reason)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ok(data, "Order status updated successfully")
