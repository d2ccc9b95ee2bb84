# foodsewa/api/deps.py
from typing import Any

from foodsewa.services.restaurant_client import RestaurantClient


def get_restaurant_client() -> RestaurantClient:
    return RestaurantClient()


def ok(data: Any = None, message: str | None = None) -> dict:
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body
