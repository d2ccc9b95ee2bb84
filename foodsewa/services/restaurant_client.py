# foodsewa/services/restaurant_client.py
import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception
from requests import RequestException

from foodsewa.utils.settings import RESTAURANT_SERVICE_URL, RESTAURANT_SERVICE_TIMEOUT
from foodsewa.utils.logging import get_logger

logger = get_logger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    #4xx will not get better on retry, only transport errors and 5xx
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return isinstance(exc, RequestException)


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(_is_retryable),
    )


class RestaurantClient:
    """
    Read-only client of the restaurant catalogue.

    A restaurant payload looks like:
    {"id", "name", "is_active", "is_verified", "owner_id", "delivery_fee",
     "minimum_order", "delivery_time": {"min", "max"},
     "menu": [{"id", "name", "description", "price", "category", "image",
               "is_available", "preparation_time"}]}
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or RESTAURANT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or RESTAURANT_SERVICE_TIMEOUT

    @http_retry()
    def fetch_restaurant(self, restaurant_id: str) -> dict | None:
        url = f"{self.base_url}/restaurants/{restaurant_id}"
        logger.info(f"RestaurantClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()


def find_menu_item(restaurant: dict, menu_item_id: str) -> dict | None:
    return next(
        (m for m in restaurant.get("menu", []) if str(m.get("id")) == str(menu_item_id)),
        None,
    )


def is_orderable(restaurant: dict | None) -> bool:
    return bool(restaurant and restaurant.get("is_active") and restaurant.get("is_verified"))
