# foodsewa/domain/errors.py
"""
Domain errors. They subclass built-ins so the routers can map them the same way
they map ValueError / PermissionError.
"""


class ValidationError(ValueError):
    """Business rule rejected the request (HTTP 400)."""


class CrossRestaurantError(ValidationError):
    pass


class QuantityError(ValidationError):
    pass


class InvalidItemIndexError(ValidationError):
    pass


class AlreadyFavoriteError(ValidationError):
    pass


class DiscountError(ValidationError):
    pass


class OrderStateError(ValidationError):
    pass


class UnavailableItemsError(ValidationError):
    def __init__(self, message: str, unavailable_items: list[dict]):
        super().__init__(message)
        self.unavailable_items = unavailable_items


class NotFoundError(LookupError):
    """Requested cart / favorite / restaurant / order does not exist (HTTP 404)."""
