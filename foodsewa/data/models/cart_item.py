from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, Boolean, JSON
from sqlalchemy.orm import relationship, validates

from foodsewa.data.database import Base

MIN_QUANTITY = 1
MAX_QUANTITY = 10
DEFAULT_IMAGE = "/images/default-food.jpg"
DEFAULT_PREPARATION_TIME = 15


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    menu_item_id = Column(String(64), nullable=False)
    restaurant_id = Column(String(64), nullable=False)

    #snapshot of the menu item at the time it was added
    name = Column(String(200), nullable=False)
    description = Column(String(500), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=False, default=DEFAULT_IMAGE)
    category = Column(String(50), nullable=False)

    quantity = Column(Integer, nullable=False)
    customizations = Column(JSON, nullable=False, default=list)
    special_instructions = Column(String(200), nullable=False, default="")
    is_available = Column(Boolean, nullable=False, default=True)
    preparation_time = Column(Integer, nullable=False, default=DEFAULT_PREPARATION_TIME)

    cart = relationship("CartModel", back_populates="items")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        if value < MIN_QUANTITY:
            raise ValueError(f"Quantity must be at least {MIN_QUANTITY}")
        if value > MAX_QUANTITY:
            raise ValueError(f"Maximum {MAX_QUANTITY} items allowed per menu item")
        return value

    @validates("price")
    def _validate_price(self, key, value):
        if Decimal(str(value)) < 0:
            raise ValueError("Price cannot be negative")
        return value

    def same_line_as(self, menu_item_id: str, customizations: list, special_instructions: str) -> bool:
        return (
            self.menu_item_id == str(menu_item_id)
            and (self.customizations or []) == (customizations or [])
            and (self.special_instructions or "") == (special_instructions or "")
        )

    @property
    def unit_price(self) -> Decimal:
        extras = sum(
            (Decimal(str(c.get("additional_price", 0))) for c in (self.customizations or [])),
            Decimal("0.00"),
        )
        return Decimal(str(self.price)) + extras

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity
