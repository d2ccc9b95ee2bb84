from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Index

from foodsewa.data.database import Base
from foodsewa.domain.enums import FavoriteState, FavoriteType
from foodsewa.utils.timeutil import utcnow


class FavoriteModel(Base):
    """
    Saved restaurant or dish. Removal is a state change (active -> inactive),
    adding the same key again reactivates the existing row.
    """

    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    restaurant_id = Column(String(64), nullable=False)
    menu_item_id = Column(String(64), nullable=True)
    type = Column(String(20), nullable=False)

    #dish snapshot, only set for type == dish
    dish_name = Column(String(200), nullable=True)
    dish_price = Column(Numeric(10, 2), nullable=True)
    dish_image = Column(String(500), nullable=True)
    dish_category = Column(String(50), nullable=True)

    state = Column(String(20), nullable=False, default=FavoriteState.ACTIVE.value)
    added_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index(
            "uq_favorite_restaurant",
            "user_id",
            "restaurant_id",
            unique=True,
            postgresql_where=(type == FavoriteType.RESTAURANT.value),
            sqlite_where=(type == FavoriteType.RESTAURANT.value),
        ),
        Index(
            "uq_favorite_dish",
            "user_id",
            "restaurant_id",
            "menu_item_id",
            unique=True,
            postgresql_where=(type == FavoriteType.DISH.value),
            sqlite_where=(type == FavoriteType.DISH.value),
        ),
        Index("ix_favorite_user_type", "user_id", "type"),
        Index("ix_favorite_user_added", "user_id", "added_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.state == FavoriteState.ACTIVE.value

    def deactivate(self) -> None:
        self.state = FavoriteState.INACTIVE.value

    def reactivate(self, dish_details: dict | None = None) -> None:
        if self.is_active:
            raise ValueError("Favorite is already active")
        self.state = FavoriteState.ACTIVE.value
        self.added_at = utcnow()
        if self.type == FavoriteType.DISH.value and dish_details:
            self.set_dish_details(dish_details)

    def set_dish_details(self, dish_details: dict) -> None:
        self.dish_name = dish_details.get("name")
        self.dish_price = dish_details.get("price")
        self.dish_image = dish_details.get("image")
        self.dish_category = dish_details.get("category")

    @property
    def dish_details(self) -> dict | None:
        if self.type != FavoriteType.DISH.value:
            return None
        return {
            "name": self.dish_name,
            "price": self.dish_price,
            "image": self.dish_image,
            "category": self.dish_category,
        }
