# foodsewa/repos/cart_repo.py
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from foodsewa.data.models import CartModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_active_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(
                CartModel.user_id == user_id,
                CartModel.is_active.is_(True),
            )
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def save(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_expired_carts(self, now: datetime) -> list[CartModel]:
        return self.db.execute(
            select(CartModel).where(CartModel.expires_at < now)
        ).scalars().all()

    def delete_cart(self, cart: CartModel) -> None:
        #orm delete so the cascade removes the lines too
        self.db.delete(cart)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
