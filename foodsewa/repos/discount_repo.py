# foodsewa/repos/discount_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from foodsewa.data.models import DiscountModel


class DiscountRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_active_by_code(self, code: str, restaurant_id: str) -> DiscountModel | None:
        return self.db.execute(
            select(DiscountModel).where(
                DiscountModel.code == code.upper(),
                DiscountModel.restaurant_id == restaurant_id,
                DiscountModel.is_active.is_(True),
            )
        ).scalar_one_or_none()

    def add(self, discount: DiscountModel) -> DiscountModel:
        self.db.add(discount)
        self.db.commit()
        self.db.refresh(discount)
        return discount
