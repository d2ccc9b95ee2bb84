# foodsewa/repos/favorite_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from foodsewa.data.models import FavoriteModel
from foodsewa.domain.enums import FavoriteState, FavoriteType


class FavoriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def find(
        self,
        user_id: int,
        restaurant_id: str,
        type: str,
        menu_item_id: str | None = None,
        state: str | None = None,
    ) -> FavoriteModel | None:
        stmt = select(FavoriteModel).where(
            FavoriteModel.user_id == user_id,
            FavoriteModel.restaurant_id == restaurant_id,
            FavoriteModel.type == type,
        )
        if type == FavoriteType.DISH.value:
            stmt = stmt.where(FavoriteModel.menu_item_id == menu_item_id)
        if state is not None:
            stmt = stmt.where(FavoriteModel.state == state)
        return self.db.execute(stmt).scalar_one_or_none()

    def add(self, favorite: FavoriteModel) -> FavoriteModel:
        self.db.add(favorite)
        self.db.commit()
        self.db.refresh(favorite)
        return favorite

    def save(self, favorite: FavoriteModel) -> FavoriteModel:
        self.db.commit()
        self.db.refresh(favorite)
        return favorite

    def active_for_user(self, user_id: int, type: str | None = None) -> list[FavoriteModel]:
        stmt = select(FavoriteModel).where(
            FavoriteModel.user_id == user_id,
            FavoriteModel.state == FavoriteState.ACTIVE.value,
        )
        if type:
            stmt = stmt.where(FavoriteModel.type == type)
        return self.db.execute(stmt).scalars().all()

    def count_active(self, user_id: int, type: str | None = None) -> int:
        stmt = select(func.count(FavoriteModel.id)).where(
            FavoriteModel.user_id == user_id,
            FavoriteModel.state == FavoriteState.ACTIVE.value,
        )
        if type:
            stmt = stmt.where(FavoriteModel.type == type)
        return self.db.execute(stmt).scalar_one()

    def search_active(
        self,
        user_id: int,
        type: str | None,
        search: str,
        category: str,
        sort_column,
        descending: bool,
        offset: int,
        limit: int,
    ) -> tuple[list[FavoriteModel], int]:
        conditions = [
            FavoriteModel.user_id == user_id,
            FavoriteModel.state == FavoriteState.ACTIVE.value,
        ]
        if type:
            conditions.append(FavoriteModel.type == type)
        if search:
            conditions.append(FavoriteModel.dish_name.ilike(f"%{search}%"))
        if category:
            conditions.append(FavoriteModel.dish_category == category)

        total = self.db.execute(
            select(func.count(FavoriteModel.id)).where(*conditions)
        ).scalar_one()

        order = sort_column.desc() if descending else sort_column.asc()
        rows = self.db.execute(
            select(FavoriteModel)
            .where(*conditions)
            .order_by(order, FavoriteModel.id.desc() if descending else FavoriteModel.id.asc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return rows, total

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
