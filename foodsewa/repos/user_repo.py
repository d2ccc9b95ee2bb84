# foodsewa/repos/user_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from foodsewa.data.models import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.id == user_id)
        ).scalar_one_or_none()

    def add(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
