# foodsewa/services/user_service.py
from datetime import timedelta

import jwt
from sqlalchemy.orm import Session

from foodsewa.data.models import UserModel
from foodsewa.domain.enums import UserRole
from foodsewa.domain.errors import NotFoundError
from foodsewa.repos.user_repo import UserRepo
from foodsewa.utils.settings import JWT_SECRET, JWT_ALGORITHM, JWT_TTL_SECONDS
from foodsewa.utils.timeutil import utcnow


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(
        self,
        user_id: int,
        name: str,
        email: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> UserModel:
        existing = self.repo.get_user(user_id)
        if existing:
            return existing

        user = UserModel(id=user_id, name=name, email=email, role=role.value, is_active=True)
        return self.repo.add(user)

    def get_active_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not user.is_active:
            raise PermissionError("Account is deactivated")
        return user


def issue_token(user_id: int, ttl_seconds: int = JWT_TTL_SECONDS) -> str:
    now = utcnow()
    payload = {"id": user_id, "iat": now, "exp": now + timedelta(seconds=ttl_seconds)}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> int:
    """Returns the user id, raises jwt.InvalidTokenError on a bad or expired token."""
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    if "id" not in payload:
        raise jwt.InvalidTokenError("Token has no user id")
    return int(payload["id"])
