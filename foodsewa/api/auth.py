# foodsewa/api/auth.py
import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from foodsewa.data.database import get_db
from foodsewa.data.models import UserModel
from foodsewa.services.user_service import UserService, decode_token
from foodsewa.utils.logging import get_logger

logger = get_logger(__name__)

TOKEN_COOKIE = "token"


def _token_from(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return request.cookies.get(TOKEN_COOKIE)


def authenticate(request: Request, db: Session = Depends(get_db)) -> UserModel:
    """Bearer header first, then the `token` cookie."""
    token = _token_from(request)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        user_id = decode_token(token)
        return UserService(db).get_active_user(user_id)
    except (jwt.InvalidTokenError, LookupError, PermissionError) as e:
        logger.warning(f"Authentication failed: {e}")
        raise HTTPException(status_code=401, detail="Unauthorized")


def require_role(*roles: str):
    def dependency(user: UserModel = Depends(authenticate)) -> UserModel:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Access denied. Insufficient permissions.")
        return user

    return dependency
