from fastapi import APIRouter, Depends

from foodsewa.api.auth import authenticate
from foodsewa.api.deps import ok
from foodsewa.data.models import UserModel
from foodsewa.domain.schemas import UserRead

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.get("/me")
def me(user: UserModel = Depends(authenticate)):
    return ok({"user": UserRead.model_validate(user)})
