# foodsewa/api/routers/discounts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from foodsewa.api.auth import authenticate
from foodsewa.data.database import get_db
from foodsewa.data.models import UserModel
from foodsewa.domain.schemas import ValidateDiscountIn
from foodsewa.services.discount_service import DiscountService

router = APIRouter(prefix="/api/discounts", tags=["discounts"])


@router.post("/validate")
def validate_discount(
    payload: ValidateDiscountIn,
    user: UserModel = Depends(authenticate),
    db: Session = Depends(get_db),
):
    try:
        result = DiscountService(db).validate(
            user_id=user.id,
            code=payload.code,
            restaurant_id=payload.restaurant_id,
            order_amount=payload.order_amount,
            items=[i.model_dump() for i in payload.items],
            delivery_fee=payload.delivery_fee,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, **result}
