# foodsewa/api/routers/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from foodsewa.data.database import get_db
from foodsewa.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Database not available"},
        )
    return {"success": True, "data": {"status": "ok", "database": "connected"}}
