from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func, select
import logging

from app.db import get_session
from app.models import Category

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/system")
async def get_system_health(session: Session = Depends(get_session)):
    """
    백엔드 서버 및 카탈로그 데이터베이스 연결 상태를 확인합니다.
    """
    db_ok = False
    category_count = None
    try:
        category_count = session.execute(select(func.count()).select_from(Category)).scalar_one()
        db_ok = True
    except Exception as e:
        logger.error(f"Database health check failed: {type(e).__name__}")

    return {
        "status": "healthy" if db_ok else "unhealthy",
        "database": "ok" if db_ok else "error",
        "categories": category_count,
    }
