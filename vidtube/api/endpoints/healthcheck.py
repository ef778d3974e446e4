"""
Health check endpoint
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import settings
from vidtube.core.exceptions import DatabaseError
from vidtube.db.database import get_db
from vidtube.schemas import ApiResponse, success_response

logger = structlog.get_logger()

router = APIRouter()


@router.get("/", response_model=ApiResponse[dict])
async def healthcheck(db: AsyncSession = Depends(get_db)):
    """Reports OK when the database answers"""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Healthcheck database probe failed", error=str(e))
        raise DatabaseError("Database unavailable", operation="healthcheck")

    return success_response(
        {"status": "healthy", "environment": settings.ENVIRONMENT},
        "OK"
    )
