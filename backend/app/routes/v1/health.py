# backend/app/routes/v1/health.py
"""
Health check endpoints for monitoring and load balancers.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import API_VERSION, BRAND_NAME, ResponseMessage
from app.database import get_db
from app.schemas.base import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    database: str
    timestamp: str


def _database_reachable(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        return False


@router.get("/health", response_model=ApiResponse[HealthResponse])
async def health(request: Request, db: Session = Depends(get_db)):
    database_ok = await asyncio.to_thread(_database_reachable, db)
    payload = HealthResponse(
        status="healthy" if database_ok else "degraded",
        service=f"{BRAND_NAME.lower().replace(' ', '-')}-api",
        version=API_VERSION,
        environment=settings.environment,
        database="connected" if database_ok else "unreachable",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
    return ApiResponse[HealthResponse].build(request, payload, ResponseMessage.service(BRAND_NAME))
