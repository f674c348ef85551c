"""
Health check endpoints for AutoParts backend.

Endpoints:
- /health/live - liveness probe (is the app running?)
- /health/ready - readiness probe (can the app reach the database?)
"""

from __future__ import annotations

import time
from datetime import datetime, UTC

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.config import settings
from autoparts.core.logging import get_logger
from autoparts.db.postgres.session import get_db

logger = get_logger(__name__)

router = APIRouter()


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: str
    version: str
    environment: str
    checked_at: str


class ReadinessResponse(BaseModel):
    """Readiness probe response."""

    status: str
    checks: dict[str, bool]
    latency_ms: float
    checked_at: str


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    return LivenessResponse(
        status="alive",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        checked_at=datetime.now(UTC).isoformat(),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(db: AsyncSession = Depends(get_db)):
    """Ready when a trivial query succeeds; 503 otherwise."""
    started = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        database_ok = False

    response = ReadinessResponse(
        status="ready" if database_ok else "not_ready",
        checks={"database": database_ok},
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
        checked_at=datetime.now(UTC).isoformat(),
    )
    if not database_ok:
        return JSONResponse(status_code=503, content=response.model_dump())
    return response
