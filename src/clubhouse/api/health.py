"""Liveness and readiness probes. Neither requires authentication."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import JSONResponse

from clubhouse.db.session import get_db

logger = logging.getLogger("clubhouse")

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "healthy", "service": "clubhouse"}


@router.get("/ready")
async def ready(session: AsyncSession = Depends(get_db)):
    """Ready once the role and credential store answers a trivial query."""
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.error("readiness check failed: database unreachable")
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "checks": {"database": False}},
        )
    return {"status": "ready", "checks": {"database": True}}
