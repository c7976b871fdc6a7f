"""Health check endpoints."""

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tripgen.db.engine import get_async_engine

router = APIRouter()
logger = logging.getLogger(__name__)


async def check_db() -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        async with AsyncSession(get_async_engine()) as session:
            await session.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return (False, f"error: {type(e).__name__}")


@router.get("/health", response_model=None)
async def health() -> dict[str, Any] | JSONResponse:
    """Health check.

    Returns:
        200 with component status if the database answers, 503 otherwise
    """
    db_ok, db_status = await check_db()
    body = {"status": "ok" if db_ok else "degraded", "components": {"db": db_status}}
    if not db_ok:
        return JSONResponse(content=body, status_code=503)
    return body
