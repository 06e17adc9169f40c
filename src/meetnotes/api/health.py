"""Health endpoint reporting database and email status."""

import logging
import time
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from meetnotes.config import get_settings
from meetnotes.services.email_sender import get_email_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_started_at = time.monotonic()


@router.get("/health")
async def health_check() -> JSONResponse:
    """Check database connectivity and SMTP configuration."""
    from meetnotes.infrastructure.database import async_session_factory

    settings = get_settings()
    timestamp = datetime.now(UTC).isoformat()
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            {"status": "unhealthy", "timestamp": timestamp, "error": str(e)},
            status_code=503,
        )

    email_ok = await get_email_service().verify_config()
    return JSONResponse({
        "status": "healthy",
        "timestamp": timestamp,
        "uptime": round(time.monotonic() - _started_at, 3),
        "database": "connected",
        "email": "configured" if email_ok else "not configured",
        "environment": settings.environment,
    })
