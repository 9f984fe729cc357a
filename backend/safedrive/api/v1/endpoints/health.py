"""
Health Check Endpoints

- /health/live  - Liveness with app metadata
- /health/ready - Readiness check (database reachable)
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from typing import Dict, Any
import time

from safedrive.core.config import settings
from safedrive.core.database import get_session_local
from safedrive.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity"""
    start = time.time()
    try:
        async with get_session_local()() as session:
            await session.execute(text("SELECT 1"))
        return {"status": "healthy", "latency_ms": round((time.time() - start) * 1000, 2)}
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "error": str(e)[:200],
        }


@router.get("/live")
async def health_check():
    """Liveness check"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check; 503 until the database answers"""
    database = await check_database()
    ready = database["status"] == "healthy"
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "not_ready", "checks": {"database": database}},
    )
