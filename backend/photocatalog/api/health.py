"""
Health Router
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from photocatalog.api.dependencies import get_context
from photocatalog.context import AppContext
from photocatalog.database import ping_db
from photocatalog.schemas.catalog import HealthResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness check for container orchestration."""
    return HealthResponse(status="ok", message="API is running")


@router.get("/health/db", response_model=HealthResponse)
async def database_health(context: AppContext = Depends(get_context)):
    """Database connectivity check."""
    try:
        await ping_db(context.engine)
    except Exception as e:
        logger.error(f"[HEALTH] Database unreachable: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "message": "Database unreachable"},
        )
    return HealthResponse(status="ok", message="Database connected")
