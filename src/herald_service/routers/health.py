"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.config import settings
from herald_service.database import get_db
from herald_service.schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    description=(
        "Returns service health status including database connectivity. "
        "No authentication required. Not under the /api/v1 prefix."
    ),
    responses={
        200: {
            "description": "Service is healthy or degraded",
            "content": {
                "application/json": {
                    "examples": {
                        "healthy": {
                            "summary": "All systems operational",
                            "value": {
                                "status": "ok",
                                "version": "0.1.0",
                                "database": "connected",
                            },
                        },
                        "degraded": {
                            "summary": "Database unavailable",
                            "value": {
                                "status": "degraded",
                                "version": "0.1.0",
                                "database": "disconnected",
                            },
                        },
                    }
                }
            },
        }
    },
)
async def health_check(
    db: AsyncSession = Depends(get_db),
) -> HealthResponse:
    """Health check endpoint.

    Design Decision: Graceful degradation instead of failing hard

    The endpoint always answers 200; a database outage is reported as
    ``degraded`` so load balancers can tell "process dead" from "database
    unavailable".

    Args:
        db: Async database session (injected by FastAPI)

    Returns:
        HealthResponse with current service status
    """
    database_status = "disconnected"
    try:
        await db.execute(text("SELECT 1"))
        database_status = "connected"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")

    overall_status = "ok" if database_status == "connected" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.app_version,
        database=database_status,
    )
