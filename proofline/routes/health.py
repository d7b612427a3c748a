"""
Health check endpoint for monitoring.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, Request, status, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from proofline.schemas.health import HealthResponse
from proofline.database import get_db
from proofline.utils.logger import get_logger

logger = get_logger("health")
router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check database connectivity and report the active correction provider",
    responses={
        200: {"description": "Service is healthy"},
        503: {"description": "Service is unhealthy"}
    }
)
async def health_check(request: Request, db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """
    Health check endpoint.

    The ignore rule store is the only hard dependency; a missing provider
    is reported but does not make the service unhealthy.
    """
    service = getattr(request.app.state, "correction_service", None)
    provider = service.provider.get_provider_name() if service else "unavailable"

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Health check: database connection failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "status": "degraded",
                "database": "disconnected",
                "provider": provider,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    return HealthResponse(
        status="healthy",
        database="connected",
        provider=provider,
        timestamp=datetime.now(timezone.utc)
    )
