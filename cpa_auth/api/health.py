"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from cpa_auth.core.logging import get_logger
from cpa_auth.dependencies import SessionDep, SettingsDep
from cpa_auth.models.responses import SuccessResponse

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthStatus(BaseModel):
    """Health status response model."""

    status: str
    version: str
    service: str


class ReadinessStatus(BaseModel):
    """Readiness status response model."""

    status: str
    version: str
    service: str
    database: str


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(settings: SettingsDep) -> SuccessResponse[HealthStatus]:
    """Basic liveness check, including version information."""
    logger.debug("health_check")

    return SuccessResponse(
        data=HealthStatus(
            status="healthy",
            version=settings.version,
            service=settings.app_name,
        )
    )


@router.get("/health/ready")
async def readiness_check(db: SessionDep, settings: SettingsDep) -> Response:
    """Readiness check: 200 when the database answers, 503 otherwise."""
    logger.debug("readiness_check")

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar_one()
    except (SQLAlchemyError, OSError) as e:
        logger.error("readiness_check_failed", error=str(e))
        ready, status_code = False, status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        logger.info("readiness_check_passed")
        ready, status_code = True, status.HTTP_200_OK

    response_data = SuccessResponse(
        data=ReadinessStatus(
            status="ready" if ready else "not_ready",
            version=settings.version,
            service=settings.app_name,
            database="connected" if ready else "disconnected",
        )
    )

    return Response(
        content=response_data.model_dump_json(),
        status_code=status_code,
        media_type="application/json",
    )
