"""
Health check endpoint.

Provides system health status for monitoring and load balancers.
"""

from fastapi import APIRouter, Depends, Response, status

from bizmetrics import __version__
from bizmetrics.api.schemas import HealthResponse
from bizmetrics.config import get_settings
from bizmetrics.infrastructure.database import check_database

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Data store unreachable"}},
)
async def health_check(
    response: Response,
    database_ok: bool = Depends(check_database),
) -> HealthResponse:
    """
    Check system health.

    Returns status of core components for monitoring dashboards
    and load balancer health checks. Answers 503 when the data store
    does not respond, so load balancers take the instance out.
    """
    settings = get_settings()

    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        version=__version__,
        database="connected" if database_ok else "disconnected",
        reporting_currency=settings.reporting_currency,
    )
