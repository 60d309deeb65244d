from fastapi import APIRouter

from personal_crm.core.database import get_database_health
from personal_crm.schemas.common import HealthCheckResponse
import logging

logger = logging.getLogger("HEALTH_API_LOGGER")

SERVICE_NAME = "personal-crm"

health_api_router = APIRouter(prefix="/health", tags=["health"])


@health_api_router.get("", response_model=HealthCheckResponse)
async def health_status():
    """Liveness check for load balancers and monitoring."""
    return HealthCheckResponse(status="healthy", service=SERVICE_NAME)


@health_api_router.get("/database", response_model=HealthCheckResponse)
async def database_health():
    """Readiness check including a round trip to the database."""
    database = get_database_health()
    if database.get("status") != "healthy":
        logger.warning(f"Database health check failed: {database.get('error')}")
    return HealthCheckResponse(
        status="healthy" if database.get("status") == "healthy" else "degraded",
        service=SERVICE_NAME,
        database=database,
    )
