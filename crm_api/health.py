"""Health check endpoint."""

from enum import Enum

from fastapi import APIRouter, Depends, Request

from crm_api.config import AppSettings
from crm_api.db.database import MongoDatabase, get_database
from crm_api.middleware import limiter
from crm_api.schemas import CamelModel, UTCDateTime
from crm_api.utils.dates import utc_now

router = APIRouter(tags=["Health"])


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"


class DatabaseStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class HealthResponse(CamelModel):
    success: bool = True
    status: HealthStatus
    database: DatabaseStatus
    version: str
    environment: str
    timestamp: UTCDateTime


def get_app_settings_dependency(request: Request) -> AppSettings:
    """App settings the application was created with."""
    return request.app.state.app_settings


@router.get("/health", response_model=HealthResponse)
@limiter.exempt
def health(
    request: Request,
    database: MongoDatabase = Depends(get_database),
    settings: AppSettings = Depends(get_app_settings_dependency),
) -> HealthResponse:
    """Liveness plus a database ping. Never requires authentication."""
    connected = database.ping()
    return HealthResponse(
        status=HealthStatus.HEALTHY if connected else HealthStatus.DEGRADED,
        database=DatabaseStatus.CONNECTED if connected else DatabaseStatus.DISCONNECTED,
        version=settings.version,
        environment=settings.environment.value,
        timestamp=utc_now(),
    )
