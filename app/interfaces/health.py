"""
Health check router.

Liveness probe for the vending service. Reports the version and which
storage backend the process is configured for; it does not touch storage.
"""

from fastapi import APIRouter

from app.core.config import settings
from app.interfaces.vending.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns service status, version and storage backend.",
)
def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok", version=settings.version, storage=settings.storage_backend
    )
