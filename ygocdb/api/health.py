"""
Health check endpoints.

Provides liveness and readiness probes. Readiness means a card dataset is
loaded and searchable.
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ygocdb.api.deps import ServicesDep

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    dataset: str | None = None
    card_count: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(response: Response, services: ServicesDep) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 until a dataset has been loaded or synced.
    """
    store = services.store
    if not store.is_loaded:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", dataset="missing")
    return HealthResponse(status="ready", dataset="loaded", card_count=len(store.cards))
