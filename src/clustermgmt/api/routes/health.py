from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from clustermgmt import __version__
from clustermgmt.api.deps import get_coordinator
from clustermgmt.lifecycle import LifecycleCoordinator

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str = __version__


class ReadinessResponse(BaseModel):
    status: str
    pending_operations: int
    kinds: list[str]


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="healthy")


@router.get("/ready", response_model=ReadinessResponse, status_code=status.HTTP_200_OK)
async def readiness_check(
    coordinator: LifecycleCoordinator = Depends(get_coordinator),  # noqa: B008
) -> ReadinessResponse:
    """Readiness check reporting in-flight work and the kinds that can be provisioned."""
    return ReadinessResponse(
        status="ready",
        pending_operations=coordinator.pending_operations,
        kinds=coordinator.provisioners.kinds(),
    )
