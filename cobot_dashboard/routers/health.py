"""Health check endpoint — public, no Cobot call."""

from __future__ import annotations

from fastapi import APIRouter

from cobot_dashboard.models.base import HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check. Returns 200 if the process is up."""
    return HealthResponse()
