"""Health check router for the ERD validator service."""
from __future__ import annotations

import time

from fastapi import APIRouter, Request

from src.shared.constants import ERD_VALIDATOR_SERVICE_NAME, VERSION
from src.shared.models.common import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health(request: Request) -> HealthStatus:
    """Health check endpoint returning service status."""
    return HealthStatus(
        status="healthy",
        service_name=ERD_VALIDATOR_SERVICE_NAME,
        version=VERSION,
        uptime_seconds=time.time() - request.app.state.start_time,
    )
