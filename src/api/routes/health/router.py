"""Endpoints de health check e readiness."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.lifecycle.state import AppState

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe: verifica se o processo está respondendo."""
    application = getattr(request.app.state, "application", None)
    service = application.config.base.service_name if application is not None else "vigia"
    return HealthResponse(
        status="healthy",
        service=service,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: Application em started e rotinas de evento vivas."""
    application = getattr(request.app.state, "application", None)
    if application is None:
        payload = {
            "status": "not_ready",
            "state": None,
            "checks": {"application": "not_attached"},
            "timestamp": datetime.now(UTC).isoformat(),
        }
        return JSONResponse(content=payload, status_code=503)

    routines = application.routines
    routines_ok = routines is not None and routines.running
    ready = application.state == AppState.STARTED and routines_ok

    payload = {
        "status": "ready" if ready else "not_ready",
        "state": str(application.state),
        "checks": {
            "event_routines": "ok" if routines_ok else "failed",
            "active_sessions": len(application.subsystems.active_sessions()),
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if not ready:
        logger.warning(
            "readiness_check_failed",
            extra={"state": str(application.state), "event_routines_ok": routines_ok},
        )
    return JSONResponse(content=payload, status_code=200 if ready else 503)
