"""Endpoints de sessões de heurística.

Endpoints:
- POST /v0/sessions: bootstrap de um lote de sessões
- GET /v0/sessions: sessões ativas

O formato de entrada/saída espelha o contrato do bootstrap: um
HeuristicID por requisição, na ordem de entrada; em falha, o índice e
o estágio da requisição que falhou.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.dependencies import get_application
from api.routes.sessions.models import (
    BootstrapRequestBody,
    BootstrapResponse,
    HeuristicIDModel,
    SessionInfo,
    SessionListResponse,
)
from app.controller import Application
from utils.errors import (
    BootstrapStageError,
    DeploymentConfigError,
    InvalidSessionRequestError,
    LifecycleError,
    SessionCapacityError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ApplicationDep = Annotated[Application, Depends(get_application)]


def _status_for(error: BootstrapStageError) -> int:
    if isinstance(error.cause, (InvalidSessionRequestError, DeploymentConfigError, ValueError)):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error.cause, SessionCapacityError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@router.post("/sessions", response_model=BootstrapResponse)
async def bootstrap_sessions(
    body: BootstrapRequestBody,
    application: ApplicationDep,
) -> BootstrapResponse | JSONResponse:
    """Inicia o lote de sessões via Application.bootstrap()."""
    try:
        heuristic_ids = await application.bootstrap(body.sessions)
    except BootstrapStageError as exc:
        status_code = _status_for(exc)
        logger.warning(
            "api_bootstrap_failed",
            extra={"index": exc.index, "stage": str(exc.stage), "status_code": status_code},
        )
        return JSONResponse(content={"error": exc.as_dict()}, status_code=status_code)
    except LifecycleError as exc:
        return JSONResponse(
            content={"error": {"stage": "lifecycle", "error": str(exc)}},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    logger.info("api_bootstrap_completed", extra={"sessions": len(heuristic_ids)})
    return BootstrapResponse(
        heuristic_ids=[HeuristicIDModel(**hid.to_dict()) for hid in heuristic_ids],
    )


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(application: ApplicationDep) -> SessionListResponse:
    """Lista as sessões ativas."""
    sessions: list[SessionInfo] = []
    for session_id, deploy in application.subsystems.deployments().items():
        session_config = deploy.session_config
        sessions.append(
            SessionInfo(
                session_id=str(session_id),
                pipeline_id=str(deploy.pipeline_id),
                network=str(session_config.network),
                pipeline_type=str(session_config.pipeline_type),
                heuristic_type=str(session_config.heuristic_type),
                alert_destination=str(session_config.alert_policy.destination),
                stateful=deploy.stateful,
            )
        )
    return SessionListResponse(sessions=sessions)
