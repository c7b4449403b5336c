"""Schemas de request/response das rotas de sessão."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.domain.sessions import SessionRequest  # noqa: TC001 - usado em runtime pelo schema do Pydantic


class BootstrapRequestBody(BaseModel):
    """Lote de sessões a iniciar, processado em ordem."""

    model_config = ConfigDict(extra="forbid")

    sessions: list[SessionRequest] = Field(default_factory=list)


class HeuristicIDModel(BaseModel):
    session_id: str
    pipeline_id: str


class BootstrapResponse(BaseModel):
    heuristic_ids: list[HeuristicIDModel]


class SessionInfo(BaseModel):
    """Sessão ativa no SubsystemManager."""

    session_id: str
    pipeline_id: str
    network: str
    pipeline_type: str
    heuristic_type: str
    alert_destination: str
    stateful: bool


class SessionListResponse(BaseModel):
    sessions: list[SessionInfo]
