"""Protocolo do SubsystemManager.

A Application depende deste contrato em vez da implementação concreta.
Os quatro estágios delegados do bootstrap passam por aqui.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.identifiers import PipelineID, SessionID
    from app.domain.sessions import (
        DeploymentConfig,
        PipelineConfig,
        SessionConfig,
        SessionRequest,
    )
    from app.lifecycle.shutdown import ShutdownToken


class EventRoutinesHandle(Protocol):
    """Handle das rotinas de evento em background (cancelável e aguardável)."""

    @property
    def running(self) -> bool: ...

    def cancel(self) -> None: ...

    async def join(self, timeout_seconds: float | None = None) -> None: ...


class SubsystemManagerProtocol(Protocol):
    """Contrato do gerenciador de pipelines e sessões."""

    def build_pipeline_config(self, request: SessionRequest) -> PipelineConfig: ...

    def build_deploy_config(
        self,
        pipeline_config: PipelineConfig,
        session_config: SessionConfig,
    ) -> DeploymentConfig: ...

    async def run_session(self, deploy_config: DeploymentConfig) -> SessionID: ...

    async def stop_session(self, session_id: SessionID) -> None: ...

    async def stop_all_sessions(self) -> list[SessionID]: ...

    def start_event_routines(self, token: ShutdownToken) -> EventRoutinesHandle: ...

    def active_sessions(self) -> dict[SessionID, PipelineID]: ...

    def deployments(self) -> dict[SessionID, DeploymentConfig]: ...
