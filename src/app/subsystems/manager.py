"""Gerenciador de subsistemas: pipelines, sessões e rotinas de evento.

Implementação in-process do SubsystemManagerProtocol. Mantém o registro
de pipelines e sessões ativas e publica eventos de ciclo de vida numa
fila interna consumida pelas rotinas de background.

Política de compartilhamento de pipelines:
    - live: configurações idênticas (PipelineConfig.key()) reaproveitam o
      PipelineID já registrado
    - backtest: sempre um pipeline novo por deploy
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from app.domain.identifiers import PipelineID, SessionID
from app.domain.sessions import (
    ClientConfig,
    DeploymentConfig,
    PipelineConfig,
    PipelineType,
    SessionConfig,
    SessionRequest,
)
from app.subsystems.registry import get_heuristic_spec, missing_params
from app.subsystems.routines import EventRoutines
from utils.errors import (
    DeploymentConfigError,
    InvalidSessionRequestError,
    SessionCapacityError,
    UnknownSessionError,
)

if TYPE_CHECKING:
    from app.lifecycle.shutdown import ShutdownToken
    from app.protocols.metrics import MetricsEmitterProtocol
    from config.settings.subsystems import SubsystemSettings

logger = logging.getLogger(__name__)

SESSION_STARTED = "session_started"
SESSION_STOPPED = "session_stopped"


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """Evento de ciclo de vida publicado na fila interna."""

    kind: str
    session_id: SessionID
    pipeline_id: PipelineID


@dataclass(slots=True)
class _PipelineEntry:
    config: PipelineConfig
    sessions: set[SessionID] = field(default_factory=set)


class SubsystemManager:
    """Gerenciador de pipelines e sessões de heurística."""

    def __init__(
        self,
        settings: SubsystemSettings,
        metrics: MetricsEmitterProtocol | None = None,
    ) -> None:
        self._settings = settings
        self._metrics = metrics
        self._pipelines: dict[PipelineID, _PipelineEntry] = {}
        self._live_index: dict[tuple[object, ...], PipelineID] = {}
        self._sessions: dict[SessionID, DeploymentConfig] = {}
        self._events: asyncio.Queue[SessionEvent] = asyncio.Queue(
            maxsize=settings.event_queue_size
        )
        self._routines: EventRoutines | None = None

    # ──────────────────────────────────────────────────────────────────────
    # Estágios do bootstrap
    # ──────────────────────────────────────────────────────────────────────

    def build_pipeline_config(self, request: SessionRequest) -> PipelineConfig:
        """Deriva a topologia de pipeline necessária para a requisição.

        Raises:
            InvalidSessionRequestError: Heurística desconhecida ou parâmetros ausentes.
        """
        spec = get_heuristic_spec(request.heuristic_type)
        missing = missing_params(request.heuristic_type, request.heuristic_params)
        if missing:
            raise InvalidSessionRequestError(
                f"Parâmetros obrigatórios ausentes para {request.heuristic_type}: "
                f"{', '.join(missing)}"
            )

        network = self._settings.network(request.network)
        return PipelineConfig(
            network=request.network,
            pipeline_type=request.pipeline_type,
            data_type=spec.data_type,
            client=ClientConfig(
                poll_interval_ms=network.poll_interval_ms,
                num_retries=network.num_retries,
                start_height=request.start_height,
                end_height=request.end_height,
            ),
        )

    def build_deploy_config(
        self,
        pipeline_config: PipelineConfig,
        session_config: SessionConfig,
    ) -> DeploymentConfig:
        """Combina pipeline e sessão e atribui o PipelineID.

        Raises:
            DeploymentConfigError: Configurações incompatíveis entre si.
        """
        if pipeline_config.network != session_config.network:
            raise DeploymentConfigError(
                f"Rede do pipeline ({pipeline_config.network}) difere da sessão "
                f"({session_config.network})"
            )
        if pipeline_config.pipeline_type != session_config.pipeline_type:
            raise DeploymentConfigError(
                f"Tipo de pipeline ({pipeline_config.pipeline_type}) difere da sessão "
                f"({session_config.pipeline_type})"
            )
        spec = get_heuristic_spec(session_config.heuristic_type)
        if spec.data_type != pipeline_config.data_type:
            raise DeploymentConfigError(
                f"{session_config.heuristic_type} consome {spec.data_type}, "
                f"pipeline entrega {pipeline_config.data_type}"
            )

        pipeline_id = self._resolve_pipeline_id(pipeline_config)
        state_key = f"{pipeline_id}:{session_config.heuristic_type}" if spec.stateful else ""
        return DeploymentConfig(
            pipeline_id=pipeline_id,
            pipeline_config=pipeline_config,
            session_config=session_config,
            stateful=spec.stateful,
            state_key=state_key,
        )

    def _resolve_pipeline_id(self, pipeline_config: PipelineConfig) -> PipelineID:
        if pipeline_config.pipeline_type == PipelineType.LIVE:
            existing = self._live_index.get(pipeline_config.key())
            if existing is not None:
                logger.debug("pipeline_reused", extra={"pipeline_id": str(existing)})
                return existing
        return PipelineID.new(
            pipeline_config.network,
            pipeline_config.pipeline_type,
            pipeline_config.data_type,
        )

    async def run_session(self, deploy_config: DeploymentConfig) -> SessionID:
        """Registra e inicia a sessão descrita pelo deploy.

        Raises:
            SessionCapacityError: MAX_SESSIONS atingido.
            DeploymentConfigError: PipelineID conflita com um pipeline já registrado.
        """
        if len(self._sessions) >= self._settings.max_sessions:
            raise SessionCapacityError(
                f"Limite de sessões ativas atingido ({self._settings.max_sessions})"
            )

        pipeline_id = deploy_config.pipeline_id
        pipeline_config = deploy_config.pipeline_config
        entry = self._pipelines.get(pipeline_id)
        if entry is not None and entry.config.key() != pipeline_config.key():
            raise DeploymentConfigError(
                f"PipelineID {pipeline_id} já registrado com outra configuração"
            )
        if pipeline_config.pipeline_type == PipelineType.LIVE:
            indexed = self._live_index.get(pipeline_config.key())
            if indexed is not None and indexed != pipeline_id:
                raise DeploymentConfigError(
                    f"Pipeline live equivalente já registrado como {indexed}"
                )

        session_config = deploy_config.session_config
        session_id = SessionID.new(
            session_config.network,
            session_config.pipeline_type,
            session_config.heuristic_type,
        )
        if entry is None:
            entry = _PipelineEntry(config=pipeline_config)
            self._pipelines[pipeline_id] = entry
            if pipeline_config.pipeline_type == PipelineType.LIVE:
                self._live_index[pipeline_config.key()] = pipeline_id
            logger.info("pipeline_registered", extra={"pipeline_id": str(pipeline_id)})

        entry.sessions.add(session_id)
        self._sessions[session_id] = deploy_config
        self._publish(SessionEvent(SESSION_STARTED, session_id, pipeline_id))
        return session_id

    async def stop_session(self, session_id: SessionID) -> None:
        """Para a sessão e libera o pipeline quando ela era a última.

        Raises:
            UnknownSessionError: Sessão não registrada.
        """
        deploy_config = self._sessions.pop(session_id, None)
        if deploy_config is None:
            raise UnknownSessionError(f"Sessão desconhecida: {session_id}")

        pipeline_id = deploy_config.pipeline_id
        entry = self._pipelines.get(pipeline_id)
        if entry is not None:
            entry.sessions.discard(session_id)
            if not entry.sessions:
                del self._pipelines[pipeline_id]
                key = entry.config.key()
                if self._live_index.get(key) == pipeline_id:
                    del self._live_index[key]
                logger.info("pipeline_released", extra={"pipeline_id": str(pipeline_id)})

        self._publish(SessionEvent(SESSION_STOPPED, session_id, pipeline_id))

    async def stop_all_sessions(self) -> list[SessionID]:
        """Para todas as sessões ativas (ordem reversa de início)."""
        stopped: list[SessionID] = []
        for session_id in reversed(list(self._sessions)):
            await self.stop_session(session_id)
            stopped.append(session_id)
        return stopped

    # ──────────────────────────────────────────────────────────────────────
    # Consultas
    # ──────────────────────────────────────────────────────────────────────

    def active_sessions(self) -> dict[SessionID, PipelineID]:
        return {sid: deploy.pipeline_id for sid, deploy in self._sessions.items()}

    def pipeline_for(self, session_id: SessionID) -> PipelineID | None:
        """PipelineID que alimenta a sessão (None se não registrada)."""
        deploy_config = self._sessions.get(session_id)
        return deploy_config.pipeline_id if deploy_config is not None else None

    def deployments(self) -> dict[SessionID, DeploymentConfig]:
        return dict(self._sessions)

    def sessions_for(self, pipeline_id: PipelineID) -> set[SessionID]:
        entry = self._pipelines.get(pipeline_id)
        return set(entry.sessions) if entry is not None else set()

    @property
    def pipeline_count(self) -> int:
        return len(self._pipelines)

    # ──────────────────────────────────────────────────────────────────────
    # Rotinas de evento
    # ──────────────────────────────────────────────────────────────────────

    def start_event_routines(self, token: ShutdownToken) -> EventRoutines:
        """Inicia as rotinas de background; terminam quando o token dispara.

        Deve ser chamado com o event loop rodando.
        """
        routines = EventRoutines()
        routines.spawn("session_events", self._event_loop(token))
        routines.spawn("heartbeat", self._heartbeat_loop(token))
        self._routines = routines
        return routines

    def _publish(self, event: SessionEvent) -> None:
        try:
            self._events.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "session_event_dropped",
                extra={
                    "event": event.kind,
                    "session_id": str(event.session_id),
                    "queue_size": self._events.qsize(),
                },
            )

    async def _event_loop(self, token: ShutdownToken) -> None:
        stop = asyncio.create_task(token.wait())
        try:
            while True:
                get = asyncio.create_task(self._events.get())
                done, _ = await asyncio.wait({get, stop}, return_when=asyncio.FIRST_COMPLETED)
                if get not in done:
                    get.cancel()
                    break
                self._handle_event(get.result())
            while not self._events.empty():
                self._handle_event(self._events.get_nowait())
        finally:
            stop.cancel()

    def _handle_event(self, event: SessionEvent) -> None:
        logger.info(
            event.kind,
            extra={
                "session_id": str(event.session_id),
                "pipeline_id": str(event.pipeline_id),
                "active_sessions": len(self._sessions),
            },
        )
        if self._metrics is not None:
            self._metrics.set_active_sessions(len(self._sessions))

    async def _heartbeat_loop(self, token: ShutdownToken) -> None:
        interval = self._settings.heartbeat_interval_seconds
        while not token.triggered:
            if self._metrics is not None:
                self._metrics.set_active_sessions(len(self._sessions))
            logger.debug(
                "subsystems_heartbeat",
                extra={
                    "active_sessions": len(self._sessions),
                    "pipelines": len(self._pipelines),
                },
            )
            try:
                await asyncio.wait_for(token.wait(), timeout=interval)
            except TimeoutError:
                continue
