"""Application: controlador de ciclo de vida e bootstrap de sessões.

Responsabilidades:
- Ordem de start dos subsistemas: métricas → rotinas de evento → servidor,
  e só então o heartbeat de liveness (record_up)
- Ponto de encontro do shutdown (listen_for_shutdown)
- Bootstrap: lote de SessionRequest → sessões rodando com HeuristicID

A instância é explícita: construída no composition root (app.bootstrap)
e passada por referência para a API e para o entrypoint.

Ciclo de vida:
    constructed --start()--> started --sinal--> shutting_down
        --on_shutdown() retorna--> stopped
    stop() também termina em stopped, mesmo com etapas que falham.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from app.domain.identifiers import HeuristicID
from app.lifecycle.shutdown import PROGRAMMATIC, ShutdownToken
from app.lifecycle.state import AppState
from app.observability import correlation_scope
from config.settings.bootstrap import PartialFailurePolicy
from utils.errors import BootstrapStageError, LifecycleError, StartError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from app.domain.sessions import SessionRequest
    from app.protocols import (
        ApiServerProtocol,
        EventRoutinesHandle,
        MetricsEmitterProtocol,
        SubsystemManagerProtocol,
    )
    from config.settings import AppConfig

logger = logging.getLogger(__name__)


class BootstrapStage(StrEnum):
    """Estágios do bootstrap de uma requisição, na ordem de execução."""

    PIPELINE_CONFIG = "pipeline_config"
    SESSION_CONFIG = "session_config"
    DEPLOY_CONFIG = "deploy_config"
    RUN_SESSION = "run_session"


class Application:
    """Controlador do processo vigia."""

    def __init__(
        self,
        config: AppConfig,
        subsystems: SubsystemManagerProtocol,
        server: ApiServerProtocol,
        metrics: MetricsEmitterProtocol,
        token: ShutdownToken | None = None,
    ) -> None:
        self.config = config
        self.subsystems = subsystems
        self._server = server
        self._metrics = metrics
        self._token = token or ShutdownToken()
        self._state = AppState.CONSTRUCTED
        self._routines: EventRoutinesHandle | None = None
        self._bootstrap_lock = asyncio.Lock()
        self._stopped = False

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def token(self) -> ShutdownToken:
        return self._token

    @property
    def routines(self) -> EventRoutinesHandle | None:
        return self._routines

    # ──────────────────────────────────────────────────────────────────────
    # Start
    # ──────────────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Sobe os subsistemas na ordem fixa e emite o heartbeat de liveness.

        A ordem é contrato: as métricas precisam estar prontas antes de quem
        reporta por elas, e as rotinas de evento antes do servidor aceitar
        requests que disparam bootstrap.

        Raises:
            StartError: Alguma etapa falhou; não há rollback parcial.
            LifecycleError: start() já foi chamado.
        """
        if self._state != AppState.CONSTRUCTED:
            raise LifecycleError(f"start() chamado no estado {self._state}")

        logger.info("app_starting", extra={"component": "app"})
        try:
            await self._start_step("metrics", self._start_metrics)
            await self._start_step("event_routines", self._start_event_routines)
            await self._start_step("server", self._server.start)
        except StartError:
            self._state = AppState.FAILED
            raise

        self._state = AppState.STARTED
        self._metrics.record_up()
        logger.info("app_started", extra={"component": "app"})

    async def _start_step(self, step: str, action: Callable[[], Any]) -> None:
        try:
            result = action()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.error(
                "app_start_failed",
                extra={"component": "app", "step": step, "error_type": type(exc).__name__},
            )
            raise StartError(step, f"Falha ao iniciar '{step}': {exc}") from exc
        logger.info("app_start_step_completed", extra={"component": "app", "step": step})

    def _start_metrics(self) -> None:
        self._metrics.start()

    def _start_event_routines(self) -> None:
        self._routines = self.subsystems.start_event_routines(self._token)

    # ──────────────────────────────────────────────────────────────────────
    # Shutdown
    # ──────────────────────────────────────────────────────────────────────

    def request_shutdown_channel(self) -> ShutdownToken:
        """Instala handlers de SIGINT/SIGTERM e devolve o token único.

        O fan-out de sinais é do processo, não do assinante: chamadas
        repetidas devolvem o mesmo token.
        """
        self._token.install_signal_handlers(asyncio.get_running_loop())
        return self._token

    def request_stop(self, reason: str = PROGRAMMATIC) -> bool:
        """Dispara o shutdown programaticamente."""
        return self._token.trigger(reason)

    async def listen_for_shutdown(
        self,
        on_shutdown: Callable[[], Awaitable[None] | None],
    ) -> None:
        """Bloqueia até o sinal de término e então executa on_shutdown uma vez.

        Deve ser a última chamada do caminho principal.
        """
        token = self.request_shutdown_channel()
        received = await token.wait()

        logger.info(
            "shutdown_signal_received",
            extra={"component": "app", "signal": received.name},
        )
        self._state = AppState.SHUTTING_DOWN
        try:
            result = on_shutdown()
            if inspect.isawaitable(result):
                await result
        finally:
            self._state = AppState.STOPPED
            token.remove_signal_handlers()
            logger.info("app_stopped", extra={"component": "app", "signal": received.name})

    async def stop(self) -> None:
        """Teardown coordenado: servidor, rotinas de evento, sessões, métricas.

        Idempotente. Dispara o token para que rotinas e esperas em
        andamento observem o cancelamento. Uma etapa que falha não impede
        as seguintes; o primeiro erro é relançado ao final.
        """
        if self._stopped:
            return
        self._stopped = True
        self._token.trigger(PROGRAMMATIC)
        if self._state == AppState.STARTED:
            self._state = AppState.SHUTTING_DOWN

        settings = self.config.bootstrap
        errors: list[Exception] = []
        await self._teardown_step("server", self._stop_server, errors)
        await self._teardown_step("event_routines", self._stop_event_routines, errors)
        if settings.stop_sessions_on_shutdown:
            await self._teardown_step("sessions", self._stop_active_sessions, errors)
        await self._teardown_step("metrics", self._metrics.stop, errors)

        self._state = AppState.STOPPED
        logger.info(
            "app_teardown_completed",
            extra={"component": "app", "failed_steps": len(errors)},
        )
        if errors:
            raise errors[0]

    async def _teardown_step(
        self,
        step: str,
        action: Callable[[], Any],
        errors: list[Exception],
    ) -> None:
        try:
            result = action()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            errors.append(exc)
            logger.error(
                "app_teardown_step_failed",
                extra={"component": "app", "step": step, "error_type": type(exc).__name__},
            )

    async def _stop_server(self) -> None:
        if self._server.running:
            await self._server.stop()

    async def _stop_event_routines(self) -> None:
        if self._routines is None:
            return
        self._routines.cancel()
        await self._routines.join(
            timeout_seconds=self.config.bootstrap.shutdown_timeout_seconds
        )

    async def _stop_active_sessions(self) -> None:
        # Serializa com bootstraps em andamento
        async with self._bootstrap_lock:
            stopped = await self.subsystems.stop_all_sessions()
        if stopped:
            logger.info(
                "sessions_stopped_on_shutdown",
                extra={"component": "app", "count": len(stopped)},
            )

    # ──────────────────────────────────────────────────────────────────────
    # Bootstrap
    # ──────────────────────────────────────────────────────────────────────

    async def bootstrap(self, requests: Sequence[SessionRequest]) -> list[HeuristicID]:
        """Converte um lote de SessionRequest em sessões rodando.

        Processa em ordem de entrada, sequencialmente; requisições
        posteriores podem depender de pipelines registrados pelas anteriores.
        Chamadas concorrentes são serializadas por um lock interno.

        Returns:
            Um HeuristicID por requisição, na ordem de entrada.

        Raises:
            BootstrapStageError: Primeira requisição que falhou, com índice e
                estágio. Sessões anteriores do lote seguem a política
                BOOTSTRAP_ON_PARTIAL_FAILURE.
            LifecycleError: Shutdown já iniciado.
        """
        async with self._bootstrap_lock:
            if self._stopped or self._state in (AppState.SHUTTING_DOWN, AppState.STOPPED):
                raise LifecycleError(f"bootstrap recusado no estado {self._state}")
            if not requests:
                return []

            with correlation_scope() as correlation_id:
                started_at = time.perf_counter()
                try:
                    return await self._bootstrap_batch(requests, correlation_id)
                finally:
                    self._metrics.record_bootstrap_duration(time.perf_counter() - started_at)

    async def _bootstrap_batch(
        self,
        requests: Sequence[SessionRequest],
        correlation_id: str,
    ) -> list[HeuristicID]:
        ids: list[HeuristicID] = []
        for index, request in enumerate(requests):
            try:
                heuristic_id = await self._bootstrap_one(request)
            except _StageFailure as failure:
                self._metrics.record_bootstrap_failure(failure.stage)
                raise await self._handle_partial_failure(
                    index=index,
                    stage=failure.stage,
                    cause=failure.cause,
                    completed=ids,
                    correlation_id=correlation_id,
                ) from failure.cause

            ids.append(heuristic_id)
            logger.info(
                "heuristic_session_started",
                extra={
                    "component": "bootstrap",
                    "index": index,
                    "session_id": str(heuristic_id.session_id),
                    "pipeline_id": str(heuristic_id.pipeline_id),
                },
            )
            self._metrics.record_session_started(
                heuristic_id.session_id.network,
                heuristic_id.session_id.heuristic_type,
            )

        if ids:
            logger.info(
                "bootstrap_completed",
                extra={"component": "bootstrap", "sessions": len(ids)},
            )
        return ids

    async def _bootstrap_one(self, request: SessionRequest) -> HeuristicID:
        stage = BootstrapStage.PIPELINE_CONFIG
        try:
            pipeline_config = self.subsystems.build_pipeline_config(request)

            stage = BootstrapStage.SESSION_CONFIG
            session_config = request.session_config()

            stage = BootstrapStage.DEPLOY_CONFIG
            deploy_config = self.subsystems.build_deploy_config(pipeline_config, session_config)

            stage = BootstrapStage.RUN_SESSION
            session_id = await self.subsystems.run_session(deploy_config)
        except Exception as exc:
            raise _StageFailure(stage, exc) from exc

        return HeuristicID(session_id=session_id, pipeline_id=deploy_config.pipeline_id)

    async def _handle_partial_failure(
        self,
        *,
        index: int,
        stage: str,
        cause: Exception,
        completed: list[HeuristicID],
        correlation_id: str,
    ) -> BootstrapStageError:
        policy = self.config.bootstrap.on_partial_failure
        logger.warning(
            "bootstrap_stage_failed",
            extra={
                "component": "bootstrap",
                "index": index,
                "stage": stage,
                "error_type": type(cause).__name__,
                "completed": len(completed),
                "policy": str(policy),
                "correlation_id": correlation_id,
            },
        )
        if policy != PartialFailurePolicy.ROLLBACK_ALL or not completed:
            return BootstrapStageError(index=index, stage=stage, cause=cause, completed=completed)

        # Rollback em ordem reversa; falhas não interrompem o restante
        rolled_back: list[HeuristicID] = []
        rollback_failed: list[HeuristicID] = []
        for heuristic_id in reversed(completed):
            log_extra = {
                "component": "bootstrap",
                "session_id": str(heuristic_id.session_id),
                "pipeline_id": str(heuristic_id.pipeline_id),
            }
            try:
                await self.subsystems.stop_session(heuristic_id.session_id)
            except Exception as exc:
                rollback_failed.append(heuristic_id)
                logger.error(
                    "heuristic_session_rollback_failed",
                    extra={**log_extra, "error_type": type(exc).__name__},
                )
                continue
            rolled_back.append(heuristic_id)
            logger.info("heuristic_session_rolled_back", extra=log_extra)

        # Listas na ordem de entrada do lote
        return BootstrapStageError(
            index=index,
            stage=stage,
            cause=cause,
            rolled_back=rolled_back[::-1],
            rollback_failed=rollback_failed[::-1],
        )


class _StageFailure(Exception):
    def __init__(self, stage: BootstrapStage, cause: Exception) -> None:
        super().__init__(str(cause))
        self.stage = stage
        self.cause = cause
