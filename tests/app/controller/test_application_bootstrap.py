"""Testes do bootstrap de lotes de sessões na Application.

Testa:
    - Ordem dos estágios por requisição e entre requisições
    - Correlação HeuristicID ↔ identificadores devolvidos pelos estágios
    - Lote vazio
    - Falha parcial com keep_started e rollback_all
    - Bootstrap recusado após shutdown
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from app.controller import Application, BootstrapStage
from app.domain.sessions import SessionRequest
from config.settings import AppConfig, BootstrapSettings, PartialFailurePolicy
from tests.fakes.fake_subsystems import FakeMetricsEmitter, FakeServer, FakeSubsystemManager
from utils.errors import (
    BootstrapStageError,
    DeploymentConfigError,
    LifecycleError,
    SessionCapacityError,
)


def _request(heuristic_type: str = "contract_event", network: str = "layer1") -> SessionRequest:
    return SessionRequest(
        network=network,
        heuristic_type=heuristic_type,
        heuristic_params={"address": "0xabc", "signatures": ["Transfer(address,address,uint256)"]},
    )


def _build_application(
    subsystems: FakeSubsystemManager,
    metrics: FakeMetricsEmitter,
    policy: PartialFailurePolicy = PartialFailurePolicy.KEEP_STARTED,
) -> Application:
    config = AppConfig(bootstrap=BootstrapSettings(on_partial_failure=policy))
    return Application(
        config=config,
        subsystems=subsystems,
        server=FakeServer(),
        metrics=metrics,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def subsystems() -> FakeSubsystemManager:
    return FakeSubsystemManager()


@pytest.fixture
def metrics() -> FakeMetricsEmitter:
    return FakeMetricsEmitter()


@pytest.fixture
def application(subsystems: FakeSubsystemManager, metrics: FakeMetricsEmitter) -> Application:
    return _build_application(subsystems, metrics)


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Sucesso
# ──────────────────────────────────────────────────────────────────────────────


class TestBootstrapSuccess:
    """Lote completo devolve um HeuristicID por requisição, em ordem."""

    @pytest.mark.asyncio
    async def test_stages_run_in_order_per_request(
        self, application: Application, subsystems: FakeSubsystemManager
    ) -> None:
        await application.bootstrap([_request(), _request("large_withdrawal")])

        stage_calls = ["build_pipeline_config", "build_deploy_config", "run_session"]
        assert subsystems.calls == [f"subsystems.{name}" for name in stage_calls * 2]

    @pytest.mark.asyncio
    async def test_ids_correlate_with_collaborator_results(
        self, application: Application, subsystems: FakeSubsystemManager
    ) -> None:
        requests = [_request(), _request("large_withdrawal", "layer2")]

        ids = await application.bootstrap(requests)

        assert len(ids) == 2
        deployments = subsystems.deployments()
        for heuristic_id, request in zip(ids, requests, strict=True):
            deploy = deployments[heuristic_id.session_id]
            assert heuristic_id.pipeline_id == deploy.pipeline_id
            assert heuristic_id.session_id.heuristic_type == request.heuristic_type
            assert heuristic_id.session_id.network == request.network

    @pytest.mark.asyncio
    async def test_ids_are_distinct_across_requests(self, application: Application) -> None:
        ids = await application.bootstrap([_request(), _request(), _request()])

        assert len({hid.session_id for hid in ids}) == 3

    @pytest.mark.asyncio
    async def test_success_records_metrics_and_logs(
        self,
        application: Application,
        metrics: FakeMetricsEmitter,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO, logger="app.controller")

        await application.bootstrap([_request()])

        assert metrics.sessions_started == [("layer1", "contract_event")]
        assert len(metrics.bootstrap_durations) == 1
        started = [r for r in caplog.records if r.getMessage() == "heuristic_session_started"]
        assert len(started) == 1
        assert started[0].index == 0

    @pytest.mark.asyncio
    async def test_empty_batch_returns_empty_without_calls(
        self,
        application: Application,
        subsystems: FakeSubsystemManager,
        metrics: FakeMetricsEmitter,
    ) -> None:
        assert await application.bootstrap([]) == []
        assert subsystems.calls == []
        assert metrics.bootstrap_durations == []

    @pytest.mark.asyncio
    async def test_bootstrap_before_start_is_allowed(self, application: Application) -> None:
        ids = await application.bootstrap([_request()])

        assert len(ids) == 1


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Falha parcial
# ──────────────────────────────────────────────────────────────────────────────


class TestBootstrapFailure:
    """Primeira falha encerra o lote com índice e estágio."""

    @pytest.mark.asyncio
    async def test_failure_at_deploy_stage_of_second_request(
        self,
        application: Application,
        subsystems: FakeSubsystemManager,
        metrics: FakeMetricsEmitter,
    ) -> None:
        subsystems.fail("build_deploy_config", 1, DeploymentConfigError("network mismatch"))

        with pytest.raises(BootstrapStageError) as exc_info:
            await application.bootstrap([_request(), _request(), _request()])

        error = exc_info.value
        assert error.index == 1
        assert error.stage == BootstrapStage.DEPLOY_CONFIG
        assert isinstance(error.cause, DeploymentConfigError)
        assert error.__cause__ is error.cause
        assert subsystems.count("build_pipeline_config") == 2
        assert subsystems.count("build_deploy_config") == 2
        assert subsystems.count("run_session") == 1
        assert len(error.completed) == 1
        assert error.rolled_back == []
        assert metrics.bootstrap_failures == ["deploy_config"]

    @pytest.mark.asyncio
    async def test_keep_started_leaves_earlier_sessions_running(
        self, application: Application, subsystems: FakeSubsystemManager
    ) -> None:
        subsystems.fail("run_session", 2, SessionCapacityError("full"))

        with pytest.raises(BootstrapStageError) as exc_info:
            await application.bootstrap([_request(), _request(), _request()])

        assert exc_info.value.stage == BootstrapStage.RUN_SESSION
        assert len(subsystems.active_sessions()) == 2
        assert subsystems.stopped == []

    @pytest.mark.asyncio
    async def test_failure_at_first_stage_has_no_later_calls(
        self, application: Application, subsystems: FakeSubsystemManager
    ) -> None:
        subsystems.fail("build_pipeline_config", 0, ValueError("bad params"))

        with pytest.raises(BootstrapStageError) as exc_info:
            await application.bootstrap([_request(), _request()])

        assert exc_info.value.index == 0
        assert exc_info.value.stage == BootstrapStage.PIPELINE_CONFIG
        assert subsystems.calls == ["subsystems.build_pipeline_config"]

    @pytest.mark.asyncio
    async def test_rollback_all_stops_completed_sessions_in_reverse(
        self, subsystems: FakeSubsystemManager, metrics: FakeMetricsEmitter
    ) -> None:
        application = _build_application(
            subsystems, metrics, policy=PartialFailurePolicy.ROLLBACK_ALL
        )
        subsystems.fail("run_session", 2, RuntimeError("pipeline crashed"))

        with pytest.raises(BootstrapStageError) as exc_info:
            await application.bootstrap([_request(), _request(), _request()])

        error = exc_info.value
        assert error.completed == []
        assert len(error.rolled_back) == 2
        assert subsystems.stopped == [
            error.rolled_back[1].session_id,
            error.rolled_back[0].session_id,
        ]
        assert subsystems.active_sessions() == {}

    @pytest.mark.asyncio
    async def test_rollback_failure_keeps_stage_error_and_continues(
        self, subsystems: FakeSubsystemManager, metrics: FakeMetricsEmitter
    ) -> None:
        application = _build_application(
            subsystems, metrics, policy=PartialFailurePolicy.ROLLBACK_ALL
        )
        subsystems.fail("run_session", 2, SessionCapacityError("full"))
        subsystems.fail("stop_session", 0, RuntimeError("stop failed"))

        with pytest.raises(BootstrapStageError) as exc_info:
            await application.bootstrap([_request(), _request(), _request()])

        error = exc_info.value
        assert error.index == 2
        assert error.stage == BootstrapStage.RUN_SESSION
        assert isinstance(error.cause, SessionCapacityError)
        assert subsystems.count("stop_session") == 2
        assert len(error.rolled_back) == 1
        assert len(error.rollback_failed) == 1
        assert subsystems.stopped == [error.rolled_back[0].session_id]
        assert list(subsystems.active_sessions()) == [error.rollback_failed[0].session_id]

        payload = error.as_dict()
        assert payload["rollback_failed"] == [error.rollback_failed[0].to_dict()]

    @pytest.mark.asyncio
    async def test_error_as_dict_serializes_identifiers(
        self, application: Application, subsystems: FakeSubsystemManager
    ) -> None:
        subsystems.fail("run_session", 1, SessionCapacityError("full"))

        with pytest.raises(BootstrapStageError) as exc_info:
            await application.bootstrap([_request(), _request()])

        payload = exc_info.value.as_dict()
        assert payload["index"] == 1
        assert payload["stage"] == "run_session"
        assert payload["error_type"] == "SessionCapacityError"
        assert payload["completed"][0]["session_id"].startswith("layer1:live:contract_event::")


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Ciclo de vida
# ──────────────────────────────────────────────────────────────────────────────


class TestBootstrapLifecycle:
    @pytest.mark.asyncio
    async def test_bootstrap_after_stop_is_refused(
        self, application: Application, subsystems: FakeSubsystemManager
    ) -> None:
        await application.stop()
        calls_before = list(subsystems.calls)

        with pytest.raises(LifecycleError):
            await application.bootstrap([_request()])
        assert subsystems.calls == calls_before

    @pytest.mark.asyncio
    async def test_concurrent_batches_do_not_interleave(
        self, application: Application, subsystems: FakeSubsystemManager
    ) -> None:
        await asyncio.gather(
            application.bootstrap([_request(), _request()]),
            application.bootstrap([_request(), _request()]),
        )

        stage_calls = [
            "subsystems.build_pipeline_config",
            "subsystems.build_deploy_config",
            "subsystems.run_session",
        ]
        assert subsystems.calls == stage_calls * 4
        assert len(subsystems.active_sessions()) == 4
