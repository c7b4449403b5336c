"""Testes do entrypoint do processo."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app import main as main_module
from app.domain.identifiers import HeuristicID, PipelineID, SessionID
from app.domain.sessions import SessionRequest
from utils.errors import BootstrapStageError, StartError


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch.object(main_module, "initialize_app"):
        yield


def test_invalid_log_level_exits_with_failure(capsys: pytest.CaptureFixture[str]) -> None:
    with patch.object(main_module, "initialize_app", side_effect=ValueError("Nível de log inválido")):
        assert main_module.main(["--log-level", "LOUD"]) == main_module.EXIT_FAILURE

    assert "configuração inválida" in capsys.readouterr().err


def test_cli_overrides_are_applied() -> None:
    args = main_module._parse_args(["--bootstrap-path", "/tmp/s.yaml", "--log-level", "debug"])

    config = main_module._load_config(args)

    assert config.bootstrap.bootstrap_path == "/tmp/s.yaml"
    assert config.base.log_level == "DEBUG"


def test_start_error_exits_with_failure() -> None:
    application = MagicMock()

    async def _run(_: object) -> None:
        raise StartError("server", "bind failed")

    with (
        patch.object(main_module, "build_application", return_value=application),
        patch.object(main_module, "_run", _run),
    ):
        assert main_module.main([]) == main_module.EXIT_FAILURE


def test_bootstrap_error_exits_with_failure() -> None:
    error = BootstrapStageError(index=0, stage="run_session", cause=RuntimeError("x"))

    async def _run(_: object) -> None:
        raise error

    with (
        patch.object(main_module, "build_application", return_value=MagicMock()),
        patch.object(main_module, "_run", _run),
    ):
        assert main_module.main([]) == main_module.EXIT_FAILURE


def test_clean_shutdown_exits_ok() -> None:
    async def _run(_: object) -> None:
        return None

    with (
        patch.object(main_module, "build_application", return_value=MagicMock()),
        patch.object(main_module, "_run", _run),
    ):
        assert main_module.main([]) == main_module.EXIT_OK


@pytest.mark.asyncio
async def test_preset_sessions_are_bootstrapped(tmp_path) -> None:
    path = tmp_path / "sessions.yaml"
    path.write_text("- network: layer1\n  heuristic_type: large_withdrawal\n", encoding="utf-8")
    heuristic_id = HeuristicID(
        session_id=SessionID.new("layer1", "live", "large_withdrawal"),
        pipeline_id=PipelineID.new("layer1", "live", "event_log"),
    )
    captured: list[list[SessionRequest]] = []

    async def _bootstrap(requests: list[SessionRequest]) -> list[HeuristicID]:
        captured.append(requests)
        return [heuristic_id]

    application = MagicMock()
    application.config.bootstrap.bootstrap_path = str(path)
    application.bootstrap = _bootstrap

    await main_module._bootstrap_preset_sessions(application)

    assert len(captured) == 1
    assert captured[0][0].heuristic_type == "large_withdrawal"


@pytest.mark.asyncio
async def test_preset_failure_survives_teardown_error() -> None:
    error = BootstrapStageError(index=0, stage="deploy_config", cause=ValueError("mismatch"))
    application = MagicMock()
    application.start = AsyncMock()
    application.stop = AsyncMock(side_effect=RuntimeError("server stuck"))
    application.listen_for_shutdown = AsyncMock()

    with (
        patch.object(main_module, "_bootstrap_preset_sessions", AsyncMock(side_effect=error)),
        pytest.raises(BootstrapStageError),
    ):
        await main_module._run(application)

    application.stop.assert_awaited_once()
    application.listen_for_shutdown.assert_not_awaited()
