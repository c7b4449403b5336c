"""Testes do loader de sessões pré-definidas."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.bootstrap.sessions_loader import load_session_requests
from app.domain.sessions import HeuristicType, PipelineType
from utils.errors import BootstrapFileError


def _write(tmp_path: Path, content: str, name: str = "sessions.yaml") -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_loads_top_level_list(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
- network: layer1
  heuristic_type: contract_event
  heuristic_params:
    address: "0xabc"
    signatures: ["Paused()"]
- network: layer2
  pipeline_type: backtest
  heuristic_type: large_withdrawal
  start_height: 10
  end_height: 20
  heuristic_params: {threshold: 1000}
""",
    )

    requests = load_session_requests(path)

    assert [r.heuristic_type for r in requests] == [
        HeuristicType.CONTRACT_EVENT,
        HeuristicType.LARGE_WITHDRAWAL,
    ]
    assert requests[1].pipeline_type == PipelineType.BACKTEST


def test_loads_sessions_key_from_json(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        '{"sessions": [{"network": "layer1", "heuristic_type": "fault_detector"}]}',
        name="sessions.json",
    )

    requests = load_session_requests(path)

    assert len(requests) == 1


def test_empty_file_yields_no_requests(tmp_path: Path) -> None:
    assert load_session_requests(_write(tmp_path, "")) == []


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(BootstrapFileError, match="não encontrado"):
        load_session_requests(tmp_path / "missing.yaml")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    with pytest.raises(BootstrapFileError, match="YAML inválido"):
        load_session_requests(_write(tmp_path, "- network: [layer1\n"))


def test_unexpected_format_raises(tmp_path: Path) -> None:
    with pytest.raises(BootstrapFileError, match="Formato inesperado"):
        load_session_requests(_write(tmp_path, "just a string"))


def test_invalid_entry_reports_index(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
- network: layer1
  heuristic_type: contract_event
- network: layer9
  heuristic_type: contract_event
""",
    )

    with pytest.raises(BootstrapFileError, match="Sessão 1"):
        load_session_requests(path)
