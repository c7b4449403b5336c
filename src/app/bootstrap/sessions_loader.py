"""Loader do arquivo de sessões pré-definidas (BOOTSTRAP_PATH).

Aceita YAML ou JSON (JSON é subconjunto de YAML), em dois formatos:

    - network: layer1
      heuristic_type: contract_event
      heuristic_params: {address: "0x...", signatures: ["Transfer(address,address,uint256)"]}

ou

    sessions:
      - network: layer2
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from app.domain.sessions import SessionRequest
from utils.errors import BootstrapFileError

logger = logging.getLogger(__name__)


def load_session_requests(path: str | Path) -> list[SessionRequest]:
    """Carrega e valida as requisições de sessão do arquivo.

    Raises:
        BootstrapFileError: Arquivo ausente, YAML inválido, formato
            inesperado ou requisição inválida (com o índice).
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise BootstrapFileError(f"Arquivo de bootstrap não encontrado: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise BootstrapFileError(f"YAML inválido em {file_path}: {exc}") from exc

    entries = _extract_entries(content, file_path)
    requests: list[SessionRequest] = []
    for index, entry in enumerate(entries):
        try:
            requests.append(SessionRequest.model_validate(entry))
        except ValidationError as exc:
            raise BootstrapFileError(
                f"Sessão {index} inválida em {file_path}: {exc}"
            ) from exc

    logger.info(
        "bootstrap_file_loaded",
        extra={"path": str(file_path), "sessions": len(requests)},
    )
    return requests


def _extract_entries(content: Any, file_path: Path) -> list[Any]:
    if content is None:
        return []
    if isinstance(content, dict):
        content = content.get("sessions", [])
    if not isinstance(content, list):
        raise BootstrapFileError(
            f"Formato inesperado em {file_path}: esperado lista de sessões"
        )
    return content
