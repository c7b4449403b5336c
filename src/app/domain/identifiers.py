"""Identificadores de pipeline e sessão.

PipelineID e SessionID são tokens opacos e globalmente únicos (UUID v4)
prefixados pela identidade lógica do componente. HeuristicID correlaciona
os dois e é o handle durável devolvido ao chamador do bootstrap.

Formato textual:
    PipelineID: "<network>:<pipeline_type>:<data_type>::<uuid>"
    SessionID:  "<network>:<pipeline_type>:<heuristic_type>::<uuid>"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class PipelineID:
    """Identifica uma instância de pipeline."""

    network: str
    pipeline_type: str
    data_type: str
    uuid: UUID = field(default_factory=uuid4)

    @classmethod
    def new(cls, network: str, pipeline_type: str, data_type: str) -> PipelineID:
        return cls(network=str(network), pipeline_type=str(pipeline_type), data_type=str(data_type))

    def __str__(self) -> str:
        return f"{self.network}:{self.pipeline_type}:{self.data_type}::{self.uuid}"


@dataclass(frozen=True, slots=True)
class SessionID:
    """Identifica uma sessão de monitoramento vinculada a um pipeline."""

    network: str
    pipeline_type: str
    heuristic_type: str
    uuid: UUID = field(default_factory=uuid4)

    @classmethod
    def new(cls, network: str, pipeline_type: str, heuristic_type: str) -> SessionID:
        return cls(
            network=str(network),
            pipeline_type=str(pipeline_type),
            heuristic_type=str(heuristic_type),
        )

    def __str__(self) -> str:
        return f"{self.network}:{self.pipeline_type}:{self.heuristic_type}::{self.uuid}"


@dataclass(frozen=True, slots=True)
class HeuristicID:
    """Registro de correlação {SessionID, PipelineID}.

    Criado uma única vez, quando a sessão é iniciada com sucesso.
    """

    session_id: SessionID
    pipeline_id: PipelineID

    def to_dict(self) -> dict[str, Any]:
        """Formato de wire para a API."""
        return {
            "session_id": str(self.session_id),
            "pipeline_id": str(self.pipeline_id),
        }


__all__ = ["HeuristicID", "PipelineID", "SessionID"]
