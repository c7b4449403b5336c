"""Modelos de domínio para sessões de monitoramento.

Tradução em três estágios:
    SessionRequest → PipelineConfig → DeploymentConfig

SessionRequest chega de fora (API ou arquivo de bootstrap) e é validada
pelo Pydantic. PipelineConfig descreve a topologia necessária, sem saber
quem pediu. DeploymentConfig junta as duas coisas e carrega o PipelineID.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.identifiers import PipelineID  # noqa: TC001 - usado em runtime pelo dataclass


class Network(StrEnum):
    """Redes monitoradas."""

    LAYER1 = "layer1"
    LAYER2 = "layer2"


class PipelineType(StrEnum):
    """Modo de execução do pipeline."""

    LIVE = "live"
    BACKTEST = "backtest"


class HeuristicType(StrEnum):
    """Heurísticas suportadas pelo motor de avaliação."""

    BALANCE_ENFORCEMENT = "balance_enforcement"
    CONTRACT_EVENT = "contract_event"
    FAULT_DETECTOR = "fault_detector"
    LARGE_WITHDRAWAL = "large_withdrawal"


class DataType(StrEnum):
    """Tipo de dado que o pipeline entrega para a heurística."""

    ACCOUNT_BALANCE = "account_balance"
    EVENT_LOG = "event_log"
    BLOCK_HEADER = "block_header"


class AlertDestination(StrEnum):
    """Destino dos alertas disparados pela sessão."""

    SLACK = "slack"
    PAGERDUTY = "pagerduty"
    NOOP = "noop"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertPolicy(BaseModel):
    """Política de alerta de uma sessão."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    destination: AlertDestination = Field(
        default=AlertDestination.NOOP,
        description="Canal de entrega do alerta.",
    )
    severity: Severity = Field(default=Severity.LOW, description="Severidade do alerta.")
    message: str = Field(default="", description="Mensagem anexada ao alerta.")


class SessionRequest(BaseModel):
    """Descrição externa do que monitorar e como.

    Imutável; consumida uma vez por chamada de bootstrap. Não tem
    identidade própria até ser aceita.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    network: Network = Field(..., description="Rede a monitorar.")
    pipeline_type: PipelineType = Field(
        default=PipelineType.LIVE,
        description="live acompanha a cabeça da rede; backtest percorre uma janela fixa.",
    )
    heuristic_type: HeuristicType = Field(..., description="Heurística avaliada pela sessão.")
    start_height: int | None = Field(default=None, ge=0, description="Bloco inicial.")
    end_height: int | None = Field(default=None, ge=0, description="Bloco final.")
    alert_policy: AlertPolicy = Field(default_factory=AlertPolicy)
    heuristic_params: dict[str, Any] = Field(
        default_factory=dict,
        description="Parâmetros específicos da heurística.",
    )

    @model_validator(mode="after")
    def _check_height_window(self) -> SessionRequest:
        if (
            self.start_height is not None
            and self.end_height is not None
            and self.end_height < self.start_height
        ):
            raise ValueError("end_height deve ser >= start_height")
        if self.pipeline_type == PipelineType.BACKTEST and (
            self.start_height is None or self.end_height is None
        ):
            raise ValueError("backtest exige start_height e end_height")
        return self

    def session_config(self) -> SessionConfig:
        """Projeção pura dos parâmetros de sessão da requisição."""
        return SessionConfig(
            network=self.network,
            pipeline_type=self.pipeline_type,
            heuristic_type=self.heuristic_type,
            alert_policy=self.alert_policy,
            params=dict(self.heuristic_params),
        )


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Parâmetros de sessão derivados de uma SessionRequest."""

    network: Network
    pipeline_type: PipelineType
    heuristic_type: HeuristicType
    alert_policy: AlertPolicy
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Parâmetros do cliente de dados da rede.

    Attributes:
        poll_interval_ms: Intervalo de polling do cliente
        num_retries: Tentativas por leitura
        start_height: Bloco inicial (None = cabeça da rede)
        end_height: Bloco final (None = sem fim)
    """

    poll_interval_ms: int
    num_retries: int
    start_height: int | None = None
    end_height: int | None = None


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Topologia de pipeline necessária para uma sessão."""

    network: Network
    pipeline_type: PipelineType
    data_type: DataType
    client: ClientConfig

    def key(self) -> tuple[object, ...]:
        """Chave que identifica topologias idênticas (para compartilhamento)."""
        return (
            self.network,
            self.pipeline_type,
            self.data_type,
            self.client.start_height,
            self.client.end_height,
        )


@dataclass(frozen=True, slots=True)
class DeploymentConfig:
    """Unidade entregue ao SubsystemManager para rodar.

    Attributes:
        pipeline_id: PipelineID atribuído na construção
        pipeline_config: Topologia do pipeline
        session_config: Parâmetros da sessão
        stateful: Se a heurística mantém estado entre blocos
        state_key: Chave de estado (vazia quando stateless)
    """

    pipeline_id: PipelineID
    pipeline_config: PipelineConfig
    session_config: SessionConfig
    stateful: bool = False
    state_key: str = ""


__all__ = [
    "AlertDestination",
    "AlertPolicy",
    "ClientConfig",
    "DataType",
    "DeploymentConfig",
    "HeuristicType",
    "Network",
    "PipelineConfig",
    "PipelineType",
    "SessionConfig",
    "SessionRequest",
    "Severity",
]
