"""Settings do SubsystemManager e dos clientes de rede."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True)
class NetworkSettings:
    """Parâmetros do cliente de dados de uma rede.

    Attributes:
        poll_interval_ms: Intervalo de polling
        num_retries: Tentativas por leitura
    """

    poll_interval_ms: int = 1000
    num_retries: int = 3


@dataclass(frozen=True)
class SubsystemSettings:
    """Configurações do SubsystemManager.

    Attributes:
        max_sessions: Limite de sessões ativas simultâneas
        heartbeat_interval_seconds: Intervalo do loop de heartbeat
        event_queue_size: Capacidade da fila interna de eventos
        networks: Parâmetros por rede (chave = valor de Network)
    """

    max_sessions: int = 256
    heartbeat_interval_seconds: float = 15.0
    event_queue_size: int = 1000
    networks: dict[str, NetworkSettings] = field(
        default_factory=lambda: {
            "layer1": NetworkSettings(poll_interval_ms=5000),
            "layer2": NetworkSettings(poll_interval_ms=1000),
        }
    )

    def network(self, name: str) -> NetworkSettings:
        """Retorna parâmetros da rede (default se não configurada)."""
        return self.networks.get(str(name), NetworkSettings())

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.max_sessions < 1:
            errors.append("MAX_SESSIONS deve ser >= 1")
        if self.heartbeat_interval_seconds <= 0:
            errors.append("HEARTBEAT_INTERVAL_SECONDS deve ser > 0")
        if self.event_queue_size < 1:
            errors.append("EVENT_QUEUE_SIZE deve ser >= 1")
        for name, network in self.networks.items():
            if network.poll_interval_ms <= 0:
                errors.append(f"{name.upper()}_POLL_INTERVAL_MS deve ser > 0")
            if network.num_retries < 0:
                errors.append(f"{name.upper()}_NUM_RETRIES deve ser >= 0")
        return errors


def _load_network(prefix: str, default_poll_ms: int) -> NetworkSettings:
    return NetworkSettings(
        poll_interval_ms=int(os.getenv(f"{prefix}_POLL_INTERVAL_MS", str(default_poll_ms))),
        num_retries=int(os.getenv(f"{prefix}_NUM_RETRIES", "3")),
    )


def _load_subsystems_from_env() -> SubsystemSettings:
    """Carrega SubsystemSettings de variáveis de ambiente."""
    return SubsystemSettings(
        max_sessions=int(os.getenv("MAX_SESSIONS", "256")),
        heartbeat_interval_seconds=float(os.getenv("HEARTBEAT_INTERVAL_SECONDS", "15")),
        event_queue_size=int(os.getenv("EVENT_QUEUE_SIZE", "1000")),
        networks={
            "layer1": _load_network("L1", 5000),
            "layer2": _load_network("L2", 1000),
        },
    )


@lru_cache(maxsize=1)
def get_subsystem_settings() -> SubsystemSettings:
    """Retorna instância cacheada de SubsystemSettings."""
    return _load_subsystems_from_env()
