"""Settings do protocolo de bootstrap e do shutdown."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache


class PartialFailurePolicy(StrEnum):
    """O que fazer com sessões já iniciadas quando uma requisição do lote falha.

    KEEP_STARTED: sessões anteriores continuam rodando (comportamento histórico).
    ROLLBACK_ALL: sessões anteriores do mesmo lote são paradas.
    """

    KEEP_STARTED = "keep_started"
    ROLLBACK_ALL = "rollback_all"


@dataclass(frozen=True)
class BootstrapSettings:
    """Configurações de bootstrap/shutdown.

    Attributes:
        bootstrap_path: Arquivo YAML/JSON com sessões pré-definidas (opcional)
        on_partial_failure: Política para falhas no meio de um lote
        shutdown_timeout_seconds: Espera máxima pelas rotinas de evento
        stop_sessions_on_shutdown: Para sessões ativas no shutdown
    """

    bootstrap_path: str = ""
    on_partial_failure: PartialFailurePolicy = PartialFailurePolicy.KEEP_STARTED
    shutdown_timeout_seconds: float = 30.0
    stop_sessions_on_shutdown: bool = True

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.shutdown_timeout_seconds <= 0:
            errors.append("SHUTDOWN_TIMEOUT_SECONDS deve ser > 0")
        if self.bootstrap_path and not os.path.isfile(self.bootstrap_path):
            errors.append(f"BOOTSTRAP_PATH não encontrado: {self.bootstrap_path}")
        return errors


def _parse_policy(value: str) -> PartialFailurePolicy:
    try:
        return PartialFailurePolicy(value.lower())
    except ValueError:
        valid = ", ".join(policy.value for policy in PartialFailurePolicy)
        raise ValueError(
            f"BOOTSTRAP_ON_PARTIAL_FAILURE inválido: {value}. Válidos: {valid}"
        ) from None


def _load_bootstrap_from_env() -> BootstrapSettings:
    """Carrega BootstrapSettings de variáveis de ambiente."""
    return BootstrapSettings(
        bootstrap_path=os.getenv("BOOTSTRAP_PATH", ""),
        on_partial_failure=_parse_policy(
            os.getenv("BOOTSTRAP_ON_PARTIAL_FAILURE", PartialFailurePolicy.KEEP_STARTED.value)
        ),
        shutdown_timeout_seconds=float(os.getenv("SHUTDOWN_TIMEOUT_SECONDS", "30")),
        stop_sessions_on_shutdown=os.getenv("STOP_SESSIONS_ON_SHUTDOWN", "true").lower()
        in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_bootstrap_settings() -> BootstrapSettings:
    """Retorna instância cacheada de BootstrapSettings."""
    return _load_bootstrap_from_env()
