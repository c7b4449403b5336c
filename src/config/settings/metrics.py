"""Settings do emissor de métricas (Prometheus)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class MetricsSettings:
    """Configurações de métricas.

    Attributes:
        enabled: Expõe /metrics via Prometheus quando True
        host: Interface do servidor de métricas
        port: Porta do servidor de métricas
        namespace: Prefixo das métricas exportadas
    """

    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 7300
    namespace: str = "vigia"

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.enabled:
            return errors
        if not 0 < self.port < 65536:
            errors.append(f"METRICS_PORT fora do intervalo: {self.port}")
        if not self.namespace:
            errors.append("METRICS_NAMESPACE não pode ser vazio")
        return errors


def _load_metrics_from_env() -> MetricsSettings:
    """Carrega MetricsSettings de variáveis de ambiente."""
    return MetricsSettings(
        enabled=os.getenv("METRICS_ENABLED", "true").lower() in ("true", "1", "yes"),
        host=os.getenv("METRICS_HOST", "0.0.0.0"),
        port=int(os.getenv("METRICS_PORT", "7300")),
        namespace=os.getenv("METRICS_NAMESPACE", "vigia"),
    )


@lru_cache(maxsize=1)
def get_metrics_settings() -> MetricsSettings:
    """Retorna instância cacheada de MetricsSettings."""
    return _load_metrics_from_env()
