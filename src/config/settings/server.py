"""Settings do servidor HTTP da API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class ServerSettings:
    """Configurações do servidor da API.

    Attributes:
        host: Interface de bind
        port: Porta de bind
        startup_timeout_seconds: Tempo máximo para o uvicorn ficar pronto
        shutdown_timeout_seconds: Tempo máximo para encerrar conexões
    """

    host: str = "0.0.0.0"
    port: int = 8080
    startup_timeout_seconds: float = 10.0
    shutdown_timeout_seconds: float = 10.0

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.host:
            errors.append("API_HOST não pode ser vazio")
        if not 0 < self.port < 65536:
            errors.append(f"API_PORT fora do intervalo: {self.port}")
        if self.startup_timeout_seconds <= 0:
            errors.append("API_STARTUP_TIMEOUT_SECONDS deve ser > 0")
        if self.shutdown_timeout_seconds <= 0:
            errors.append("API_SHUTDOWN_TIMEOUT_SECONDS deve ser > 0")
        return errors


def _load_server_from_env() -> ServerSettings:
    """Carrega ServerSettings de variáveis de ambiente."""
    return ServerSettings(
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8080")),
        startup_timeout_seconds=float(os.getenv("API_STARTUP_TIMEOUT_SECONDS", "10")),
        shutdown_timeout_seconds=float(os.getenv("API_SHUTDOWN_TIMEOUT_SECONDS", "10")),
    )


@lru_cache(maxsize=1)
def get_server_settings() -> ServerSettings:
    """Retorna instância cacheada de ServerSettings."""
    return _load_server_from_env()
