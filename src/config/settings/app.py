"""Configuração agregada do processo.

Carregada uma vez antes de construir a Application e nunca mutada
depois. A Application recebe a instância por referência.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from config.settings.base import BaseSettings, get_base_settings
from config.settings.bootstrap import BootstrapSettings, get_bootstrap_settings
from config.settings.metrics import MetricsSettings, get_metrics_settings
from config.settings.server import ServerSettings, get_server_settings
from config.settings.subsystems import SubsystemSettings, get_subsystem_settings


@dataclass(frozen=True)
class AppConfig:
    """Configuração read-only do processo."""

    base: BaseSettings = field(default_factory=BaseSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    metrics: MetricsSettings = field(default_factory=MetricsSettings)
    bootstrap: BootstrapSettings = field(default_factory=BootstrapSettings)
    subsystems: SubsystemSettings = field(default_factory=SubsystemSettings)

    def validate(self) -> list[str]:
        """Valida todas as seções, prefixando o nome de cada uma."""
        errors: list[str] = []
        errors.extend(f"base: {error}" for error in self.base.validate())
        errors.extend(f"server: {error}" for error in self.server.validate())
        errors.extend(f"metrics: {error}" for error in self.metrics.validate())
        errors.extend(f"bootstrap: {error}" for error in self.bootstrap.validate())
        errors.extend(f"subsystems: {error}" for error in self.subsystems.validate())
        return errors


def load_app_config() -> AppConfig:
    """Monta AppConfig a partir dos getters de cada seção."""
    return AppConfig(
        base=get_base_settings(),
        server=get_server_settings(),
        metrics=get_metrics_settings(),
        bootstrap=get_bootstrap_settings(),
        subsystems=get_subsystem_settings(),
    )


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """Retorna instância cacheada de AppConfig."""
    return load_app_config()
