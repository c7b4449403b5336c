"""Agregador de settings do vigia.

Re-exporta todas as settings e funções de cada módulo.
Organização por subsistema para isolamento de mudanças.
"""

from __future__ import annotations

from config.settings.app import AppConfig, get_app_config, load_app_config

# Base settings
from config.settings.base import (
    VALID_LOG_LEVELS,
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.bootstrap import (
    BootstrapSettings,
    PartialFailurePolicy,
    get_bootstrap_settings,
)
from config.settings.metrics import MetricsSettings, get_metrics_settings
from config.settings.server import ServerSettings, get_server_settings
from config.settings.subsystems import (
    NetworkSettings,
    SubsystemSettings,
    get_subsystem_settings,
)

__all__ = [
    "VALID_LOG_LEVELS",
    # Aggregate
    "AppConfig",
    # Base
    "BaseSettings",
    "BootstrapSettings",
    "Environment",
    "MetricsSettings",
    "NetworkSettings",
    "PartialFailurePolicy",
    "ServerSettings",
    "SubsystemSettings",
    "get_app_config",
    "get_base_settings",
    "get_bootstrap_settings",
    "get_metrics_settings",
    "get_server_settings",
    "get_subsystem_settings",
    "load_app_config",
]
