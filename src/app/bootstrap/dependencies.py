"""Factories dos colaboradores da Application.

Este módulo centraliza a criação das implementações concretas a partir
da AppConfig: emissor de métricas, SubsystemManager e servidor da API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.app import create_api_app
from api.server import ApiServer
from app.observability.metrics import create_metrics_emitter
from app.subsystems.manager import SubsystemManager

if TYPE_CHECKING:
    from app.protocols.metrics import MetricsEmitterProtocol
    from config.settings import AppConfig

logger = logging.getLogger(__name__)


def create_metrics(config: AppConfig) -> MetricsEmitterProtocol:
    """Cria emissor Prometheus ou no-op conforme METRICS_ENABLED."""
    emitter = create_metrics_emitter(config.metrics)
    logger.info(
        "metrics_emitter_created",
        extra={"component": "bootstrap", "enabled": config.metrics.enabled},
    )
    return emitter


def create_subsystem_manager(
    config: AppConfig,
    metrics: MetricsEmitterProtocol,
) -> SubsystemManager:
    """Cria SubsystemManager in-process."""
    manager = SubsystemManager(config.subsystems, metrics=metrics)
    logger.info(
        "subsystem_manager_created",
        extra={"component": "bootstrap", "max_sessions": config.subsystems.max_sessions},
    )
    return manager


def create_api_server(config: AppConfig) -> ApiServer:
    """Cria servidor uvicorn com o app FastAPI ainda sem Application vinculada."""
    server = ApiServer(create_api_app(), config.server)
    logger.info(
        "api_server_created",
        extra={"component": "bootstrap", "host": config.server.host, "port": config.server.port},
    )
    return server
