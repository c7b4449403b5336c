"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos da Application.

Uso:
    from app.bootstrap import build_application, initialize_app

    initialize_app()
    application = build_application(get_app_config())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.app import attach_application
from app.bootstrap.dependencies import (
    create_api_server,
    create_metrics,
    create_subsystem_manager,
)
from app.controller import Application
from app.observability import get_correlation_id
from config.logging import configure_logging
from utils.errors import ConfigurationError

if TYPE_CHECKING:
    from app.lifecycle.shutdown import ShutdownToken
    from config.settings import AppConfig

# Nome do serviço para logs e métricas
SERVICE_NAME = "vigia"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"

logger = logging.getLogger(__name__)


def initialize_app(level: str = DEFAULT_LOG_LEVEL, service_name: str = SERVICE_NAME) -> None:
    """Configura logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do processo, antes de qualquer log.
    """
    configure_logging(
        level=level,
        service_name=service_name,
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings(config: AppConfig) -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.

    Raises:
        ConfigurationError: Erros de configuração em modo estrito.
    """
    environment = config.base.environment
    errors = config.validate()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if config.base.strict_validation:
        details = "\n".join(f"- {error}" for error in errors)
        raise ConfigurationError(f"Configuração inválida para {environment}:\n{details}")


def build_application(config: AppConfig, token: ShutdownToken | None = None) -> Application:
    """Monta a Application com métricas, SubsystemManager e servidor da API.

    A Application é vinculada ao app FastAPI do servidor para que as rotas
    de sessão cheguem ao bootstrap.
    """
    metrics = create_metrics(config)
    subsystems = create_subsystem_manager(config, metrics)
    server = create_api_server(config)
    application = Application(
        config=config,
        subsystems=subsystems,
        server=server,
        metrics=metrics,
        token=token,
    )
    attach_application(server.app, application)
    logger.info("application_built", extra={"component": "bootstrap"})
    return application


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "SERVICE_NAME",
    "build_application",
    "initialize_app",
    "validate_runtime_settings",
]
