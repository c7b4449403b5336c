"""Configuração centralizada de logging.

Funções para configurar logging estruturado JSON com:
- Campos obrigatórios (correlation_id, service, level, logger, message)
- Formatação padronizada
- Níveis configuráveis por ambiente

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização do processo (app/bootstrap/)
    configure_logging(level="INFO", service_name="vigia")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("session_started", extra={"session_id": str(session_id)})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import LogContextFilter
from config.logging.formatters import create_json_formatter, create_text_formatter
from config.settings.base import VALID_LOG_LEVELS

if TYPE_CHECKING:
    from collections.abc import Callable

# Nome padrão do serviço
DEFAULT_SERVICE_NAME = "vigia"

# Loggers de terceiros que poluem o output em INFO
NOISY_LOGGERS = ("uvicorn.access",)


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    *,
    json_output: bool = True,
) -> None:
    """Configura logging estruturado para o processo.

    Deve ser chamada uma vez na inicialização (app/bootstrap/).

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função opcional que retorna o correlation_id
            do contexto atual (ex: de ContextVar).
        json_output: False usa formato texto (desenvolvimento/testes).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    formatter = create_json_formatter() if json_output else create_text_formatter()

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(formatter)
    handler.addFilter(LogContextFilter(service_name, correlation_id_getter))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]

    if level_upper != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado.

    O filter injeta automaticamente service e correlation_id.
    """
    return logging.getLogger(name)
