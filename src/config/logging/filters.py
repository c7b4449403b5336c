"""Filter de contexto dos logs do vigia.

Todo record sai com:
- correlation_id: request da API ou lote de bootstrap em andamento
- service: nome do processo (ex: vigia)
- component: subsistema que emitiu o log (app, bootstrap, subsystems, api...)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

# Pacote raiz cujos subpacotes viram o component (app.subsystems → subsystems)
APP_PACKAGE = "app"


def component_for(logger_name: str) -> str:
    """Deriva o component do nome do logger: "app.subsystems.manager" → "subsystems"."""
    parts = logger_name.split(".")
    if parts[0] == APP_PACKAGE and len(parts) > 1:
        return parts[1]
    return parts[0]


class LogContextFilter(logging.Filter):
    """Injeta correlation_id, service e component em cada record.

    Valores passados via ``extra`` têm precedência. Nunca filtra.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = self._get_correlation_id()
        if not getattr(record, "component", None):
            record.component = component_for(record.name)
        record.service = self._service_name
        return True
