"""Protocolo do servidor da API."""

from __future__ import annotations

from typing import Protocol


class ApiServerProtocol(Protocol):
    """Servidor HTTP controlado pela Application.

    start() retorna quando o servidor já aceita conexões.
    """

    @property
    def running(self) -> bool: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...
