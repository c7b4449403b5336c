"""Servidor HTTP da API (uvicorn) controlado pela Application.

O uvicorn roda como task asyncio no mesmo event loop da Application.
A captura de sinais do uvicorn é desligada: SIGINT/SIGTERM pertencem ao
ShutdownToken, e o servidor para quando a Application chama stop().
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import TYPE_CHECKING

import uvicorn

from utils.errors import ServerStartError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fastapi import FastAPI

    from config.settings.server import ServerSettings

logger = logging.getLogger(__name__)

_STARTUP_POLL_SECONDS = 0.05


class _ManagedServer(uvicorn.Server):
    """uvicorn.Server sem handlers de sinal próprios."""

    def install_signal_handlers(self) -> None:
        return None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class ApiServer:
    """Envelope do uvicorn com start/stop assíncronos."""

    def __init__(self, app: FastAPI, settings: ServerSettings) -> None:
        self.app = app
        self._settings = settings
        self._server: _ManagedServer | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Inicia o uvicorn e retorna quando ele já aceita conexões.

        Raises:
            ServerStartError: O servidor terminou antes de ficar pronto ou
                estourou API_STARTUP_TIMEOUT_SECONDS.
        """
        if self.running:
            return

        config = uvicorn.Config(
            self.app,
            host=self._settings.host,
            port=self._settings.port,
            log_config=None,
            access_log=False,
        )
        server = _ManagedServer(config)
        self._server = server
        self._task = asyncio.create_task(self._serve(server), name="api_server")

        deadline = time.monotonic() + self._settings.startup_timeout_seconds
        while not server.started:
            if self._task.done():
                exc = self._task.exception()
                raise ServerStartError(
                    f"Servidor da API encerrou durante o start: {exc}"
                ) from exc
            if time.monotonic() >= deadline:
                server.should_exit = True
                raise ServerStartError(
                    f"Servidor da API não ficou pronto em "
                    f"{self._settings.startup_timeout_seconds}s"
                )
            await asyncio.sleep(_STARTUP_POLL_SECONDS)

        logger.info(
            "api_server_started",
            extra={"host": self._settings.host, "port": self._settings.port},
        )

    async def _serve(self, server: _ManagedServer) -> None:
        # uvicorn chama sys.exit(1) quando o bind falha
        try:
            await server.serve()
        except SystemExit as exc:
            raise ServerStartError(f"uvicorn encerrou com código {exc.code}") from None

    async def stop(self) -> None:
        """Pede encerramento gracioso; força após API_SHUTDOWN_TIMEOUT_SECONDS."""
        if self._server is None or self._task is None:
            return

        self._server.should_exit = True
        try:
            await asyncio.wait_for(
                asyncio.shield(self._task),
                timeout=self._settings.shutdown_timeout_seconds,
            )
        except TimeoutError:
            self._server.force_exit = True
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            logger.warning("api_server_forced_exit", extra={"port": self._settings.port})
        finally:
            self._server = None
            self._task = None
        logger.info("api_server_stopped", extra={"port": self._settings.port})
