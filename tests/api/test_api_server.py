"""Testes do envelope uvicorn (ApiServer)."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from api.app import create_api_app
from api.server import ApiServer, _ManagedServer
from config.settings import ServerSettings
from utils.errors import ServerStartError


def _settings(**overrides: object) -> ServerSettings:
    values: dict[str, object] = {
        "host": "127.0.0.1",
        "port": 0,
        "startup_timeout_seconds": 5.0,
        "shutdown_timeout_seconds": 5.0,
    }
    values.update(overrides)
    return ServerSettings(**values)


@pytest.mark.asyncio
async def test_start_and_stop_real_server() -> None:
    server = ApiServer(create_api_app(), _settings())

    await server.start()
    assert server.running

    await server.stop()
    assert not server.running


@pytest.mark.asyncio
async def test_start_raises_when_serve_exits() -> None:
    async def _exit(self: _ManagedServer, sockets: object = None) -> None:
        raise SystemExit(1)

    server = ApiServer(create_api_app(), _settings())
    with patch.object(_ManagedServer, "serve", _exit), pytest.raises(ServerStartError):
        await server.start()


@pytest.mark.asyncio
async def test_start_raises_on_timeout() -> None:
    async def _never_ready(self: _ManagedServer, sockets: object = None) -> None:
        while not self.should_exit:
            await asyncio.sleep(0.01)

    server = ApiServer(create_api_app(), _settings(startup_timeout_seconds=0.05))
    with patch.object(_ManagedServer, "serve", _never_ready), pytest.raises(
        ServerStartError, match="não ficou pronto"
    ):
        await server.start()
    await server.stop()


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    server = ApiServer(create_api_app(), _settings())

    await server.stop()

    assert not server.running
