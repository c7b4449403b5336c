"""Testes do ShutdownToken."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from app.lifecycle.shutdown import DEFAULT_SIGNALS, PROGRAMMATIC, ShutdownToken
from utils.errors import LifecycleError


@pytest.mark.asyncio
async def test_first_trigger_wins() -> None:
    token = ShutdownToken()

    assert token.trigger("SIGTERM") is True
    assert token.trigger("SIGINT") is False

    received = await token.wait()
    assert received.name == "SIGTERM"
    assert str(received) == "SIGTERM"


@pytest.mark.asyncio
async def test_wait_blocks_until_triggered() -> None:
    token = ShutdownToken()
    waiter = asyncio.create_task(token.wait())
    await asyncio.sleep(0)

    assert not waiter.done()
    assert token.signal is None

    token.trigger()
    received = await asyncio.wait_for(waiter, timeout=1.0)
    assert received.name == PROGRAMMATIC
    assert token.triggered


@pytest.mark.asyncio
async def test_wait_without_recorded_signal_raises_lifecycle_error() -> None:
    token = ShutdownToken()
    token._event.set()

    with pytest.raises(LifecycleError):
        await token.wait()


@pytest.mark.asyncio
async def test_multiple_waiters_observe_same_signal() -> None:
    token = ShutdownToken()
    waiters = [asyncio.create_task(token.wait()) for _ in range(3)]
    await asyncio.sleep(0)

    token.trigger("SIGINT")
    results = await asyncio.gather(*waiters)

    assert {result.name for result in results} == {"SIGINT"}


def test_install_registers_default_signals_once() -> None:
    token = ShutdownToken()
    loop = MagicMock()

    token.install_signal_handlers(loop)
    token.install_signal_handlers(loop)

    assert loop.add_signal_handler.call_count == len(DEFAULT_SIGNALS)
    assert token.handlers_installed

    token.remove_signal_handlers()
    assert loop.remove_signal_handler.call_count == len(DEFAULT_SIGNALS)
    assert not token.handlers_installed


def test_install_tolerates_platform_without_signal_support() -> None:
    token = ShutdownToken()
    loop = MagicMock()
    loop.add_signal_handler.side_effect = NotImplementedError

    token.install_signal_handlers(loop)

    assert not token.handlers_installed
    assert token.trigger() is True


def test_signal_handler_triggers_with_signal_name() -> None:
    token = ShutdownToken()
    loop = MagicMock()

    token.install_signal_handlers(loop)
    callback, name = loop.add_signal_handler.call_args_list[1].args[1:]
    callback(name)

    assert token.signal is not None
    assert token.signal.name == "SIGTERM"
