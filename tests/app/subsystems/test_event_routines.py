"""Testes do grupo de rotinas de evento em background."""

from __future__ import annotations

import asyncio
import logging

import pytest

from app.subsystems.routines import EventRoutines


@pytest.mark.asyncio
async def test_join_waits_for_routines_to_finish() -> None:
    routines = EventRoutines()
    done = asyncio.Event()

    async def _work() -> None:
        await asyncio.sleep(0.01)
        done.set()

    routines.spawn("work", _work())
    assert routines.running

    await routines.join(timeout_seconds=1.0)

    assert done.is_set()
    assert not routines.running


@pytest.mark.asyncio
async def test_join_cancels_stragglers_after_timeout(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="app.subsystems.routines")
    routines = EventRoutines()

    async def _forever() -> None:
        await asyncio.Event().wait()

    routines.spawn("forever", _forever())
    await routines.join(timeout_seconds=0.01)

    assert not routines.running
    assert any(r.getMessage() == "event_routines_shutdown_cancelled" for r in caplog.records)


@pytest.mark.asyncio
async def test_failed_routine_is_recorded(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="app.subsystems.routines")
    routines = EventRoutines()

    async def _boom() -> None:
        raise RuntimeError("boom")

    routines.spawn("boom", _boom())
    await routines.join(timeout_seconds=1.0)
    await asyncio.sleep(0)

    assert [type(exc) for exc in routines.failures] == [RuntimeError]
    assert any(r.getMessage() == "event_routine_failed" for r in caplog.records)


@pytest.mark.asyncio
async def test_cancel_stops_running_routines() -> None:
    routines = EventRoutines()

    async def _forever() -> None:
        await asyncio.Event().wait()

    routines.spawn("forever", _forever())
    routines.cancel()
    await routines.join(timeout_seconds=1.0)

    assert not routines.running
    assert routines.failures == []
