"""Controle das rotinas de evento em background do SubsystemManager.

As rotinas são tasks asyncio de longa duração. O handle devolvido por
start_event_routines permite cancelar e aguardar todas no shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Coroutine

logger = logging.getLogger(__name__)


class EventRoutines:
    """Grupo de tasks de background com cancelamento e join."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._failures: list[BaseException] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def failures(self) -> list[BaseException]:
        """Exceções que derrubaram alguma rotina."""
        return list(self._failures)

    def spawn(self, name: str, coroutine: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        """Agenda uma rotina no event loop corrente."""
        task = asyncio.create_task(coroutine, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_routine_done)
        logger.info("event_routine_started", extra={"routine": name})
        return task

    def _on_routine_done(self, task: asyncio.Task[Any]) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                self._failures.append(exc)
                logger.error(
                    "event_routine_failed",
                    extra={"routine": task.get_name(), "error_type": type(exc).__name__},
                )
                return
        logger.info("event_routine_finished", extra={"routine": task.get_name()})

    def cancel(self) -> None:
        for task in self._tasks:
            if not task.done():
                task.cancel()

    async def join(self, timeout_seconds: float | None = None) -> None:
        """Aguarda as rotinas terminarem; cancela as que estourarem o timeout."""
        pending_now = [task for task in self._tasks if not task.done()]
        if not pending_now:
            return

        logger.info(
            "event_routines_shutdown_wait",
            extra={"pending_routines": len(pending_now), "timeout_seconds": timeout_seconds},
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "event_routines_shutdown_cancelled",
            extra={"cancelled_routines": len(pending)},
        )
