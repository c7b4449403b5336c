"""Estados do ciclo de vida da Application."""

from __future__ import annotations

from enum import StrEnum


class AppState(StrEnum):
    """constructed → started → shutting_down → stopped.

    failed: start() abortou; o processo deve terminar.
    """

    CONSTRUCTED = "constructed"
    STARTED = "started"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
    FAILED = "failed"
