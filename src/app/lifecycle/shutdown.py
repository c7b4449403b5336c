"""Token de shutdown do processo.

Um único token por processo, passado para todas as tarefas de longa
duração no start. Sinais SIGINT/SIGTERM e paradas programáticas disparam
o mesmo token; o primeiro disparo vence e os demais são ignorados.

Uso:
    token = ShutdownToken()
    token.install_signal_handlers(asyncio.get_running_loop())
    signal = await token.wait()
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from typing import TYPE_CHECKING

from utils.errors import LifecycleError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)
PROGRAMMATIC = "programmatic"


@dataclass(frozen=True, slots=True)
class ShutdownSignal:
    """Identidade do evento que disparou o shutdown (ex: "SIGTERM")."""

    name: str

    def __str__(self) -> str:
        return self.name


class ShutdownToken:
    """Notificação single-slot de término do processo."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._signal: ShutdownSignal | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._installed: tuple[signal.Signals, ...] = ()

    @property
    def triggered(self) -> bool:
        return self._signal is not None

    @property
    def signal(self) -> ShutdownSignal | None:
        """Sinal que disparou o token (None enquanto não disparado)."""
        return self._signal

    @property
    def handlers_installed(self) -> bool:
        return bool(self._installed)

    def trigger(self, name: str = PROGRAMMATIC) -> bool:
        """Dispara o token.

        Returns:
            True no primeiro disparo; False se já estava disparado.
        """
        if self._signal is not None:
            logger.debug(
                "shutdown_trigger_ignored",
                extra={"signal": name, "first_signal": self._signal.name},
            )
            return False
        self._signal = ShutdownSignal(name)
        self._event.set()
        return True

    async def wait(self) -> ShutdownSignal:
        """Bloqueia até o token ser disparado."""
        await self._event.wait()
        if self._signal is None:
            raise LifecycleError("Token liberado sem sinal registrado")
        return self._signal

    def install_signal_handlers(
        self,
        loop: asyncio.AbstractEventLoop,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        """Registra handlers de sinal do SO no event loop.

        Idempotente. Em plataformas sem add_signal_handler (Windows) o token
        continua funcionando apenas com disparo programático.
        """
        if self._installed:
            return
        installed: list[signal.Signals] = []
        for sig in signals:
            try:
                loop.add_signal_handler(sig, self.trigger, sig.name)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.warning(
                    "shutdown_signal_handler_unavailable",
                    extra={"signal": sig.name},
                )
                continue
            installed.append(sig)
        self._loop = loop
        self._installed = tuple(installed)
        logger.debug(
            "shutdown_signal_handlers_installed",
            extra={"signals": [sig.name for sig in installed]},
        )

    def remove_signal_handlers(self) -> None:
        if self._loop is None:
            return
        for sig in self._installed:
            self._loop.remove_signal_handler(sig)
        self._installed = ()
        self._loop = None
