"""Exceções do vigia: taxonomia de falhas de start, bootstrap e lifecycle.

Todas as falhas sobem para o chamador imediato; logs são apenas
observabilidade adicional, nunca substituem o erro.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.identifiers import HeuristicID


class VigiaError(RuntimeError):
    """Base para todas as falhas do serviço."""


class ConfigurationError(VigiaError):
    """Configuração inválida detectada no carregamento/validação."""


class StartError(VigiaError):
    """Falha ao subir um subsistema durante Application.start().

    Fatal para o processo: não há retry nem rollback parcial.

    Attributes:
        step: Etapa que falhou ("metrics", "event_routines" ou "server").
    """

    def __init__(self, step: str, message: str | None = None) -> None:
        self.step = step
        super().__init__(message or f"Falha ao iniciar etapa '{step}'")


class ServerStartError(VigiaError):
    """Servidor da API não ficou pronto."""


class LifecycleError(VigiaError):
    """Operação chamada em estado inválido do ciclo de vida."""


class SessionRequestError(VigiaError):
    """Base para falhas dos estágios delegados ao SubsystemManager."""


class InvalidSessionRequestError(SessionRequestError):
    """Requisição de sessão com formato ou parâmetros inválidos."""


class DeploymentConfigError(SessionRequestError):
    """Configuração de deploy inconsistente ou conflitante."""


class SessionCapacityError(SessionRequestError):
    """Limite de sessões ativas atingido."""


class UnknownSessionError(SessionRequestError):
    """Sessão não registrada no SubsystemManager."""


class BootstrapFileError(VigiaError):
    """Arquivo de sessões pré-definidas ausente ou inválido."""


class BootstrapStageError(VigiaError):
    """Falha de um estágio do bootstrap para uma requisição do lote.

    Terminal para a chamada de bootstrap. Sessões iniciadas antes da
    requisição que falhou ficam em ``completed`` (política keep_started)
    ou em ``rolled_back`` (política rollback_all). Sessões que o rollback
    não conseguiu parar ficam em ``rollback_failed`` e seguem rodando.

    Attributes:
        index: Posição da requisição no lote (base 0).
        stage: Estágio que falhou.
        cause: Exceção original do estágio.
        completed: HeuristicIDs que continuam rodando.
        rolled_back: HeuristicIDs desfeitos pelo rollback.
        rollback_failed: HeuristicIDs cujo stop_session falhou no rollback.
    """

    def __init__(
        self,
        *,
        index: int,
        stage: str,
        cause: BaseException,
        completed: list[HeuristicID] | None = None,
        rolled_back: list[HeuristicID] | None = None,
        rollback_failed: list[HeuristicID] | None = None,
    ) -> None:
        self.index = index
        self.stage = stage
        self.cause = cause
        self.completed = list(completed or [])
        self.rolled_back = list(rolled_back or [])
        self.rollback_failed = list(rollback_failed or [])
        super().__init__(
            f"Requisição {index} falhou no estágio '{stage}': "
            f"{type(cause).__name__}: {cause}"
        )

    def as_dict(self) -> dict[str, object]:
        """Serializa para resposta da API."""
        return {
            "index": self.index,
            "stage": self.stage,
            "error": str(self.cause),
            "error_type": type(self.cause).__name__,
            "completed": [hid.to_dict() for hid in self.completed],
            "rolled_back": [hid.to_dict() for hid in self.rolled_back],
            "rollback_failed": [hid.to_dict() for hid in self.rollback_failed],
        }
