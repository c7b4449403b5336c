"""Registro de heurísticas suportadas.

Cada heurística declara o tipo de dado que consome, se mantém estado
entre blocos e quais parâmetros são obrigatórios na requisição.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.sessions import DataType, HeuristicType
from utils.errors import InvalidSessionRequestError


@dataclass(frozen=True, slots=True)
class HeuristicSpec:
    data_type: DataType
    stateful: bool = False
    required_params: tuple[str, ...] = ()


HEURISTIC_REGISTRY: dict[HeuristicType, HeuristicSpec] = {
    HeuristicType.BALANCE_ENFORCEMENT: HeuristicSpec(
        data_type=DataType.ACCOUNT_BALANCE,
        stateful=True,
        required_params=("address", "lower", "upper"),
    ),
    HeuristicType.CONTRACT_EVENT: HeuristicSpec(
        data_type=DataType.EVENT_LOG,
        required_params=("address", "signatures"),
    ),
    HeuristicType.FAULT_DETECTOR: HeuristicSpec(
        data_type=DataType.BLOCK_HEADER,
        stateful=True,
        required_params=("l2_output_oracle",),
    ),
    HeuristicType.LARGE_WITHDRAWAL: HeuristicSpec(
        data_type=DataType.EVENT_LOG,
        required_params=("threshold",),
    ),
}


def get_heuristic_spec(heuristic_type: HeuristicType) -> HeuristicSpec:
    """Retorna a especificação da heurística.

    Raises:
        InvalidSessionRequestError: Heurística não registrada.
    """
    try:
        return HEURISTIC_REGISTRY[heuristic_type]
    except KeyError:
        raise InvalidSessionRequestError(
            f"Heurística não suportada: {heuristic_type}"
        ) from None


def missing_params(heuristic_type: HeuristicType, params: dict[str, object]) -> list[str]:
    """Lista os parâmetros obrigatórios ausentes em ``params``."""
    spec = get_heuristic_spec(heuristic_type)
    return [name for name in spec.required_params if name not in params]
