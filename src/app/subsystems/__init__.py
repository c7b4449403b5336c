"""Subsistemas: registro de heurísticas, pipelines, sessões e rotinas."""

from app.subsystems.manager import SessionEvent, SubsystemManager
from app.subsystems.registry import HEURISTIC_REGISTRY, HeuristicSpec, get_heuristic_spec
from app.subsystems.routines import EventRoutines

__all__ = [
    "HEURISTIC_REGISTRY",
    "EventRoutines",
    "HeuristicSpec",
    "SessionEvent",
    "SubsystemManager",
    "get_heuristic_spec",
]
