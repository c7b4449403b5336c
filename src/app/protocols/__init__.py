"""Protocolos e contratos dos colaboradores da Application."""

from .metrics import MetricsEmitterProtocol
from .server import ApiServerProtocol
from .subsystems import EventRoutinesHandle, SubsystemManagerProtocol

__all__ = [
    "ApiServerProtocol",
    "EventRoutinesHandle",
    "MetricsEmitterProtocol",
    "SubsystemManagerProtocol",
]
