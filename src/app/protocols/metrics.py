"""Protocolo do emissor de métricas."""

from __future__ import annotations

from typing import Protocol


class MetricsEmitterProtocol(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def record_up(self) -> None: ...

    def record_session_started(self, network: str, heuristic_type: str) -> None: ...

    def record_bootstrap_failure(self, stage: str) -> None: ...

    def record_bootstrap_duration(self, seconds: float) -> None: ...

    def set_active_sessions(self, count: int) -> None: ...
