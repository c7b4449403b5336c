"""Ciclo de vida do processo: estados e token de shutdown."""

from app.lifecycle.shutdown import PROGRAMMATIC, ShutdownSignal, ShutdownToken
from app.lifecycle.state import AppState

__all__ = ["PROGRAMMATIC", "AppState", "ShutdownSignal", "ShutdownToken"]
