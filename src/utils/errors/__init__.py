"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    BootstrapFileError,
    BootstrapStageError,
    ConfigurationError,
    DeploymentConfigError,
    InvalidSessionRequestError,
    LifecycleError,
    ServerStartError,
    SessionCapacityError,
    SessionRequestError,
    StartError,
    UnknownSessionError,
    VigiaError,
)

__all__ = [
    "BootstrapFileError",
    "BootstrapStageError",
    "ConfigurationError",
    "DeploymentConfigError",
    "InvalidSessionRequestError",
    "LifecycleError",
    "ServerStartError",
    "SessionCapacityError",
    "SessionRequestError",
    "StartError",
    "UnknownSessionError",
    "VigiaError",
]
