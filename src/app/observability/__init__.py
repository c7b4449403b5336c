"""Observabilidade: logs estruturados, correlation_id, métricas.

Uso:
    from app.observability import correlation_scope, get_correlation_id
    from app.observability import create_metrics_emitter
"""

from app.observability.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    NoopMetricsEmitter,
    PrometheusMetricsEmitter,
    create_metrics_emitter,
)

__all__ = [
    "NoopMetricsEmitter",
    "PrometheusMetricsEmitter",
    "correlation_scope",
    "create_metrics_emitter",
    "generate_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    "set_correlation_id",
]
