"""Emissor de métricas do processo.

Duas saídas para cada registro:
- Prometheus (prometheus_client), exposto em /metrics por um servidor HTTP
  próprio iniciado em start()
- Log estruturado "metric_*", para agregação posterior via logs

Métricas:
- <ns>_up: gauge de liveness (1 depois que todos os subsistemas subiram)
- <ns>_sessions_started_total: counter por rede/heurística
- <ns>_active_sessions: gauge de sessões ativas
- <ns>_bootstrap_failures_total: counter por estágio
- <ns>_bootstrap_duration_seconds: histogram de duração do lote

Uso:
    emitter = create_metrics_emitter(get_metrics_settings())
    emitter.start()
    emitter.record_up()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

if TYPE_CHECKING:
    import threading
    from wsgiref.simple_server import WSGIServer

    from config.settings.metrics import MetricsSettings

logger = logging.getLogger(__name__)


def _log_metric(metric_type: str, **fields: Any) -> None:
    logger.info("metric_%s", metric_type, extra={"metric_type": metric_type, **fields})


class NoopMetricsEmitter:
    """Emissor usado com METRICS_ENABLED=false: só registra em log."""

    def start(self) -> None:
        logger.info("metrics_disabled", extra={"component": "metrics"})

    def stop(self) -> None:
        return None

    def record_up(self) -> None:
        _log_metric("up", value=1)

    def record_session_started(self, network: str, heuristic_type: str) -> None:
        _log_metric("session_started", network=network, heuristic_type=heuristic_type)

    def record_bootstrap_failure(self, stage: str) -> None:
        _log_metric("bootstrap_failure", stage=stage)

    def record_bootstrap_duration(self, seconds: float) -> None:
        _log_metric("bootstrap_duration", duration_seconds=round(seconds, 4))

    def set_active_sessions(self, count: int) -> None:
        _log_metric("active_sessions", value=count)


class PrometheusMetricsEmitter(NoopMetricsEmitter):
    """Emissor Prometheus com registry isolado.

    Cada instância tem seu próprio CollectorRegistry para permitir
    várias instâncias no mesmo processo (testes) sem colisão de nomes.
    """

    def __init__(self, settings: MetricsSettings) -> None:
        self._settings = settings
        self.registry = CollectorRegistry()
        namespace = settings.namespace
        self._up = Gauge(
            "up",
            "1 quando todos os subsistemas do processo estão no ar.",
            namespace=namespace,
            registry=self.registry,
        )
        self._sessions_started = Counter(
            "sessions_started_total",
            "Sessões de heurística iniciadas.",
            ["network", "heuristic_type"],
            namespace=namespace,
            registry=self.registry,
        )
        self._active_sessions = Gauge(
            "active_sessions",
            "Sessões de heurística ativas.",
            namespace=namespace,
            registry=self.registry,
        )
        self._bootstrap_failures = Counter(
            "bootstrap_failures_total",
            "Falhas de bootstrap por estágio.",
            ["stage"],
            namespace=namespace,
            registry=self.registry,
        )
        self._bootstrap_duration = Histogram(
            "bootstrap_duration_seconds",
            "Duração de uma chamada de bootstrap.",
            namespace=namespace,
            registry=self.registry,
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5),
        )
        self._server: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._server is not None

    def start(self) -> None:
        """Sobe o servidor HTTP de /metrics. Falhas de bind propagam."""
        if self._server is not None:
            return
        self._server, self._thread = start_http_server(
            self._settings.port,
            addr=self._settings.host,
            registry=self.registry,
        )
        logger.info(
            "metrics_server_started",
            extra={
                "component": "metrics",
                "host": self._settings.host,
                "port": self._settings.port,
            },
        )

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
        self._server = None
        self._thread = None
        logger.info("metrics_server_stopped", extra={"component": "metrics"})

    def record_up(self) -> None:
        self._up.set(1)
        super().record_up()

    def record_session_started(self, network: str, heuristic_type: str) -> None:
        self._sessions_started.labels(network=network, heuristic_type=heuristic_type).inc()
        super().record_session_started(network, heuristic_type)

    def record_bootstrap_failure(self, stage: str) -> None:
        self._bootstrap_failures.labels(stage=stage).inc()
        super().record_bootstrap_failure(stage)

    def record_bootstrap_duration(self, seconds: float) -> None:
        self._bootstrap_duration.observe(seconds)
        super().record_bootstrap_duration(seconds)

    def set_active_sessions(self, count: int) -> None:
        self._active_sessions.set(count)
        super().set_active_sessions(count)


def create_metrics_emitter(settings: MetricsSettings) -> NoopMetricsEmitter:
    """Cria emissor conforme METRICS_ENABLED."""
    if not settings.enabled:
        return NoopMetricsEmitter()
    return PrometheusMetricsEmitter(settings)
