"""Testes do emissor de métricas."""

from __future__ import annotations

import logging

import pytest

from app.observability.metrics import (
    NoopMetricsEmitter,
    PrometheusMetricsEmitter,
    create_metrics_emitter,
)
from config.settings import MetricsSettings


@pytest.fixture
def emitter() -> PrometheusMetricsEmitter:
    return PrometheusMetricsEmitter(MetricsSettings(namespace="vigia_test"))


def test_factory_respects_enabled_flag() -> None:
    assert type(create_metrics_emitter(MetricsSettings(enabled=False))) is NoopMetricsEmitter
    assert isinstance(create_metrics_emitter(MetricsSettings()), PrometheusMetricsEmitter)


def test_record_up_sets_gauge(emitter: PrometheusMetricsEmitter) -> None:
    assert emitter.registry.get_sample_value("vigia_test_up") == 0.0

    emitter.record_up()

    assert emitter.registry.get_sample_value("vigia_test_up") == 1.0


def test_session_counter_is_labelled(emitter: PrometheusMetricsEmitter) -> None:
    emitter.record_session_started("layer1", "contract_event")
    emitter.record_session_started("layer1", "contract_event")

    value = emitter.registry.get_sample_value(
        "vigia_test_sessions_started_total",
        {"network": "layer1", "heuristic_type": "contract_event"},
    )
    assert value == 2.0


def test_bootstrap_failure_and_duration(emitter: PrometheusMetricsEmitter) -> None:
    emitter.record_bootstrap_failure("deploy_config")
    emitter.record_bootstrap_duration(0.02)

    assert (
        emitter.registry.get_sample_value(
            "vigia_test_bootstrap_failures_total", {"stage": "deploy_config"}
        )
        == 1.0
    )
    assert emitter.registry.get_sample_value("vigia_test_bootstrap_duration_seconds_count") == 1.0


def test_active_sessions_gauge(emitter: PrometheusMetricsEmitter) -> None:
    emitter.set_active_sessions(3)

    assert emitter.registry.get_sample_value("vigia_test_active_sessions") == 3.0


def test_instances_do_not_share_registry() -> None:
    first = PrometheusMetricsEmitter(MetricsSettings())
    second = PrometheusMetricsEmitter(MetricsSettings())

    first.record_up()

    assert second.registry.get_sample_value("vigia_up") == 0.0


def test_metrics_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="app.observability.metrics")

    NoopMetricsEmitter().record_session_started("layer2", "fault_detector")

    record = next(r for r in caplog.records if r.getMessage() == "metric_session_started")
    assert record.network == "layer2"
    assert record.heuristic_type == "fault_detector"


def test_start_and_stop_http_server() -> None:
    emitter = PrometheusMetricsEmitter(MetricsSettings(host="127.0.0.1", port=0))

    emitter.start()
    try:
        assert emitter.running
    finally:
        emitter.stop()

    assert not emitter.running
