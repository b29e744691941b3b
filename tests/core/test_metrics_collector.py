"""Tests for the Prometheus metrics collector."""

from prometheus_client import CollectorRegistry

from marketfeed.core.monitoring import MetricsCollector, configure_metrics_collector, get_metrics_collector


def test_observe_attempt_updates_metrics() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.observe_attempt("yahoo", "ok", 0.25)
    collector.observe_attempt("yahoo", "timeout", 0.50)

    count = registry.get_sample_value("marketfeed_source_attempt_latency_seconds_count", {"source": "yahoo"})
    total_latency = registry.get_sample_value("marketfeed_source_attempt_latency_seconds_sum", {"source": "yahoo"})
    ok = registry.get_sample_value("marketfeed_source_attempts_total", {"source": "yahoo", "outcome": "ok"})
    timeouts = registry.get_sample_value("marketfeed_source_attempts_total", {"source": "yahoo", "outcome": "timeout"})
    error_rate = registry.get_sample_value("marketfeed_source_error_rate", {"source": "yahoo"})

    assert count == 2.0
    assert total_latency == 0.75
    assert ok == 1.0
    assert timeouts == 1.0
    assert error_rate == 0.5


def test_cache_and_fallback_counters() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.record_cache_lookup("quote", hit=True)
    collector.record_cache_lookup("quote", hit=False)
    collector.record_cache_lookup("quote", hit=False)
    collector.record_synthetic_fallback("bars")

    assert registry.get_sample_value("marketfeed_cache_lookups_total", {"kind": "quote", "result": "hit"}) == 1.0
    assert registry.get_sample_value("marketfeed_cache_lookups_total", {"kind": "quote", "result": "miss"}) == 2.0
    assert registry.get_sample_value("marketfeed_synthetic_fallbacks_total", {"kind": "bars"}) == 1.0


def test_render_outputs_exposition_format() -> None:
    collector = MetricsCollector(registry=CollectorRegistry())
    collector.observe_attempt("sectors", "bad_response", 0.1)

    payload = collector.render().decode()

    assert "marketfeed_source_attempts_total" in payload
    assert 'outcome="bad_response"' in payload


def test_configure_overrides_global_collector() -> None:
    collector = MetricsCollector(registry=CollectorRegistry())
    configure_metrics_collector(collector)
    try:
        assert get_metrics_collector() is collector
    finally:
        configure_metrics_collector(None)

    assert get_metrics_collector() is not collector
