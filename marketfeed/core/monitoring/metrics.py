"""Prometheus metrics helpers for marketfeed."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import DefaultDict

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest


@dataclass
class _SourceStats:
    """Internal container tracking per-source attempt outcomes."""

    total: int = 0
    failures: int = 0


class MetricsCollector:
    """Collects source, cache and fallback metrics of the acquisition pipeline."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.attempt_latency_seconds = Histogram(
            "marketfeed_source_attempt_latency_seconds",
            "Latency distribution of single source attempts.",
            ("source",),
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 8.0, 10.0, float("inf")),
            registry=self.registry,
        )
        self.source_attempts_total = Counter(
            "marketfeed_source_attempts_total",
            "Source attempts grouped by outcome.",
            ("source", "outcome"),
            registry=self.registry,
        )
        self.source_error_rate = Gauge(
            "marketfeed_source_error_rate",
            "Share of failed attempts per source (0-1 range).",
            ("source",),
            registry=self.registry,
        )
        self.cache_lookups_total = Counter(
            "marketfeed_cache_lookups_total",
            "Cache lookups grouped by entry kind and result.",
            ("kind", "result"),
            registry=self.registry,
        )
        self.synthetic_fallbacks_total = Counter(
            "marketfeed_synthetic_fallbacks_total",
            "Results fabricated after every source failed.",
            ("kind",),
            registry=self.registry,
        )
        self._source_stats: DefaultDict[str, _SourceStats] = defaultdict(_SourceStats)

    def observe_attempt(self, source: str, outcome: str, latency_seconds: float) -> None:
        """Record one source attempt; any outcome other than ``ok`` counts as a failure."""

        self.attempt_latency_seconds.labels(source=source).observe(latency_seconds)
        self.source_attempts_total.labels(source=source, outcome=outcome).inc()
        stats = self._source_stats[source]
        stats.total += 1
        if outcome != "ok":
            stats.failures += 1
        self.source_error_rate.labels(source=source).set(stats.failures / stats.total)

    def record_cache_lookup(self, kind: str, *, hit: bool) -> None:
        self.cache_lookups_total.labels(kind=kind, result="hit" if hit else "miss").inc()

    def record_synthetic_fallback(self, kind: str) -> None:
        self.synthetic_fallbacks_total.labels(kind=kind).inc()

    def render(self) -> bytes:
        """Render metrics in Prometheus exposition format."""

        return generate_latest(self.registry)


_DEFAULT_COLLECTOR: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the global metrics collector instance."""

    global _DEFAULT_COLLECTOR
    if _DEFAULT_COLLECTOR is None:
        _DEFAULT_COLLECTOR = MetricsCollector()
    return _DEFAULT_COLLECTOR


def configure_metrics_collector(collector: MetricsCollector | None) -> None:
    """Override the global metrics collector for application wiring or tests."""

    global _DEFAULT_COLLECTOR
    _DEFAULT_COLLECTOR = collector
