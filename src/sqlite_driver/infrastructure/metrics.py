"""Prometheus metrics for the SQLite driver."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all driver metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry if registry is not None else REGISTRY

        # Batch metrics
        self.batches_total = Counter(
            "sqlite_driver_batches_total",
            "Total number of write batches",
            ["status"],  # commit, rollback
            registry=self._registry,
        )

        self.batch_operations_total = Counter(
            "sqlite_driver_batch_operations_total",
            "Total number of batch operations applied",
            ["operation"],  # execute, create, mark_as_deleted, destroy_permanently
            registry=self._registry,
        )

        self.batch_latency_seconds = Histogram(
            "sqlite_driver_batch_latency_seconds",
            "Batch transaction latency in seconds",
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        self.purged_records_total = Counter(
            "sqlite_driver_purged_records_total",
            "Total soft-deleted records permanently destroyed",
            registry=self._registry,
        )

        # Record cache metrics
        self.cache_lookups_total = Counter(
            "sqlite_driver_cache_lookups_total",
            "Record cache lookups on read paths",
            ["result"],  # hit, miss
            registry=self._registry,
        )

        # Schema metrics
        self.schema_setups_total = Counter(
            "sqlite_driver_schema_setups_total",
            "Total fresh schema setups",
            registry=self._registry,
        )

        self.migrations_total = Counter(
            "sqlite_driver_migrations_total",
            "Total schema migrations attempted",
            ["status"],  # applied, rejected
            registry=self._registry,
        )

        self.resets_total = Counter(
            "sqlite_driver_resets_total",
            "Total destructive database resets",
            registry=self._registry,
        )

        self.info = Info(
            "sqlite_driver",
            "SQLite driver information",
            registry=self._registry,
        )


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry (the global metrics are reused
            when omitted, since the default registry rejects duplicates)

    Returns:
        The metrics registry
    """
    global _metrics
    if registry is not None or _metrics is None:
        _metrics = MetricsRegistry(registry)

    from sqlite_driver import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=_metrics._registry)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
