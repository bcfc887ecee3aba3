"""Wiring of drivers from configuration through the DI container."""

from __future__ import annotations

from sqlite_driver.application.connection_registry import (
    ConnectionRegistry,
    get_connection_registry,
)
from sqlite_driver.application.database_driver import DatabaseDriver
from sqlite_driver.infrastructure.config import Config, get_config
from sqlite_driver.infrastructure.container import Container, get_container
from sqlite_driver.infrastructure.logging import configure_logging, get_logger
from sqlite_driver.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from sqlite_driver.infrastructure.tracing import setup_tracing


def build_container(
    config: Config | None = None,
    container: Container | None = None,
) -> Container:
    """
    Register driver dependencies in a container.

    Config is always (re)registered. Tracing is exported when an OTLP
    endpoint is configured, and the Prometheus exporter is started on first
    resolve when metrics are enabled. Metrics and the connection registry
    keep any registration already present, so tests can inject isolated
    instances. Drivers are built fresh on every resolve.

    Args:
        config: Configuration (defaults to ``get_config()``)
        container: Target container (defaults to the global one)

    Returns:
        The populated container
    """
    config = config if config is not None else get_config()
    container = container if container is not None else get_container()
    observability = config.observability

    configure_logging(observability)
    if observability.otel_endpoint:
        setup_tracing(
            service_name=observability.otel_service_name,
            otlp_endpoint=observability.otel_endpoint,
        )

    container.register_singleton(Config, config)
    if not container.has(MetricsRegistry):
        if observability.metrics_enabled:
            container.register_factory(
                MetricsRegistry, lambda c: setup_metrics(observability.metrics_port)
            )
        else:
            container.register_factory(MetricsRegistry, lambda c: get_metrics())
    if not container.has(ConnectionRegistry):
        container.register_factory(ConnectionRegistry, lambda c: get_connection_registry())

    container.register_factory(
        DatabaseDriver,
        lambda c: DatabaseDriver(
            registry=c.resolve(ConnectionRegistry),
            metrics=c.resolve(MetricsRegistry),
            extension=c.resolve(Config).database.extension,
        ),
        shared=False,
    )

    get_logger(__name__).info(
        "sqlite_driver_container_initialized",
        database=config.database.name,
        schema_version=config.database.schema_version,
    )
    return container


def open_driver(container: Container | None = None) -> DatabaseDriver:
    """
    Resolve a driver and open the configured database.

    Raises:
        MigrationNeededError: The database is older than the configured version.
        SchemaNeededError: The database needs a fresh schema.
    """
    container = container if container is not None else build_container()
    config = container.resolve(Config)
    driver = container.resolve(DatabaseDriver)
    driver.initialize(config.database.name, config.database.schema_version)
    return driver
