"""Pytest configuration and fixtures for sqlite_driver tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from sqlite_driver.adapters.outbound import SQLiteStorageEngine
from sqlite_driver.application import ConnectionRegistry, DatabaseDriver
from sqlite_driver.infrastructure.config import Config, DatabaseConfig, ObservabilityConfig
from sqlite_driver.infrastructure.container import Container, reset_container
from sqlite_driver.infrastructure.metrics import MetricsRegistry

TASKS_SCHEMA = """
    create table tasks (
        id text primary key not null,
        _status text,
        name text,
        is_done integer
    );
    create table projects (
        id text primary key not null,
        _status text,
        name text
    );
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration pointing at a temporary database."""
    return Config(
        database=DatabaseConfig(
            name=str(temp_dir / "app"),
            schema_version=3,
        ),
        observability=ObservabilityConfig(
            log_level="DEBUG",
            log_format="console",
        ),
    )


@pytest.fixture
def container() -> Generator[Container, None, None]:
    """Provide a fresh DI container for each test."""
    reset_container()
    c = Container()
    yield c
    c.clear()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def connection_registry() -> Generator[ConnectionRegistry, None, None]:
    """Provide an isolated shared-handle registry."""
    registry = ConnectionRegistry()
    yield registry
    registry.clear()


@pytest.fixture
def engine() -> Generator[SQLiteStorageEngine, None, None]:
    """Provide an in-memory storage engine."""
    eng = SQLiteStorageEngine(":memory:")
    yield eng
    eng.close()


@pytest.fixture
def driver(
    temp_dir: Path,
    metrics_registry: MetricsRegistry,
    connection_registry: ConnectionRegistry,
) -> Generator[DatabaseDriver, None, None]:
    """Provide a driver set up with the tasks schema at version 1."""
    drv = DatabaseDriver(
        registry=connection_registry,
        metrics=metrics_registry,
        cwd=str(temp_dir),
    )
    drv.set_up_with_schema("tasks", TASKS_SCHEMA, 1)
    yield drv
    drv.close()


@pytest.fixture
def tasks_schema() -> str:
    """Provide the schema SQL for the tasks/projects test tables."""
    return TASKS_SCHEMA


@pytest.fixture
def read_metric(metrics_registry: MetricsRegistry) -> Callable[..., float]:
    """Read a sample from the test metrics registry (0 if never recorded)."""

    def _read(name: str, **labels: str) -> float:
        value = metrics_registry._registry.get_sample_value(name, labels)
        return value or 0.0

    return _read


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
