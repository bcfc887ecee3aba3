"""Unit tests for cache-aware reads and local storage."""

from __future__ import annotations

from typing import Callable

import pytest

from sqlite_driver.adapters.outbound import SQLiteStorageEngine
from sqlite_driver.domain.entities import RecordCache
from sqlite_driver.domain.services import QueryFacade, SchemaGate
from sqlite_driver.domain.value_objects import RecordId, Schema, SchemaVersion, TableName
from sqlite_driver.infrastructure.metrics import MetricsRegistry

TASKS = TableName("tasks")


@pytest.fixture
def cache() -> RecordCache:
    return RecordCache()


@pytest.fixture
def facade(
    engine: SQLiteStorageEngine,
    cache: RecordCache,
    metrics_registry: MetricsRegistry,
    tasks_schema: str,
) -> QueryFacade:
    SchemaGate(engine, cache, metrics_registry).set_up_schema(
        Schema(sql=tasks_schema, version=SchemaVersion(1))
    )
    engine.execute_statements(
        """
        insert into tasks (id, _status, name, is_done) values ('t1', 'created', 'one', 1);
        insert into tasks (id, _status, name, is_done) values ('t2', 'created', 'two', 0);
        insert into tasks (id, _status, name, is_done) values ('t3', 'created', 'three', 1);
        """
    )
    return QueryFacade(engine, cache, metrics_registry)


@pytest.mark.unit
class TestFind:
    """Single-record lookups."""

    def test_first_find_returns_row(self, facade: QueryFacade, cache: RecordCache) -> None:
        row = facade.find(TASKS, RecordId("t1"))

        assert row == {"id": "t1", "_status": "created", "name": "one", "is_done": 1}
        assert cache.is_cached(TASKS, RecordId("t1"))

    def test_second_find_returns_id(
        self, facade: QueryFacade, read_metric: Callable[..., float]
    ) -> None:
        facade.find(TASKS, RecordId("t1"))

        assert facade.find(TASKS, RecordId("t1")) == "t1"
        assert read_metric("sqlite_driver_cache_lookups_total", result="hit") == 1
        assert read_metric("sqlite_driver_cache_lookups_total", result="miss") == 1

    def test_missing_record(self, facade: QueryFacade, cache: RecordCache) -> None:
        assert facade.find(TASKS, RecordId("nope")) is None
        assert not cache.is_cached(TASKS, RecordId("nope"))

    def test_cache_hit_skips_storage(
        self, facade: QueryFacade, engine: SQLiteStorageEngine, cache: RecordCache
    ) -> None:
        """A cached id is returned even after the row disappeared underneath."""
        cache.mark_as_cached(TASKS, RecordId("t2"))
        engine.execute("delete from tasks where id = 't2'")

        assert facade.find(TASKS, RecordId("t2")) == "t2"


@pytest.mark.unit
class TestQueries:
    """Multi-row reads."""

    def test_cached_query_substitutes_ids(self, facade: QueryFacade) -> None:
        facade.find(TASKS, RecordId("t2"))

        results = facade.cached_query(TASKS, "select * from tasks order by id")

        assert results[0] == {"id": "t1", "_status": "created", "name": "one", "is_done": 1}
        assert results[1] == "t2"
        assert results[2]["id"] == "t3"

    def test_cached_query_caches_rows(self, facade: QueryFacade) -> None:
        facade.cached_query(TASKS, "select * from tasks")

        assert facade.cached_query(TASKS, "select * from tasks order by id desc") == [
            "t3",
            "t2",
            "t1",
        ]

    def test_cached_query_with_boolean_args(self, facade: QueryFacade) -> None:
        results = facade.cached_query(
            TASKS, "select * from tasks where is_done = ? order by id", [True]
        )

        assert [row["id"] for row in results] == ["t1", "t3"]

    def test_query_ids_does_not_cache(self, facade: QueryFacade, cache: RecordCache) -> None:
        ids = facade.query_ids("select id from tasks where is_done = :done order by id", {"done": False})

        assert ids == ["t2"]
        assert len(cache) == 0

    def test_count(self, facade: QueryFacade) -> None:
        assert facade.count("select count(*) from tasks") == 3
        assert facade.count("select count(*) from tasks where is_done = ?", [False]) == 1


@pytest.mark.unit
class TestLocalStorage:
    """Local key-value storage."""

    def test_missing_key(self, facade: QueryFacade) -> None:
        assert facade.get_local("sync_token") is None

    def test_set_and_overwrite(self, facade: QueryFacade) -> None:
        facade.set_local("sync_token", "abc")
        facade.set_local("sync_token", "def")

        assert facade.get_local("sync_token") == "def"

    def test_remove(self, facade: QueryFacade) -> None:
        facade.set_local("sync_token", "abc")
        facade.remove_local("sync_token")
        facade.remove_local("never_set")

        assert facade.get_local("sync_token") is None
