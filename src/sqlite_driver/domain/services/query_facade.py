"""Query Façade - read paths that consult the record cache first.

Reads return one of three shapes:

    dict     full row, first time the record is seen (now cached)
    str      bare record id, record is already held by the caller
    None     no such record (``find`` only)
"""

from __future__ import annotations

import logging
from typing import Union

from sqlite_driver.domain.entities.record_cache import RecordCache
from sqlite_driver.domain.value_objects.arguments import SQLArgs, normalize_args
from sqlite_driver.domain.value_objects.identifiers import RecordId, TableName, record_id_of
from sqlite_driver.infrastructure.metrics import MetricsRegistry, get_metrics
from sqlite_driver.ports.outbound.storage_engine import Row, StorageEngine

logger = logging.getLogger(__name__)

CachedResult = Union[Row, RecordId]


class QueryFacade:
    """Cache-aware reads and local key-value access for one storage handle."""

    def __init__(
        self,
        engine: StorageEngine,
        cache: RecordCache,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._engine = engine
        self._cache = cache
        self._metrics = metrics if metrics is not None else get_metrics()

    def find(self, table: TableName, record_id: RecordId) -> CachedResult | None:
        """Look up one record by id.

        Returns the bare id on a cache hit without touching storage.
        """
        if self._cache.is_cached(table, record_id):
            self._metrics.cache_lookups_total.labels(result="hit").inc()
            return record_id

        self._metrics.cache_lookups_total.labels(result="miss").inc()
        rows = self._engine.query_raw(
            f"SELECT * FROM '{table}' WHERE id == ? LIMIT 1", (record_id,)
        )
        if not rows:
            return None

        self._cache.mark_as_cached(table, record_id)
        return rows[0]

    def cached_query(
        self, table: TableName, sql: str, args: SQLArgs | None = None
    ) -> list[CachedResult]:
        """Run a read query, substituting bare ids for already-cached rows.

        Row order is the storage engine's.
        """
        results: list[CachedResult] = []
        hits = 0
        for row in self._engine.query_raw(sql, normalize_args(args)):
            record_id = record_id_of(row)
            if self._cache.is_cached(table, record_id):
                results.append(record_id)
                hits += 1
            else:
                self._cache.mark_as_cached(table, record_id)
                results.append(row)

        if hits:
            self._metrics.cache_lookups_total.labels(result="hit").inc(hits)
        if len(results) > hits:
            self._metrics.cache_lookups_total.labels(result="miss").inc(len(results) - hits)
        return results

    def query_ids(self, sql: str, args: SQLArgs | None = None) -> list[RecordId]:
        """Run a read query and return only the ids; the cache is not touched."""
        return [record_id_of(row) for row in self._engine.query_raw(sql, normalize_args(args))]

    def count(self, sql: str, args: SQLArgs | None = None) -> int:
        return self._engine.count(sql, normalize_args(args))

    # ── Local storage ─────────────────────────────────────────────────────

    def get_local(self, key: str) -> str | None:
        rows = self._engine.query_raw(
            "SELECT `value` FROM `local_storage` WHERE `key` = ?", (key,)
        )
        if rows:
            return rows[0]["value"]
        return None

    def set_local(self, key: str, value: str) -> None:
        """Insert or overwrite a local storage entry."""
        with self._engine.in_transaction():
            self._engine.execute(
                "INSERT OR REPLACE INTO `local_storage` (`key`, `value`) VALUES (?, ?)",
                (key, value),
            )
        logger.debug(f"Local storage key {key!r} set")

    def remove_local(self, key: str) -> None:
        """Delete a local storage entry; missing keys are ignored."""
        with self._engine.in_transaction():
            self._engine.execute("DELETE FROM `local_storage` WHERE `key` = ?", (key,))
        logger.debug(f"Local storage key {key!r} removed")
