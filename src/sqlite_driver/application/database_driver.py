"""Database Driver - unified entry point for the record layer.

This module provides the DatabaseDriver class that opens a database,
gates it on a schema version, and exposes cache-aware reads and batched
writes.

Usage:
    from sqlite_driver.application import DatabaseDriver

    driver = DatabaseDriver()
    driver.set_up_with_schema("app", "create table tasks (id text primary key, _status text);", 1)

    driver.batch([
        ("create", "tasks", "t1", "insert into tasks (id) values (?)", ["t1"]),
    ])
    driver.find("tasks", "t1")        # -> "t1" (already cached)

    driver.close()

Opening an existing database:

    try:
        driver.initialize("app", schema_version=3)
    except MigrationNeededError as exc:
        driver.apply_migrations(migrations_since(exc.database_version))
    except SchemaNeededError:
        driver.unsafe_reset_database(Schema(sql=schema_sql, version=3))
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

from sqlite_driver.adapters.outbound.sqlite_storage_engine import SQLiteStorageEngine
from sqlite_driver.application.connection_registry import (
    ConnectionRegistry,
    get_connection_registry,
)
from sqlite_driver.domain.entities.batch_operation import BatchOperation
from sqlite_driver.domain.entities.record_cache import RecordCache
from sqlite_driver.domain.errors import DriverNotInitializedError
from sqlite_driver.domain.services.batch_executor import BatchExecutor
from sqlite_driver.domain.services.path_resolver import (
    DEFAULT_EXTENSION,
    get_path,
    is_shared_memory,
)
from sqlite_driver.domain.services.query_facade import CachedResult, QueryFacade
from sqlite_driver.domain.services.schema_gate import SchemaGate
from sqlite_driver.domain.value_objects.arguments import SQLArgs
from sqlite_driver.domain.value_objects.identifiers import RecordId, SchemaVersion, TableName
from sqlite_driver.domain.value_objects.schema import Migration, Schema
from sqlite_driver.infrastructure.logging import get_logger
from sqlite_driver.infrastructure.metrics import MetricsRegistry, get_metrics
from sqlite_driver.ports.outbound.storage_engine import StorageEngine

EngineFactory = Callable[[str], StorageEngine]


class DatabaseDriver:
    """Transactional persistence driver over one storage handle.

    Each driver owns its record cache. Drivers opened on the same
    shared-memory name share one handle through the connection registry,
    but not their caches.

    Thread Safety:
        Statements and transactions are serialized by the storage handle.
        Batches on one driver are serialized with their cache updates.
    """

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        engine_factory: EngineFactory = SQLiteStorageEngine,
        metrics: MetricsRegistry | None = None,
        extension: str = DEFAULT_EXTENSION,
        cwd: str | None = None,
    ) -> None:
        """Create an unopened driver.

        Args:
            registry: Registry for shared-memory handles (process-wide default).
            engine_factory: Opens a storage handle on a resolved path.
            metrics: Metrics registry (global default).
            extension: Canonical database file extension.
            cwd: Base directory for relative database names.
        """
        self._registry = registry if registry is not None else get_connection_registry()
        self._engine_factory = engine_factory
        self._metrics = metrics if metrics is not None else get_metrics()
        self._extension = extension
        self._cwd = cwd

        self._cache = RecordCache()
        self._db_name: str | None = None
        self._engine: StorageEngine | None = None
        self._shared = False
        self._gate: SchemaGate | None = None
        self._queries: QueryFacade | None = None
        self._batches: BatchExecutor | None = None

        self._logger = get_logger(__name__)

    # ── Properties ────────────────────────────────────────────────────────

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def path(self) -> str:
        """Resolved location of the open database."""
        return self._require_engine().path

    @property
    def engine(self) -> StorageEngine:
        return self._require_engine()

    @property
    def cache(self) -> RecordCache:
        return self._cache

    # ── Setup ─────────────────────────────────────────────────────────────

    def initialize(self, db_name: str, schema_version: int) -> None:
        """Open ``db_name`` and require it to be at ``schema_version``.

        Raises:
            MigrationNeededError: The database is older; apply migrations.
            SchemaNeededError: The database needs a fresh schema.
        """
        self._open(db_name)
        self.is_compatible(schema_version)

    def set_up_with_schema(self, db_name: str, schema: str, schema_version: int) -> None:
        """Open ``db_name``, wipe it, and set up a fresh schema."""
        self._open(db_name)
        self.unsafe_reset_database(Schema(sql=schema, version=SchemaVersion(schema_version)))
        self.is_compatible(schema_version)

    def set_up_with_migrations(self, db_name: str, migration: Migration) -> None:
        """Open ``db_name`` and migrate it by one step.

        Raises:
            IncompatibleMigrationError: The database is not at
                ``migration.from_version``.
        """
        self._open(db_name)
        self.apply_migration(migration)
        self.is_compatible(migration.to_version)

    def _open(self, db_name: str) -> None:
        path = get_path(db_name, cwd=self._cwd, extension=self._extension)
        shared = is_shared_memory(db_name)
        # The previous handle stays usable if opening the new one fails
        if shared:
            engine = self._registry.get_or_create(db_name, lambda: self._engine_factory(path))
        else:
            engine = self._engine_factory(path)

        if self._engine is not engine:
            self._close_private_engine()

        self._shared = shared
        self._db_name = db_name
        self._engine = engine
        # Cached ids describe the previously opened database
        self._cache.clear()
        self._gate = SchemaGate(engine, self._cache, self._metrics)
        self._queries = QueryFacade(engine, self._cache, self._metrics)
        self._batches = BatchExecutor(engine, self._cache, self._metrics)

        self._logger.info("database_opened", database=path, shared=self._shared)

    # ── Schema / migrations ───────────────────────────────────────────────

    def is_compatible(self, schema_version: int) -> None:
        self._require(self._gate).is_compatible(schema_version)

    def set_up_schema(self, schema: Schema) -> None:
        self._require(self._gate).set_up_schema(schema)

    def apply_migration(self, migration: Migration) -> None:
        self._require(self._gate).apply_migration(migration)
        self._logger.info(
            "migration_applied",
            database=self._db_name,
            from_version=migration.from_version,
            to_version=migration.to_version,
        )

    def apply_migrations(self, migrations: Iterable[Migration]) -> None:
        """Apply a chain of migrations in order, each gated on the current version.

        Migrations that committed before a failing one stay applied.
        """
        for migration in migrations:
            self.apply_migration(migration)

    def unsafe_reset_database(self, schema: Schema) -> None:
        """Destroy every table and cached id, then set up ``schema``."""
        self._require(self._gate).unsafe_reset_database(schema)
        self._logger.warning(
            "database_reset", database=self._db_name, schema_version=schema.version
        )

    # ── Reads ─────────────────────────────────────────────────────────────

    def find(self, table: TableName, record_id: RecordId) -> CachedResult | None:
        return self._require(self._queries).find(table, record_id)

    def cached_query(
        self, table: TableName, sql: str, args: SQLArgs | None = None
    ) -> list[CachedResult]:
        return self._require(self._queries).cached_query(table, sql, args)

    def query_ids(self, sql: str, args: SQLArgs | None = None) -> list[RecordId]:
        return self._require(self._queries).query_ids(sql, args)

    def count(self, sql: str, args: SQLArgs | None = None) -> int:
        return self._require(self._queries).count(sql, args)

    def get_local(self, key: str) -> str | None:
        return self._require(self._queries).get_local(key)

    def set_local(self, key: str, value: str) -> None:
        self._require(self._queries).set_local(key, value)

    def remove_local(self, key: str) -> None:
        self._require(self._queries).remove_local(key)

    # ── Writes ────────────────────────────────────────────────────────────

    def batch(self, operations: Iterable[BatchOperation | Sequence[Any]]) -> None:
        self._require(self._batches).batch(operations)

    def destroy_deleted_records(self, table: TableName, record_ids: Sequence[RecordId]) -> int:
        return self._require(self._batches).destroy_deleted_records(table, record_ids)

    # ── Record cache ──────────────────────────────────────────────────────

    def is_cached(self, table: TableName, record_id: RecordId) -> bool:
        return self._cache.is_cached(table, record_id)

    def mark_as_cached(self, table: TableName, record_id: RecordId) -> None:
        self._cache.mark_as_cached(table, record_id)

    def remove_from_cache(self, table: TableName, record_id: RecordId) -> None:
        self._cache.remove_from_cache(table, record_id)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def close(self) -> None:
        """Release this driver's handle.

        Shared-memory handles stay open in the registry so that other
        drivers, and later drivers, keep seeing the same data.
        """
        self._close_private_engine()
        self._engine = None
        self._gate = self._queries = self._batches = None
        self._cache.clear()

    def _close_private_engine(self) -> None:
        if self._engine is not None and not self._shared:
            self._engine.close()

    def _require_engine(self) -> StorageEngine:
        if self._engine is None:
            raise DriverNotInitializedError("Database driver used before initialization")
        return self._engine

    def _require(self, component: Any) -> Any:
        if component is None:
            raise DriverNotInitializedError("Database driver used before initialization")
        return component

    def __enter__(self) -> DatabaseDriver:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DatabaseDriver(database={self._db_name!r}, cached={len(self._cache)})"
