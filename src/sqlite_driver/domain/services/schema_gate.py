"""Schema/Migration Gate - version checks, fresh setup and migrations.

The database carries a single integer schema version (SQLite's
``user_version``). Before any query runs, the gate compares it with the
version the caller expects:

    persisted == expected          -> compatible
    0 < persisted < expected       -> MigrationNeededError(persisted)
    persisted == 0 or > expected   -> SchemaNeededError

Schema setup and each migration write their DDL and the new version in
one transaction, so the version never disagrees with the tables.
"""

from __future__ import annotations

import logging

from sqlite_driver.domain.entities.record_cache import RecordCache
from sqlite_driver.domain.errors import (
    IncompatibleMigrationError,
    MigrationNeededError,
    SchemaNeededError,
)
from sqlite_driver.domain.value_objects.identifiers import SchemaVersion
from sqlite_driver.domain.value_objects.schema import Migration, Schema
from sqlite_driver.infrastructure.metrics import MetricsRegistry, get_metrics
from sqlite_driver.infrastructure.tracing import trace_span
from sqlite_driver.ports.outbound.storage_engine import StorageEngine

logger = logging.getLogger(__name__)

LOCAL_STORAGE_SCHEMA = """
      create table local_storage (
      key varchar(16) primary key not null,
      value text not null
      );

      create index local_storage_key_index on local_storage (key);
      """


class SchemaGate:
    """Guards schema compatibility for one storage handle.

    Usage:
        gate = SchemaGate(engine, cache)
        try:
            gate.is_compatible(SchemaVersion(5))
        except MigrationNeededError as exc:
            gate.apply_migration(migrations_from(exc.database_version))
        except SchemaNeededError:
            gate.unsafe_reset_database(schema)
    """

    def __init__(
        self,
        engine: StorageEngine,
        cache: RecordCache,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._engine = engine
        self._cache = cache
        self._metrics = metrics if metrics is not None else get_metrics()

    @property
    def database_version(self) -> SchemaVersion:
        """Return the version currently persisted in storage."""
        return SchemaVersion(self._engine.user_version)

    def is_compatible(self, expected_version: int) -> None:
        """Check the persisted version against the expected one.

        Raises:
            MigrationNeededError: If the database is older but initialized.
            SchemaNeededError: If the database is uninitialized, or newer
                than (or otherwise unknown to) the caller.
        """
        database_version = self._engine.user_version
        if database_version == expected_version:
            return

        if 0 < database_version < expected_version:
            logger.info(
                f"Database at version {database_version} needs migration to {expected_version}"
            )
            raise MigrationNeededError(database_version)

        logger.info(
            f"Database at version {database_version} needs a fresh schema "
            f"(expected {expected_version})"
        )
        raise SchemaNeededError(database_version)

    def set_up_schema(self, schema: Schema) -> None:
        """Create the schema plus local storage and stamp its version atomically."""
        with trace_span("schema.set_up", {"schema.version": schema.version}):
            with self._engine.in_transaction():
                self._engine.execute_statements(schema.sql + LOCAL_STORAGE_SCHEMA)
                self._engine.user_version = schema.version

        self._metrics.schema_setups_total.inc()
        logger.info(f"Schema set up at version {schema.version}")

    def apply_migration(self, migration: Migration) -> None:
        """Apply one migration if its source version matches storage.

        Versions are compared as strings so that a version read back with a
        different numeric type still matches.

        Raises:
            IncompatibleMigrationError: If ``migration.from_version`` is not
                the persisted version. Nothing is written in that case.
        """
        database_version = self._engine.user_version
        if str(database_version) != str(migration.from_version):
            self._metrics.migrations_total.labels(status="rejected").inc()
            logger.error(
                f"Rejected {migration!r}: database is at version {database_version}"
            )
            raise IncompatibleMigrationError(database_version, migration.from_version)

        with trace_span(
            "schema.migrate",
            {"migration.from": migration.from_version, "migration.to": migration.to_version},
        ):
            with self._engine.in_transaction():
                self._engine.execute_statements(migration.sql)
                self._engine.user_version = migration.to_version

        self._metrics.migrations_total.labels(status="applied").inc()
        logger.info(f"Applied {migration!r}")

    def unsafe_reset_database(self, schema: Schema) -> None:
        """Destroy all storage contents, forget the cache, set up ``schema``.

        Destructive and irreversible. Callers gate its use.
        """
        with trace_span("schema.reset", {"schema.version": schema.version}):
            self._engine.unsafe_destroy_everything()
            self._cache.clear()
            self.set_up_schema(schema)

        self._metrics.resets_total.inc()
        logger.warning(f"Database reset to fresh schema version {schema.version}")
