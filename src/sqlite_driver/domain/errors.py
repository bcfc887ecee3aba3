"""Driver error taxonomy.

Every failure the driver itself raises derives from ``DriverError``.
Errors from the storage engine (``sqlite3.Error`` and subclasses) are
not wrapped; they propagate to the caller unmodified.
"""

from __future__ import annotations

from typing import Any


class DriverError(Exception):
    """Root exception for all driver errors."""


# ── Schema / migration gate ──────────────────────────────────────────────────

class MigrationNeededError(DriverError):
    """The database holds an older, non-zero schema version.

    Recoverable: the caller should apply migrations from
    ``database_version`` up to the version it expects.
    """

    def __init__(self, database_version: int) -> None:
        super().__init__(f"Migration needed from database version {database_version}")
        self.database_version = database_version


class SchemaNeededError(DriverError):
    """The database is uninitialized or holds an unknown/newer version.

    Recoverable only by a destructive reset with a fresh schema.
    """

    def __init__(self, database_version: int | None = None) -> None:
        super().__init__("Schema needed")
        self.database_version = database_version


class IncompatibleMigrationError(DriverError):
    """A migration's source version does not match the persisted version.

    Fatal: the caller built an incompatible migration chain.
    """

    def __init__(self, database_version: int, migration_from: int) -> None:
        super().__init__(
            f"Incompatible migration set applied. "
            f"DB: {database_version}, migration: {migration_from}"
        )
        self.database_version = database_version
        self.migration_from = migration_from


# ── Batch executor ───────────────────────────────────────────────────────────

class UnknownBatchOperationError(DriverError):
    """A batch contained an operation the executor does not recognize."""

    def __init__(self, operation: Any) -> None:
        super().__init__(f"Unknown batch operation: {operation!r}")
        self.operation = operation


# ── Driver lifecycle ─────────────────────────────────────────────────────────

class DriverNotInitializedError(DriverError):
    """The driver was used before a database was opened."""
