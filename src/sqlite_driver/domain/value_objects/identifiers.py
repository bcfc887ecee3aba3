"""Identifiers and type-safe primitives for the driver.

These value objects keep table names, record ids and schema versions from
being mixed up with arbitrary strings and integers.
"""

from __future__ import annotations

from typing import Any, NewType


TableName = NewType("TableName", str)
"""Name of a record table. Interpolated into SQL quoted as ``'table'``."""

RecordId = NewType("RecordId", str)
"""Opaque record identifier, unique within a table and stable for the record's lifetime."""

SchemaVersion = NewType("SchemaVersion", int)
"""Applied schema/migration state persisted as SQLite's ``user_version``."""

# Sentinel for a database that has never had a schema applied
UNINITIALIZED_VERSION = SchemaVersion(0)


def record_id_of(row: dict[str, Any]) -> RecordId:
    """Return the string-normalized ``id`` column of a raw row.

    Storage may hand back integer ids for tables declared with numeric
    keys; callers always compare against string ids.
    """
    return RecordId(str(row["id"]))
