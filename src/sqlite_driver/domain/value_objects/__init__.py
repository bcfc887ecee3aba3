"""Value objects for the driver domain.

Exports:
    Identifiers:
        - TableName: Name of a record table
        - RecordId: Opaque record identifier
        - SchemaVersion: Persisted schema version
        - UNINITIALIZED_VERSION: Version of a database with no schema

    Arguments:
        - SQLValue, SQLArgs: Bindable statement arguments
        - normalize_args: Boolean-to-integer normalization on a copy

    Schema:
        - Schema: Full schema SQL plus its version
        - Migration: Transition between two schema versions
"""

from sqlite_driver.domain.value_objects.arguments import (
    SQLArgs,
    SQLValue,
    normalize_args,
    normalize_value,
)
from sqlite_driver.domain.value_objects.identifiers import (
    UNINITIALIZED_VERSION,
    RecordId,
    SchemaVersion,
    TableName,
    record_id_of,
)
from sqlite_driver.domain.value_objects.schema import Migration, Schema

__all__ = [
    # Identifiers
    "TableName",
    "RecordId",
    "SchemaVersion",
    "UNINITIALIZED_VERSION",
    "record_id_of",
    # Arguments
    "SQLValue",
    "SQLArgs",
    "normalize_args",
    "normalize_value",
    # Schema
    "Schema",
    "Migration",
]
