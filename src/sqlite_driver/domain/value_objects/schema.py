"""Schema and migration descriptors."""

from __future__ import annotations

from dataclasses import dataclass

from sqlite_driver.domain.value_objects.identifiers import SchemaVersion


@dataclass(frozen=True, slots=True)
class Schema:
    """Full schema SQL and the version it establishes.

    Attributes:
        sql: One or more DDL statements creating the record tables
        version: Schema version stamped on the database after setup

    Example:
        >>> Schema(sql="create table tasks (id text primary key);", version=SchemaVersion(1))
        Schema(version=1)
    """

    sql: str
    version: SchemaVersion

    def __post_init__(self) -> None:
        if self.version < 0:
            raise ValueError(f"schema version must be non-negative, got {self.version}")

    def __repr__(self) -> str:
        return f"Schema(version={self.version})"


@dataclass(frozen=True, slots=True)
class Migration:
    """Transition between two schema versions.

    ``from_version`` must match the database's persisted version when the
    migration is applied; ``to_version`` is stamped afterwards.
    """

    from_version: SchemaVersion
    to_version: SchemaVersion
    sql: str

    def __post_init__(self) -> None:
        if self.from_version < 0:
            raise ValueError(f"migration source must be non-negative, got {self.from_version}")
        if self.to_version < self.from_version:
            raise ValueError(
                f"migration must not decrease the version, got "
                f"{self.from_version} -> {self.to_version}"
            )

    def __repr__(self) -> str:
        return f"Migration({self.from_version} -> {self.to_version})"
