"""Storage Engine port for the embedded SQL database.

This outbound port defines the contract the driver needs from the storage
engine. Query planning, file I/O and durability all live behind it.

Key guarantees expected from implementations:
- ``in_transaction()`` commits iff its body completes without raising
- Only one transaction is open on a handle at a time
- ``user_version`` writes inside a transaction roll back with it
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, ContextManager, Protocol

from sqlite_driver.domain.value_objects.arguments import SQLArgs

Row = dict[str, Any]
"""A raw result row: column name -> value."""


class StorageEngine(Protocol):
    """Protocol for an open handle on the embedded storage engine.

    Thread Safety:
        Implementations serialize statements per handle; a transaction
        blocks every other statement on the same handle until it ends.
    """

    @property
    @abstractmethod
    def path(self) -> str:
        """Return the resolved location this handle was opened on."""
        ...

    @abstractmethod
    def execute(self, sql: str, args: SQLArgs | None = None) -> int:
        """Execute one statement with positional or named arguments.

        Args:
            sql: The statement.
            args: Sequence for ``?`` placeholders or mapping for ``:name``
                placeholders. Booleans are already normalized.

        Returns:
            The number of rows changed by the statement.

        Raises:
            sqlite3.Error: On constraint violation, syntax error or I/O failure.
        """
        ...

    @abstractmethod
    def query_raw(self, sql: str, args: SQLArgs | None = None) -> list[Row]:
        """Run a query and return every row in engine order."""
        ...

    @abstractmethod
    def count(self, sql: str, args: SQLArgs | None = None) -> int:
        """Run a counting query and return its single integer result."""
        ...

    @abstractmethod
    def execute_statements(self, sql: str) -> None:
        """Execute a script of one or more statements.

        Must not commit a transaction that is already open.
        """
        ...

    @abstractmethod
    def in_transaction(self) -> ContextManager[None]:
        """Return a scope whose effects commit iff it exits without an exception."""
        ...

    @property
    @abstractmethod
    def user_version(self) -> int:
        """Return the persisted schema version (0 for a fresh database)."""
        ...

    @user_version.setter
    @abstractmethod
    def user_version(self, version: int) -> None:
        """Persist a new schema version."""
        ...

    @abstractmethod
    def unsafe_destroy_everything(self) -> None:
        """Drop every table, index, view and trigger and reset the version to 0."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the handle and release resources."""
        ...
