"""Record cache - which records the in-memory layer already holds.

The cache maps each table to the set of record ids known to be
materialized in memory. Read paths consult it to return a bare id instead
of a full row. It is an optimization only: an empty cache changes what
shape reads return, never which records they return.

Invariant:
    An id is present only if its row was confirmed to exist in storage at
    the last successful observation. Ids are added after a read or a
    committed insert, and removed after a committed delete or a full
    reset.
"""

from __future__ import annotations

from sqlite_driver.domain.value_objects.identifiers import RecordId, TableName


class RecordCache:
    """Per-table sets of cached record ids.

    Table sets are created on first insert and kept until ``clear()``.
    Every operation is total over its inputs.

    Thread Safety:
        Not synchronized. The driver mutates it only from the thread that
        owns the corresponding transaction commit.
    """

    def __init__(self) -> None:
        self._tables: dict[TableName, set[RecordId]] = {}

    def has_table(self, table: TableName) -> bool:
        """Return True if any id was ever cached for ``table`` since the last clear."""
        return table in self._tables

    def is_cached(self, table: TableName, record_id: RecordId) -> bool:
        ids = self._tables.get(table)
        return ids is not None and record_id in ids

    def mark_as_cached(self, table: TableName, record_id: RecordId) -> None:
        self._tables.setdefault(table, set()).add(record_id)

    def remove_from_cache(self, table: TableName, record_id: RecordId) -> None:
        ids = self._tables.get(table)
        if ids is not None:
            ids.discard(record_id)

    def clear(self) -> None:
        """Forget every cached id in every table."""
        self._tables.clear()

    def __contains__(self, key: tuple[TableName, RecordId]) -> bool:
        table, record_id = key
        return self.is_cached(table, record_id)

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._tables.values())

    def __repr__(self) -> str:
        return f"RecordCache(tables={len(self._tables)}, records={len(self)})"
