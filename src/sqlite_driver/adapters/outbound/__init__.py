"""Outbound adapters - implementations of outbound ports.

These adapters implement the storage engine port on top of ``sqlite3``.
"""

from sqlite_driver.adapters.outbound.sqlite_storage_engine import SQLiteStorageEngine

__all__ = [
    "SQLiteStorageEngine",
]
