"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: Implement external dependencies (the SQLite engine)
"""

from sqlite_driver.adapters.outbound import SQLiteStorageEngine

__all__ = [
    # Outbound adapters
    "SQLiteStorageEngine",
]
