"""Outbound ports - interfaces for external dependencies.

The driver depends on a single external system: the embedded SQL
storage engine.
"""

from sqlite_driver.ports.outbound.storage_engine import Row, StorageEngine

__all__ = [
    "Row",
    "StorageEngine",
]
