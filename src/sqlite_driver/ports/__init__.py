"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Outbound ports: Dependencies on external systems (the storage engine)

Adapters implement these ports with concrete functionality.
"""

from sqlite_driver.ports.outbound import Row, StorageEngine

__all__ = [
    "Row",
    "StorageEngine",
]
