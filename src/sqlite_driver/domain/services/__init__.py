"""Domain services for driver logic.

Services coordinate the record cache and the storage engine port to
implement reads, batched writes and the schema/migration protocol.
"""

from sqlite_driver.domain.services.batch_executor import BatchExecutor
from sqlite_driver.domain.services.path_resolver import get_path, is_shared_memory
from sqlite_driver.domain.services.query_facade import CachedResult, QueryFacade
from sqlite_driver.domain.services.schema_gate import LOCAL_STORAGE_SCHEMA, SchemaGate

__all__ = [
    "BatchExecutor",
    "CachedResult",
    "LOCAL_STORAGE_SCHEMA",
    "QueryFacade",
    "SchemaGate",
    "get_path",
    "is_shared_memory",
]
