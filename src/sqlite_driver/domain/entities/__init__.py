"""Domain entities for the driver.

Exports:
    Record cache:
        - RecordCache: Table -> set of materialized record ids

    Batch operations:
        - BatchOperation: Union of the operation variants
        - ExecuteOperation, CreateOperation, MarkDeletedOperation,
          DestroyPermanentlyOperation: The variants
        - OperationKind: Enum of variant labels
        - operation_from_tuple, coerce_operation: Tagged-tuple parsing
"""

from sqlite_driver.domain.entities.batch_operation import (
    BatchOperation,
    CreateOperation,
    DestroyPermanentlyOperation,
    ExecuteOperation,
    MarkDeletedOperation,
    OperationKind,
    coerce_operation,
    operation_from_tuple,
)
from sqlite_driver.domain.entities.record_cache import RecordCache

__all__ = [
    # Record cache
    "RecordCache",
    # Batch operations
    "BatchOperation",
    "ExecuteOperation",
    "CreateOperation",
    "MarkDeletedOperation",
    "DestroyPermanentlyOperation",
    "OperationKind",
    "operation_from_tuple",
    "coerce_operation",
]
