"""Batch operations consumed by the batch executor.

A batch is an ordered sequence of these operations. They are never
persisted; they only describe the writes to apply in one transaction.

Callers may also pass the tagged-tuple form used by the record layer::

    ("execute", sql, args)
    ("create", table, id, sql, args)
    ("markAsDeleted", table, id)
    ("destroyPermanently", table, id)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from sqlite_driver.domain.errors import UnknownBatchOperationError
from sqlite_driver.domain.value_objects.arguments import SQLArgs
from sqlite_driver.domain.value_objects.identifiers import RecordId, TableName


class OperationKind(Enum):
    """Kinds of batch operation, valued by their metric/log label."""

    EXECUTE = "execute"
    CREATE = "create"
    MARK_AS_DELETED = "mark_as_deleted"
    DESTROY_PERMANENTLY = "destroy_permanently"


@dataclass(frozen=True, slots=True)
class ExecuteOperation:
    """Run arbitrary SQL; no cache effect."""

    sql: str
    args: SQLArgs = field(default_factory=tuple)

    kind = OperationKind.EXECUTE


@dataclass(frozen=True, slots=True)
class CreateOperation:
    """Insert a record; its id becomes cached after commit."""

    table: TableName
    id: RecordId
    sql: str
    args: SQLArgs = field(default_factory=tuple)

    kind = OperationKind.CREATE


@dataclass(frozen=True, slots=True)
class MarkDeletedOperation:
    """Soft-delete a record by setting ``_status='deleted'``."""

    table: TableName
    id: RecordId

    kind = OperationKind.MARK_AS_DELETED


@dataclass(frozen=True, slots=True)
class DestroyPermanentlyOperation:
    """Hard-delete a record."""

    table: TableName
    id: RecordId

    kind = OperationKind.DESTROY_PERMANENTLY


BatchOperation = Union[
    ExecuteOperation,
    CreateOperation,
    MarkDeletedOperation,
    DestroyPermanentlyOperation,
]

_TAGS: dict[str, type] = {
    "execute": ExecuteOperation,
    "create": CreateOperation,
    "markAsDeleted": MarkDeletedOperation,
    "mark_as_deleted": MarkDeletedOperation,
    "destroyPermanently": DestroyPermanentlyOperation,
    "destroy_permanently": DestroyPermanentlyOperation,
}


def operation_from_tuple(raw: tuple[Any, ...] | list[Any]) -> BatchOperation:
    """Build a batch operation from its tagged-tuple form.

    Raises:
        UnknownBatchOperationError: If the tag is not recognized or the
            payload does not fit the tagged operation.
    """
    if not raw:
        raise UnknownBatchOperationError(raw)

    tag, *payload = raw
    operation_type = _TAGS.get(tag) if isinstance(tag, str) else None
    if operation_type is None:
        raise UnknownBatchOperationError(raw)

    try:
        return operation_type(*payload)
    except TypeError as exc:
        raise UnknownBatchOperationError(raw) from exc


def coerce_operation(operation: Any) -> BatchOperation:
    """Accept either a batch operation instance or its tagged-tuple form."""
    if isinstance(
        operation,
        (ExecuteOperation, CreateOperation, MarkDeletedOperation, DestroyPermanentlyOperation),
    ):
        return operation
    if isinstance(operation, (tuple, list)):
        return operation_from_tuple(operation)
    raise UnknownBatchOperationError(operation)
