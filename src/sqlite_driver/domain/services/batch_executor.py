"""Batch Executor - heterogeneous writes as one all-or-nothing transaction.

A batch is an ordered list of operations (raw statements, inserts, soft
deletes, hard deletes). The executor:

1. Opens one transaction and applies every operation in the given order,
   collecting cache insertions (creates) and removals (deletes).
2. Only after the transaction scope exits normally, which is the commit
   signal, updates the record cache: all insertions first, then all
   removals, so a removal always wins over an insertion of the same id
   within one batch.

If any operation fails, the storage engine rolls the whole batch back and
the exception propagates before the cache is touched.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Iterable, Sequence

from sqlite_driver.domain.entities.batch_operation import (
    BatchOperation,
    CreateOperation,
    DestroyPermanentlyOperation,
    ExecuteOperation,
    MarkDeletedOperation,
    coerce_operation,
)
from sqlite_driver.domain.entities.record_cache import RecordCache
from sqlite_driver.domain.errors import UnknownBatchOperationError
from sqlite_driver.domain.value_objects.arguments import normalize_args
from sqlite_driver.domain.value_objects.identifiers import RecordId, TableName
from sqlite_driver.infrastructure.metrics import MetricsRegistry, get_metrics
from sqlite_driver.infrastructure.tracing import trace_span
from sqlite_driver.ports.outbound.storage_engine import StorageEngine

logger = logging.getLogger(__name__)

CacheKey = tuple[TableName, RecordId]


class BatchExecutor:
    """Applies write batches against one storage handle.

    Thread Safety:
        ``batch`` and ``destroy_deleted_records`` hold the executor's lock
        from the start of the transaction until the cache is updated, so
        no other batch on the same executor observes a half-applied cache.
    """

    def __init__(
        self,
        engine: StorageEngine,
        cache: RecordCache,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._engine = engine
        self._cache = cache
        self._metrics = metrics if metrics is not None else get_metrics()
        self._lock = threading.Lock()

    def batch(self, operations: Iterable[BatchOperation | Sequence[Any]]) -> None:
        """Apply ``operations`` in order inside exactly one transaction.

        Args:
            operations: Batch operation instances or their tagged-tuple form.

        Raises:
            UnknownBatchOperationError: If an operation is not recognized;
                the transaction is aborted.
            sqlite3.Error: Any storage failure; the transaction is aborted.
        """
        operations = list(operations)
        new_ids: list[CacheKey] = []
        removed_ids: list[CacheKey] = []

        with self._lock, trace_span("batch.apply", {"batch.size": len(operations)}):
            started = time.perf_counter()
            try:
                with self._engine.in_transaction():
                    for raw in operations:
                        operation = coerce_operation(raw)
                        self._apply(operation, new_ids, removed_ids)
            except Exception:
                self._metrics.batches_total.labels(status="rollback").inc()
                logger.warning(f"Batch of {len(operations)} operations rolled back")
                raise

            # Committed: reflect the net effect in the cache
            for table, record_id in new_ids:
                self._cache.mark_as_cached(table, record_id)
            for table, record_id in removed_ids:
                self._cache.remove_from_cache(table, record_id)

            self._metrics.batches_total.labels(status="commit").inc()
            self._metrics.batch_latency_seconds.observe(time.perf_counter() - started)

        logger.debug(
            f"Batch committed: {len(operations)} operations, "
            f"{len(new_ids)} cached, {len(removed_ids)} evicted"
        )

    def _apply(
        self,
        operation: BatchOperation,
        new_ids: list[CacheKey],
        removed_ids: list[CacheKey],
    ) -> None:
        if isinstance(operation, ExecuteOperation):
            self._engine.execute(operation.sql, normalize_args(operation.args))
        elif isinstance(operation, CreateOperation):
            self._engine.execute(operation.sql, normalize_args(operation.args))
            new_ids.append((operation.table, operation.id))
        elif isinstance(operation, MarkDeletedOperation):
            self._engine.execute(
                f"UPDATE '{operation.table}' SET _status='deleted' WHERE id == ?",
                (operation.id,),
            )
            removed_ids.append((operation.table, operation.id))
        elif isinstance(operation, DestroyPermanentlyOperation):
            self._engine.execute(
                f"DELETE FROM '{operation.table}' WHERE id == ?",
                (operation.id,),
            )
            removed_ids.append((operation.table, operation.id))
        else:
            raise UnknownBatchOperationError(operation)

        self._metrics.batch_operations_total.labels(operation=operation.kind.value).inc()

    def destroy_deleted_records(self, table: TableName, record_ids: Sequence[RecordId]) -> int:
        """Permanently purge previously soft-deleted records.

        Best-effort: ids that no longer exist are skipped silently apart
        from a warning. Purged ids are also dropped from the cache.

        Returns:
            The number of rows actually deleted.
        """
        if not record_ids:
            return 0

        placeholders = ",".join("?" for _ in record_ids)
        with self._lock:
            deleted = self._engine.execute(
                f"DELETE FROM '{table}' WHERE id IN ({placeholders})",
                tuple(record_ids),
            )
            for record_id in record_ids:
                self._cache.remove_from_cache(table, record_id)

        self._metrics.purged_records_total.inc(deleted)
        if deleted < len(record_ids):
            logger.warning(
                f"Purged {deleted} of {len(record_ids)} requested records from {table}"
            )
        return deleted
