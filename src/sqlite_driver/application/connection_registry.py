"""Connection Registry - one storage handle per shared-memory database name.

A shared-cache in-memory database exists only as long as a connection to
it is open, and every driver using the same logical name must see the
same data. The registry therefore keeps exactly one handle per logical
name for the life of the process:

- created on first use (``get_or_create``)
- never torn down by the driver
- replaced only explicitly (``replace``), e.g. after a full reset that
  reopens the database
"""

from __future__ import annotations

import threading
from typing import Callable

from sqlite_driver.ports.outbound.storage_engine import StorageEngine


class ConnectionRegistry:
    """Thread-safe mapping from logical database name to storage handle.

    Lookup-or-create runs under one lock, so concurrent initialization of
    the same name never opens two handles.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: dict[str, StorageEngine] = {}

    def get_or_create(self, name: str, factory: Callable[[], StorageEngine]) -> StorageEngine:
        """Return the handle registered for ``name``, creating it if needed.

        Args:
            name: Logical database name (not the resolved path).
            factory: Opens a new handle; called at most once per name.
        """
        with self._lock:
            handle = self._handles.get(name)
            if handle is None:
                handle = factory()
                self._handles[name] = handle
            return handle

    def get(self, name: str) -> StorageEngine | None:
        with self._lock:
            return self._handles.get(name)

    def replace(self, name: str, handle: StorageEngine) -> StorageEngine | None:
        """Register ``handle`` for ``name`` and return the previous handle, if any.

        The previous handle is not closed; its owner decides when.
        """
        with self._lock:
            previous = self._handles.get(name)
            self._handles[name] = handle
            return previous

    def clear(self) -> None:
        """Close and forget every registered handle (useful for testing)."""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        for handle in handles:
            handle.close()

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._handles

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)


_registry: ConnectionRegistry | None = None
_registry_lock = threading.Lock()


def get_connection_registry() -> ConnectionRegistry:
    """Get the process-wide connection registry."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = ConnectionRegistry()
        return _registry


def reset_connection_registry() -> None:
    """Close every shared handle and drop the process-wide registry (useful for testing)."""
    global _registry
    with _registry_lock:
        registry, _registry = _registry, None
    if registry is not None:
        registry.clear()
