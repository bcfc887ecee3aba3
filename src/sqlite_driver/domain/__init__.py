"""Domain layer - record cache, batch semantics and the schema gate.

The domain knows nothing about SQLite itself; it talks to storage only
through the ``StorageEngine`` port.
"""
