"""Path resolution for logical database names.

Turns the name a caller configures into the location the storage engine
opens:

    ":memory:"                      -> ":memory:"
    "app"                           -> "<cwd>/app.db"
    "/var/lib/app"                  -> "/var/lib/app.db"
    "app?mode=memory&cache=shared"  -> "<cwd>/app.db?mode=memory&cache=shared"

Pure string transformation; nothing is created on disk.
"""

from __future__ import annotations

import os

MEMORY_SENTINELS = frozenset({":memory:", "file::memory:"})
DEFAULT_EXTENSION = ".db"


def get_path(db_name: str, cwd: str | None = None, extension: str = DEFAULT_EXTENSION) -> str:
    """Resolve a logical database name into a storage location.

    Args:
        db_name: Logical name, absolute path, ``file:`` URI or memory sentinel.
        cwd: Base directory for relative names (defaults to ``os.getcwd()``).
        extension: Canonical file extension.

    Returns:
        The memory sentinel unchanged, otherwise a path that carries the
        extension (before the query string, if there is one).
    """
    if db_name in MEMORY_SENTINELS:
        return db_name

    if os.path.isabs(db_name) or db_name.startswith("file:"):
        path = db_name
    else:
        path = os.path.join(cwd if cwd is not None else os.getcwd(), db_name)

    # Only the file name counts; directories and query values may contain dots
    location, sep, query = path.partition("?")
    if not os.path.basename(location).endswith(extension):
        location = f"{location}{extension}"

    return f"{location}{sep}{query}"


def is_shared_memory(db_name: str) -> bool:
    """Return True if the name asks for a shared-cache in-memory database.

    Every driver opened on such a name must use the same handle, or each
    would see its own empty database.
    """
    return "mode=memory" in db_name and "cache=shared" in db_name
