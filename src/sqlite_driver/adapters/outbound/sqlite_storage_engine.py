"""SQLite Storage Engine implementation.

This adapter implements the StorageEngine protocol on top of the standard
``sqlite3`` module. One instance wraps one connection.

Transactions:
    The connection runs with ``isolation_level=None`` so that the module
    never opens or commits transactions implicitly. ``in_transaction()``
    issues ``BEGIN IMMEDIATE``/``COMMIT``/``ROLLBACK`` itself; nested
    scopes on the same thread become savepoints.

Scripts:
    ``Connection.executescript`` commits any open transaction before
    running. Schema and migration scripts must run inside one, so
    ``execute_statements`` splits the script with
    ``sqlite3.complete_statement`` and executes statements one by one.

Thread Safety:
    Every call takes the engine's re-entrant lock; a transaction holds it
    from BEGIN to COMMIT/ROLLBACK, so one transaction at a time runs per
    handle.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Iterator

from sqlite_driver.domain.value_objects.arguments import SQLArgs

logger = logging.getLogger(__name__)

MEMORY_NAMES = frozenset({":memory:", "file::memory:"})


def connect_target(path: str) -> str:
    """Return the string to hand to ``sqlite3.connect(..., uri=True)``.

    Paths carrying a query string are turned into ``file:`` URIs so that
    parameters such as ``mode=memory&cache=shared`` take effect.
    """
    if path in MEMORY_NAMES or path.startswith("file:"):
        return path
    if "?" in path:
        return f"file:{path}"
    return path


def split_statements(script: str) -> Iterator[str]:
    """Yield the complete statements of a SQL script in order.

    Semicolons inside string literals and trigger bodies do not end a
    statement. Empty statements are skipped. An unterminated trailing
    statement is yielded as-is so that executing it reports the error.
    """
    buffer = ""
    for chunk in script.split(";"):
        buffer += chunk + ";"
        if sqlite3.complete_statement(buffer):
            statement = buffer.strip()
            buffer = ""
            if _has_content(statement):
                yield statement
    if _has_content(buffer):
        yield buffer.strip()


def _has_content(statement: str) -> bool:
    for line in statement.splitlines():
        code = line.split("--", 1)[0].strip().strip(";").strip()
        if code:
            return True
    return False


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SQLiteStorageEngine:
    """SQLite implementation of the StorageEngine protocol.

    Attributes:
        path: The resolved database location.

    Usage:
        engine = SQLiteStorageEngine("/tmp/app.db")
        with engine.in_transaction():
            engine.execute("insert into tasks (id) values (?)", ("t1",))
        engine.close()
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        """Open a connection.

        Args:
            path: Resolved database path, URI or ``:memory:``.
            timeout: Seconds to wait on a locked database file.

        Raises:
            sqlite3.OperationalError: If the database cannot be opened.
        """
        self._path = path
        self._lock = threading.RLock()
        self._savepoint_depth = 0
        self._closed = False

        self._conn = sqlite3.connect(
            connect_target(path),
            timeout=timeout,
            isolation_level=None,
            check_same_thread=False,
            uri=True,
        )
        self._conn.row_factory = sqlite3.Row
        logger.debug(f"Opened SQLite database at {path}")

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ── Statements ────────────────────────────────────────────────────────

    def execute(self, sql: str, args: SQLArgs | None = None) -> int:
        with self._lock:
            cursor = self._conn.execute(sql, args if args is not None else ())
            return max(cursor.rowcount, 0)

    def query_raw(self, sql: str, args: SQLArgs | None = None) -> list[dict[str, Any]]:
        with self._lock:
            cursor = self._conn.execute(sql, args if args is not None else ())
            return [dict(row) for row in cursor.fetchall()]

    def count(self, sql: str, args: SQLArgs | None = None) -> int:
        with self._lock:
            row = self._conn.execute(sql, args if args is not None else ()).fetchone()
        if row is None or row[0] is None:
            return 0
        return int(row[0])

    def execute_statements(self, sql: str) -> None:
        with self._lock:
            for statement in split_statements(sql):
                self._conn.execute(statement)

    # ── Transactions ──────────────────────────────────────────────────────

    @contextmanager
    def in_transaction(self) -> Iterator[None]:
        """Run the body in a transaction; commit on success, roll back on error.

        A scope opened while another is active on the same thread is a
        savepoint: its failure rolls back only its own statements, and it
        commits with the outer transaction.
        """
        with self._lock:
            if self._savepoint_depth > 0:
                with self._savepoint():
                    yield
                return

            self._conn.execute("BEGIN IMMEDIATE")
            self._savepoint_depth = 1
            try:
                yield
            except BaseException:
                self._savepoint_depth = 0
                self._rollback()
                raise

            self._savepoint_depth = 0
            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error:
                self._rollback()
                raise

    @contextmanager
    def _savepoint(self) -> Iterator[None]:
        name = f"sp_{self._savepoint_depth}"
        self._conn.execute(f"SAVEPOINT {name}")
        self._savepoint_depth += 1
        try:
            yield
        except BaseException:
            self._savepoint_depth -= 1
            if self._conn.in_transaction:
                self._conn.execute(f"ROLLBACK TO {name}")
                self._conn.execute(f"RELEASE {name}")
            raise
        self._savepoint_depth -= 1
        self._conn.execute(f"RELEASE {name}")

    def _rollback(self) -> None:
        # SQLite may already have rolled back on its own (e.g. SQLITE_FULL)
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    # ── Schema version ────────────────────────────────────────────────────

    @property
    def user_version(self) -> int:
        with self._lock:
            return int(self._conn.execute("PRAGMA user_version").fetchone()[0])

    @user_version.setter
    def user_version(self, version: int) -> None:
        with self._lock:
            self._conn.execute(f"PRAGMA user_version = {int(version)}")

    # ── Destruction ───────────────────────────────────────────────────────

    def unsafe_destroy_everything(self) -> None:
        """Drop every user object in the database and reset the version to 0."""
        with self.in_transaction():
            objects = self._conn.execute(
                "SELECT type, name FROM sqlite_master "
                "WHERE type IN ('trigger', 'view', 'index', 'table') "
                "AND name NOT LIKE 'sqlite_%'"
            ).fetchall()

            # Triggers and indexes first; dropping a table drops its own
            order = {"trigger": 0, "view": 1, "index": 2, "table": 3}
            for obj_type, name in sorted(objects, key=lambda obj: order[obj[0]]):
                self._conn.execute(
                    f"DROP {obj_type.upper()} IF EXISTS {_quote_identifier(name)}"
                )

            has_sequence = self._conn.execute(
                "SELECT 1 FROM sqlite_master WHERE name = 'sqlite_sequence'"
            ).fetchone()
            if has_sequence:
                self._conn.execute("DELETE FROM sqlite_sequence")

            self.user_version = 0

        logger.warning(f"Destroyed all objects in SQLite database at {self._path}")

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True

    def __enter__(self) -> SQLiteStorageEngine:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SQLiteStorageEngine(path={self._path!r})"
