"""Unit tests for the SQLite storage engine adapter."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from sqlite_driver.adapters.outbound import SQLiteStorageEngine
from sqlite_driver.adapters.outbound.sqlite_storage_engine import (
    connect_target,
    split_statements,
)


@pytest.mark.unit
class TestSplitStatements:
    """Script splitting without executescript."""

    def test_simple_script(self) -> None:
        script = "create table a (x); create table b (y);"
        assert list(split_statements(script)) == ["create table a (x);", "create table b (y);"]

    def test_semicolon_in_string_literal(self) -> None:
        script = "insert into a values ('x;y'); select 1;"
        assert list(split_statements(script)) == ["insert into a values ('x;y');", "select 1;"]

    def test_trigger_body_kept_whole(self) -> None:
        script = (
            "create trigger t after insert on a begin "
            "update a set x = 1; delete from b; end; select 1;"
        )
        statements = list(split_statements(script))
        assert len(statements) == 2
        assert statements[0].startswith("create trigger")
        assert statements[0].endswith("end;")

    def test_blank_and_comment_statements_skipped(self) -> None:
        script = "\n  ;\n -- just a comment\n; select 1"
        assert list(split_statements(script)) == ["select 1;"]


@pytest.mark.unit
class TestConnectTarget:
    def test_plain_path(self) -> None:
        assert connect_target("/tmp/a.db") == "/tmp/a.db"

    def test_query_string_becomes_uri(self) -> None:
        assert connect_target("/tmp/a.db?mode=memory&cache=shared") == (
            "file:/tmp/a.db?mode=memory&cache=shared"
        )

    def test_memory_and_uri_unchanged(self) -> None:
        assert connect_target(":memory:") == ":memory:"
        assert connect_target("file:a.db?mode=ro") == "file:a.db?mode=ro"


@pytest.mark.unit
class TestSQLiteStorageEngine:
    """Statement, transaction and version behavior."""

    def test_execute_and_query(self, engine: SQLiteStorageEngine) -> None:
        engine.execute("create table t (id text primary key, n integer)")
        changed = engine.execute("insert into t values (?, ?)", ("a", 1))

        assert changed == 1
        assert engine.query_raw("select * from t") == [{"id": "a", "n": 1}]

    def test_named_arguments(self, engine: SQLiteStorageEngine) -> None:
        engine.execute("create table t (id text, n integer)")
        engine.execute("insert into t values (:id, :n)", {"n": 2, "id": "b"})

        assert engine.query_raw("select id, n from t") == [{"id": "b", "n": 2}]

    def test_count(self, engine: SQLiteStorageEngine) -> None:
        engine.execute_statements("create table t (id text); insert into t values ('a'); insert into t values ('b');")

        assert engine.count("select count(*) from t") == 2
        assert engine.count("select count(*) from t where id = ?", ("z",)) == 0

    def test_transaction_commits(self, engine: SQLiteStorageEngine) -> None:
        engine.execute("create table t (id text)")
        with engine.in_transaction():
            engine.execute("insert into t values ('a')")

        assert engine.count("select count(*) from t") == 1

    def test_transaction_rolls_back_on_error(self, engine: SQLiteStorageEngine) -> None:
        engine.execute("create table t (id text primary key)")

        with pytest.raises(sqlite3.IntegrityError):
            with engine.in_transaction():
                engine.execute("insert into t values ('a')")
                engine.execute("insert into t values ('a')")

        assert engine.count("select count(*) from t") == 0

    def test_script_inside_transaction_rolls_back(self, engine: SQLiteStorageEngine) -> None:
        """execute_statements does not commit the surrounding transaction."""
        with pytest.raises(RuntimeError):
            with engine.in_transaction():
                engine.execute_statements("create table t (id text); insert into t values ('a');")
                raise RuntimeError("abort")

        tables = engine.query_raw("select name from sqlite_master where name = 't'")
        assert tables == []

    def test_nested_scope_is_savepoint(self, engine: SQLiteStorageEngine) -> None:
        """A failed inner scope rolls back only its own writes."""
        engine.execute("create table t (id text)")

        with engine.in_transaction():
            engine.execute("insert into t values ('outer')")
            with pytest.raises(RuntimeError):
                with engine.in_transaction():
                    engine.execute("insert into t values ('inner')")
                    raise RuntimeError("inner failure")

        assert engine.query_raw("select id from t") == [{"id": "outer"}]

    def test_user_version(self, engine: SQLiteStorageEngine) -> None:
        assert engine.user_version == 0
        engine.user_version = 4
        assert engine.user_version == 4

    def test_user_version_rolls_back(self, engine: SQLiteStorageEngine) -> None:
        with pytest.raises(RuntimeError):
            with engine.in_transaction():
                engine.user_version = 9
                raise RuntimeError("abort")

        assert engine.user_version == 0

    def test_unsafe_destroy_everything(self, engine: SQLiteStorageEngine) -> None:
        engine.execute_statements(
            """
            create table t (id text primary key);
            create table s (id integer primary key autoincrement, v text);
            create index t_idx on t (id);
            create view v as select * from t;
            create trigger tr after insert on t begin insert into s (v) values (new.id); end;
            insert into t values ('a');
            """
        )
        engine.user_version = 3

        engine.unsafe_destroy_everything()

        remaining = engine.query_raw(
            "select name from sqlite_master where name not like 'sqlite_%'"
        )
        assert remaining == []
        assert engine.user_version == 0

    def test_file_database_persists(self, temp_dir: Path) -> None:
        path = str(temp_dir / "persist.db")
        with SQLiteStorageEngine(path) as first:
            first.execute("create table t (id text)")
            first.execute("insert into t values ('a')")
            first.user_version = 2

        with SQLiteStorageEngine(path) as second:
            assert second.user_version == 2
            assert second.count("select count(*) from t") == 1

    def test_close_is_idempotent(self) -> None:
        eng = SQLiteStorageEngine(":memory:")
        eng.close()
        eng.close()
        assert eng.is_closed
