"""Tests for hive.connection: connect(), get_connection() and database URL handling."""

import threading

import pytest

from hive.connection import Connection, connect, get_connection, resolve_connection
from hive.dialects import SqliteDialect


def test_connect_rejects_non_string_non_callable():
    """connect() raises ValueError when database_url is neither str nor callable."""
    with pytest.raises(ValueError, match="database_url.*str.*or a method"):
        connect(123, name="bad")
    with pytest.raises(ValueError, match="database_url.*str.*or a method"):
        connect([], name="bad")


def test_unknown_name_raises():
    with pytest.raises(ValueError, match="No connection configured"):
        get_connection(name="nonexistent")


def test_get_connection_with_callable_url(tmp_path):
    path = tmp_path / "callable.sqlite3"
    connect(lambda: f"sqlite:///{path}", name="callable_db")
    connection = get_connection(name="callable_db")
    assert isinstance(connection, Connection)
    assert isinstance(connection.dialect, SqliteDialect)
    connection.execute("CREATE TABLE callable_foo(bar CHAR)")
    connection.commit()
    assert path.exists()


def test_connection_is_reused_within_a_thread(tmp_path):
    connect(f"sqlite:///{tmp_path / 'reuse.sqlite3'}", name="reuse")
    assert get_connection("reuse") is get_connection("reuse")
    assert resolve_connection("reuse") is get_connection("reuse")
    connection = get_connection("reuse")
    assert resolve_connection(connection) is connection


def test_each_thread_gets_its_own_connection(tmp_path):
    connect(f"sqlite:///{tmp_path / 'threads.sqlite3'}", name="threads")
    mine = get_connection("threads")
    theirs = []
    thread = threading.Thread(target=lambda: theirs.append(get_connection("threads")))
    thread.start()
    thread.join()
    assert theirs[0] is not mine


def test_reconnecting_opens_a_new_connection(tmp_path):
    connect(f"sqlite:///{tmp_path / 'first.sqlite3'}", name="switch")
    first = get_connection("switch")
    first.execute("CREATE TABLE foo(bar CHAR)")
    first.execute("INSERT INTO foo(bar) VALUES ('Hello')")
    first.commit()
    connect(f"sqlite:///{tmp_path / 'second.sqlite3'}", name="switch")
    second = get_connection("switch")
    assert second is not first
    count = second.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE name = 'foo'"
    ).fetchone()[0]
    assert count == 0
