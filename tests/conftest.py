import pytest

from hive.connection import connect, get_connection
from hive.registry import Registry

SCHEMA = (
    """CREATE TABLE people (
        id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL DEFAULT '',
        age INTEGER NOT NULL DEFAULT 0)""",
    """CREATE TABLE accounts (
        id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE,
        nick_name TEXT,
        active BOOLEAN NOT NULL DEFAULT 1,
        created TIMESTAMP,
        updated TIMESTAMP)""",
    """CREATE TABLE authors (
        id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL DEFAULT '')""",
    """CREATE TABLE books (
        id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL DEFAULT '',
        author_id INTEGER REFERENCES authors(id))""",
)


@pytest.fixture
def registry():
    """A fresh registry, so that every test builds its own metas."""
    return Registry()


@pytest.fixture(scope="function")
def setup_db(tmp_path):
    """Setup a temporary file SQLite database for each test."""
    connect(f"sqlite:///{tmp_path / 'test.sqlite3'}")
    connection = get_connection()
    for statement in SCHEMA:
        connection.execute(statement)
    connection.commit()
    yield connection
