"""Named database connections.

    connect("sqlite:////tmp/app.sqlite3")
    connect(lambda: os.environ["REPORTING_URL"], name="reporting")

A model's meta selects its connection by name (`meta.db`). Each thread gets
its own driver connection per name, opened on first use.
"""

import logging
import threading
import urllib.parse
from typing import Any, Callable, Iterable

from .dialects import Dialect, get_dialect_for_scheme

logger = logging.getLogger(__name__)

_urls: dict[str, str | Callable[[], str]] = {}
_generations: dict[str, int] = {}
_local = threading.local()


def connect(database_url: str | Callable[[], str], name: str = "default") -> None:
    """Register the URL (or a method returning it) of the connection called `name`."""
    if not isinstance(database_url, str) and not callable(database_url):
        raise ValueError("`database_url` should be either a `str`, or a method returning a `str`")
    _urls[name] = database_url
    logger.info("Configured connection %s", name)
    # connections opened for a previous URL are not reused
    _generations[name] = _generations.get(name, 0) + 1


class Connection:
    """A driver connection together with the dialect used to talk to it."""

    def __init__(self, raw: Any, dialect: Dialect, name: str = "default"):
        self.raw = raw
        self.dialect = dialect
        self.name = name

    def __repr__(self) -> str:
        return f"<Connection {self.name} ({type(self.dialect).__name__})>"

    def execute(self, sql: str, parameters: Iterable[Any] = ()) -> Any:
        """Run a statement and return the driver cursor, which the caller closes."""
        parameters = tuple(parameters)
        logger.debug("[%s] %s %r", self.name, sql, parameters)
        cursor = self.raw.cursor()
        try:
            cursor.execute(sql, parameters)
        except Exception:
            cursor.close()
            raise
        return cursor

    def commit(self) -> None:
        self.raw.commit()

    def rollback(self) -> None:
        self.raw.rollback()

    def close(self) -> None:
        self.raw.close()


def _open_connection(name: str) -> Connection:
    try:
        url = _urls[name]
    except KeyError as error:
        raise ValueError(f"No connection configured with name=`{name}`") from error
    if callable(url):
        url = url()
    scheme = urllib.parse.urlparse(url).scheme
    dialect = get_dialect_for_scheme(scheme)
    return Connection(dialect.connect(url), dialect, name=name)


def get_connection(name: str = "default") -> Connection:
    """Return the current thread's connection called `name`, opening it if needed."""
    connections = getattr(_local, "connections", None)
    if connections is None:
        connections = _local.connections = {}
    generation = _generations.get(name)
    cached = connections.get(name)
    if cached is not None and cached[0] == generation:
        return cached[1]
    if cached is not None:
        cached[1].close()
    connection = _open_connection(name)
    connections[name] = (generation, connection)
    return connection


def resolve_connection(db: "str | Connection") -> Connection:
    """Accept either a connection name or a `Connection`."""
    if isinstance(db, Connection):
        return db
    return get_connection(db)


__all__ = ["connect", "Connection", "get_connection", "resolve_connection"]
