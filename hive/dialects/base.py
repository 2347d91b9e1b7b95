"""Base Dialect type: subclasses implement connect() for each engine."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel


class Dialect(BaseModel, ABC):
    """Base for database dialects; subclasses implement connect() for a given URL."""

    model_config = {"arbitrary_types_allowed": True}

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ()
    """URL schemes this dialect handles (e.g. ('sqlite',), ('postgresql', 'postgres'))."""

    PLACEHOLDER: ClassVar[str] = "?"
    """Parameter marker of the driver's paramstyle."""

    QUOTE: ClassVar[str] = '"'
    """Identifier quote character."""

    EMPTY_INSERT: ClassVar[str] = "DEFAULT VALUES"
    """What follows `INSERT INTO table` when no column is given."""

    SUPPORTS_RETURNING: ClassVar[bool] = False
    """True if generated identities are fetched with `INSERT ... RETURNING`."""

    SUPPORTS_LIMITED_WRITES: ClassVar[bool] = False
    """True if UPDATE and DELETE accept a LIMIT clause."""

    def quote(self, identifier: str) -> str:
        """Quote an identifier, keeping `table.column` and `*` intact."""
        if identifier == "*":
            return identifier
        q = self.QUOTE
        return ".".join(
            part if part == "*" else q + part.replace(q, q + q) + q
            for part in identifier.split(".")
        )

    def last_insert_id(self, cursor: Any, returned: bool) -> Any:
        """Return the identity generated by the last INSERT run on cursor."""
        if returned:
            row = cursor.fetchone()
            return row[0] if row else None
        return cursor.lastrowid

    @abstractmethod
    def connect(self, url: str) -> Any:
        """Return a new raw driver connection for the given URL.

        The return value is engine-specific (e.g. sqlite3.Connection, pymysql.Connection).
        """
        ...  # pylint: disable=unnecessary-ellipsis
