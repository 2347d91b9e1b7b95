"""Query descriptions for SELECT, INSERT, UPDATE and DELETE statements.

Descriptions are immutable: every builder method returns a modified copy.

    query = Select().select("id", "name").table("people").where("age", ">", 18).limit(10)
    sql, parameters = query.compile(SqliteDialect())
    result = query.execute("default")
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import closing
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from .connection import Connection, resolve_connection
from .dialects import Dialect

OPERATORS = ("=", "!=", "<>", "<", "<=", ">", ">=", "IN", "NOT IN", "LIKE", "NOT LIKE", "IS", "IS NOT")


class Expression(BaseModel):
    """Raw SQL fragment, inserted as is (e.g. `Expression(sql="COUNT(*)")`)."""

    model_config = ConfigDict(frozen=True)

    sql: str


class Result:
    """Rows returned by a statement: dicts, or models when hydrated."""

    def __init__(self, rows: Optional[list[Any]] = None,
                 insert_id: Any = None, affected_rows: int = 0):
        self.rows = list(rows or [])
        self.insert_id = insert_id
        self.affected_rows = affected_rows

    def __iter__(self) -> Iterator[Any]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> Any:
        return self.rows[index]

    def __repr__(self) -> str:
        return f"<Result rows={len(self.rows)} insert_id={self.insert_id!r}>"

    def count(self) -> int:
        return len(self.rows)

    def current(self) -> Any:
        """Return the first row, or None."""
        return self.rows[0] if self.rows else None

    def get(self, name: str, default: Any = None) -> Any:
        """Return a column of the first row."""
        row = self.current()
        if row is None:
            return default
        if isinstance(row, dict):
            return row.get(name, default)
        return row.get(name)

    def as_list(self) -> list[Any]:
        return list(self.rows)


def _rows_as_dicts(cursor: Any) -> list[dict[str, Any]]:
    names = [description[0] for description in cursor.description or ()]
    return [dict(zip(names, row)) for row in cursor.fetchall()]


class Query(BaseModel):
    """Common state of all descriptions: target table, conjunctive WHERE, LIMIT."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    table_name: Optional[str] = None
    conditions: tuple[tuple[Any, str, Any], ...] = ()
    limit_value: Optional[int] = None

    def _with(self, **changes) -> Query:
        return self.model_copy(update=changes)

    def table(self, name: str) -> Query:
        return self._with(table_name=name)

    def where(self, column: str | Expression, operator: str, value: Any) -> Query:
        """Add a condition, AND-ed with the previous ones."""
        operator = operator.upper()
        if operator not in OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
        return self._with(conditions=self.conditions + ((column, operator, value),))

    def limit(self, n: Optional[int]) -> Query:
        if n is not None and (not isinstance(n, int) or n < 0):
            raise ValueError(f"Invalid limit: {n!r}")
        return self._with(limit_value=n)

    # compilation helpers

    def _require_table(self) -> str:
        if not self.table_name:
            raise ValueError(f"{type(self).__name__} has no table")
        return self.table_name

    @staticmethod
    def _render(dialect: Dialect, item: Any) -> str:
        if isinstance(item, Expression):
            return item.sql
        return dialect.quote(item)

    def _render_condition(self, dialect: Dialect, condition: tuple, parameters: list) -> str:
        column, operator, value = condition
        column = self._render(dialect, column)
        if value is None and operator in ("=", "IS"):
            return f"{column} IS NULL"
        if value is None and operator in ("!=", "<>", "IS NOT"):
            return f"{column} IS NOT NULL"
        if isinstance(value, Expression):
            return f"{column} {operator} {value.sql}"
        if operator in ("IN", "NOT IN"):
            if isinstance(value, (str, bytes)) or not isinstance(value, (Sequence, set, frozenset)):
                raise ValueError(f"{operator} expects a sequence of values, got {value!r}")
            values = list(value)
            if not values:
                return "1 = 0" if operator == "IN" else "1 = 1"
            parameters.extend(values)
            markers = ", ".join(dialect.PLACEHOLDER for _ in values)
            return f"{column} {operator} ({markers})"
        parameters.append(value)
        return f"{column} {operator} {dialect.PLACEHOLDER}"

    def _compile_where(self, dialect: Dialect, parameters: list) -> str:
        if not self.conditions:
            return ""
        rendered = [self._render_condition(dialect, c, parameters) for c in self.conditions]
        return " WHERE " + " AND ".join(rendered)

    def compile(self, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        raise NotImplementedError

    def execute(self, db: str | Connection = "default") -> Any:
        raise NotImplementedError


class Select(Query):
    """SELECT description, optionally hydrating rows into models."""

    items: tuple[Any, ...] = ()
    distinct_value: bool = False
    order: tuple[tuple[Any, str], ...] = ()
    source: Optional[tuple[Any, str]] = None
    object_type: Any = Field(default=None, exclude=True)
    object_registry: Any = Field(default=None, exclude=True)

    def select(self, *items: str | tuple[str | Expression, str] | Expression) -> Select:
        """Add columns; `(column_or_expression, alias)` pairs are aliased."""
        return self._with(items=self.items + items)

    def distinct(self, value: bool = True) -> Select:
        return self._with(distinct_value=bool(value))

    def order_by(self, column: str | Expression, direction: str = "ASC") -> Select:
        direction = (direction or "ASC").upper()
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Invalid sorting direction: {direction}")
        return self._with(order=self.order + ((column, direction),))

    def from_subquery(self, query: Select, alias: str) -> Select:
        """Select from `(query) AS alias` instead of a table."""
        return self._with(source=(query, alias))

    def as_object(self, model_class: Any, registry: Any = None) -> Select:
        """Hydrate rows into instances of `model_class` (None for plain dicts)."""
        return self._with(object_type=model_class, object_registry=registry)

    def _render_item(self, dialect: Dialect, item: Any) -> str:
        if isinstance(item, tuple):
            expression, alias = item
            return f"{self._render(dialect, expression)} AS {dialect.quote(alias)}"
        return self._render(dialect, item)

    def compile(self, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        parameters: list[Any] = []
        sql = "SELECT "
        if self.distinct_value:
            sql += "DISTINCT "
        sql += ", ".join(self._render_item(dialect, item) for item in self.items) or "*"
        if self.source is not None:
            subquery, alias = self.source
            subsql, subparameters = subquery.compile(dialect)
            parameters.extend(subparameters)
            sql += f" FROM ({subsql}) AS {dialect.quote(alias)}"
        else:
            sql += f" FROM {dialect.quote(self._require_table())}"
        sql += self._compile_where(dialect, parameters)
        if self.order:
            sql += " ORDER BY " + ", ".join(
                f"{self._render(dialect, column)} {direction}" for column, direction in self.order
            )
        if self.limit_value is not None:
            sql += f" LIMIT {self.limit_value}"
        return sql, tuple(parameters)

    def execute(self, db: str | Connection = "default") -> Result:
        connection = resolve_connection(db)
        sql, parameters = self.compile(connection.dialect)
        with closing(connection.execute(sql, parameters)) as cursor:
            rows = _rows_as_dicts(cursor)
        if self.object_type is not None:
            rows = [self.object_type.from_row(row, registry=self.object_registry) for row in rows]
        return Result(rows)


class Insert(Query):
    """INSERT description for a single row."""

    column_names: tuple[str, ...] = ()
    row: dict[str, Any] = Field(default_factory=dict)
    returning_column: Optional[str] = None

    def columns(self, columns: Sequence[str]) -> Insert:
        return self._with(column_names=tuple(columns))

    def values(self, values: dict[str, Any]) -> Insert:
        return self._with(row={**self.row, **values})

    def returning(self, column: Optional[str]) -> Insert:
        """Name the identity column generated by the database."""
        return self._with(returning_column=column)

    def _returns(self, dialect: Dialect) -> bool:
        return bool(self.returning_column) and dialect.SUPPORTS_RETURNING

    def compile(self, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        columns = list(self.column_names or self.row)
        sql = f"INSERT INTO {dialect.quote(self._require_table())}"
        if columns:
            markers = ", ".join(dialect.PLACEHOLDER for _ in columns)
            sql += f" ({', '.join(dialect.quote(c) for c in columns)}) VALUES ({markers})"
        else:
            sql += f" {dialect.EMPTY_INSERT}"
        if self._returns(dialect):
            sql += f" RETURNING {dialect.quote(self.returning_column)}"
        return sql, tuple(self.row.get(column) for column in columns)

    def execute(self, db: str | Connection = "default") -> Result:
        connection = resolve_connection(db)
        sql, parameters = self.compile(connection.dialect)
        with closing(connection.execute(sql, parameters)) as cursor:
            insert_id = connection.dialect.last_insert_id(cursor, self._returns(connection.dialect))
            affected_rows = cursor.rowcount
        connection.commit()
        return Result(insert_id=insert_id, affected_rows=affected_rows)


class Update(Query):
    """UPDATE description."""

    assignments: dict[str, Any] = Field(default_factory=dict)

    def value(self, column: str, value: Any) -> Update:
        return self._with(assignments={**self.assignments, column: value})

    def values(self, values: dict[str, Any]) -> Update:
        return self._with(assignments={**self.assignments, **values})

    def compile(self, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        if not self.assignments:
            raise ValueError("Update has no values to set")
        parameters: list[Any] = []
        assignments = []
        for column, value in self.assignments.items():
            if isinstance(value, Expression):
                assignments.append(f"{dialect.quote(column)} = {value.sql}")
            else:
                assignments.append(f"{dialect.quote(column)} = {dialect.PLACEHOLDER}")
                parameters.append(value)
        sql = f"UPDATE {dialect.quote(self._require_table())} SET {', '.join(assignments)}"
        sql += self._compile_where(dialect, parameters)
        if self.limit_value is not None and dialect.SUPPORTS_LIMITED_WRITES:
            sql += f" LIMIT {self.limit_value}"
        return sql, tuple(parameters)

    def execute(self, db: str | Connection = "default") -> int:
        """Run the statement and return the number of updated rows."""
        connection = resolve_connection(db)
        sql, parameters = self.compile(connection.dialect)
        with closing(connection.execute(sql, parameters)) as cursor:
            count = cursor.rowcount
        connection.commit()
        return count


class Delete(Query):
    """DELETE description."""

    def compile(self, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        parameters: list[Any] = []
        sql = f"DELETE FROM {dialect.quote(self._require_table())}"
        sql += self._compile_where(dialect, parameters)
        if self.limit_value is not None and dialect.SUPPORTS_LIMITED_WRITES:
            sql += f" LIMIT {self.limit_value}"
        return sql, tuple(parameters)

    def execute(self, db: str | Connection = "default") -> int:
        """Run the statement and return the number of deleted rows."""
        connection = resolve_connection(db)
        sql, parameters = self.compile(connection.dialect)
        with closing(connection.execute(sql, parameters)) as cursor:
            count = cursor.rowcount
        connection.commit()
        return count


__all__ = ["Expression", "Result", "Query", "Select", "Insert", "Update", "Delete"]
