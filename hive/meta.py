"""Per-type schema descriptor for models."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable

from .field import Field
from .relation import Relation

logger = logging.getLogger(__name__)

SORTING_DIRECTIONS = ("ASC", "DESC")


class Meta:
    """Schema of a model type: table, fields, relations, aliases, sorting and
    validation bindings.

    Built in two phases: a model's `init()` fills a fresh instance, then
    `finish()` checks and fixes it up and makes it read-only.

        meta = Meta("person")
        meta.table = "people"
        meta.fields.update(id=AutoField(), name=StringField(default=""))
        meta.finish()
    """

    def __init__(self, model: str = ""):
        self.model = model.lower()
        self.table = ""
        self.db = "default"
        self.fields: dict[str, Field] = {}
        self.relations: dict[str, Relation] = {}
        self.aliases: dict[str, Callable[[Any], Any]] = {}
        self.columns: dict[str, str] = {}
        self.sorting: dict[str, str] = {}
        self.labels: dict[str, str] = {}
        self.filters: dict[str, list[Callable]] = {}
        self.rules: dict[str, list[Callable]] = {}
        self.callbacks: dict[str, list[Callable]] = {}
        self.validate: dict[str, dict[str, dict[str, Any]]] = {}
        self.finished = False

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "finished", False):
            raise AttributeError(f"Meta of `{self.model}` is finished and cannot be modified")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"<Meta {self.model} table={self.table!r} fields={list(self.fields)}>"

    def column(self, name: str) -> str:
        """Return the physical column of an attribute."""
        return self.columns.get(name, name)

    def alias(self, name: str) -> str | tuple[str, str]:
        """Return the select-list item loading `name` under its attribute name."""
        column = self.column(name)
        if column == name:
            return name
        return (column, name)

    @property
    def identity_fields(self) -> list[str]:
        return [name for name, field in self.fields.items() if field.is_identity]

    @property
    def unique_fields(self) -> list[str]:
        return [name for name, field in self.fields.items() if field.unique]

    def finish(self) -> "Meta":
        """Fix up cross-field settings, then freeze the meta."""
        if self.finished:
            return self
        if not self.table:
            self.table = self.model
        self.fields = {
            name: field.model_copy(update={"unique": True})
            if field.primary and not field.unique else field
            for name, field in self.fields.items()
        }
        names = [*self.fields, *self.relations, *self.aliases]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(
                f"{self.model}: declared more than once as field, relation or alias: "
                f"{', '.join(sorted(duplicates))}"
            )
        for kind in ("columns", "sorting", "labels", "filters", "rules", "callbacks"):
            unknown = set(getattr(self, kind)) - set(self.fields)
            if unknown:
                raise ValueError(
                    f"{self.model}.{kind} refers to undefined fields: {', '.join(sorted(unknown))}"
                )
        sorting = {}
        for name, direction in self.sorting.items():
            direction = direction.upper()
            if direction not in SORTING_DIRECTIONS:
                raise ValueError(f"{self.model}.sorting[{name!r}]: invalid direction {direction!r}")
            sorting[name] = direction
        self.sorting = sorting
        for kind in ("fields", "relations", "aliases", "columns", "sorting",
                     "labels", "filters", "rules", "callbacks", "validate"):
            setattr(self, kind, MappingProxyType(dict(getattr(self, kind))))
        self.finished = True
        logger.info("Finished meta for %s (table %s, %d fields)",
                    self.model, self.table, len(self.fields))
        return self


__all__ = ["Meta"]
