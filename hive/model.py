"""Model: an entity instance bound to its type's meta and to a persisted row.

    class Person(Model):

        @classmethod
        def init(cls):
            meta = super().init()
            meta.table = "people"
            meta.fields.update(
                id=AutoField(),
                name=StringField(default=""),
                age=IntegerField(default=0),
            )
            return meta

    person = Person({"name": "Alice"})
    person.create()

    same = Person()
    same.id = person.id  # unique field: the model is now prepared
    same.name            # first field access reads the row
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import Any, Iterable, Optional

from .errors import UndefinedAttribute
from .meta import Meta
from .query import Delete, Expression, Insert, Query, Result, Select, Update
from .registry import Registry, registry as default_registry
from .storage import Storage
from .utils.serialize import serialize
from .validation import Validation

logger = logging.getLogger(__name__)

_MISSING = object()

STATES = ("initialized", "prepared", "loading", "loaded", "deleted")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


class Model:
    """Base class for models.

    Attributes are read and written with `get`/`set` (or the attribute syntax,
    which delegates to them) and dispatch over the meta's fields, aliases and
    relations. Names starting with an underscore are regular Python attributes.

    Lifecycle flags:
        prepared: the model identifies a row (set when a unique field changes)
        loading:  data is being copied from a row: values go through `Field.parse`
                  and `on_change` hooks are skipped
        loaded:   data is in sync with a row; setting it compacts changes
        deleted:  the row was deleted; data stays readable
    """

    # meta

    @classmethod
    def init(cls) -> Meta:
        """Build the meta of this model type.

        Every model must override this method, call `super().init()` and fill
        the returned meta with at least its fields.
        """
        return Meta(cls._get_model_name())

    @classmethod
    def _get_model_name(cls) -> str:
        """Return the type identifier for this class."""
        return cls.__name__.lower()

    @classmethod
    def meta(cls, registry: Optional[Registry] = None) -> Meta:
        """Return the meta of this model type."""
        return (registry if registry is not None else default_registry).get(cls)

    # instanciation

    @staticmethod
    def factory(name: str, values: Optional[dict[str, Any]] = None,
                registry: Optional[Registry] = None) -> "Model":
        """Build a model from its type identifier."""
        return (registry if registry is not None else default_registry).factory(name, values)

    @classmethod
    def from_row(cls, row: dict[str, Any], registry: Optional[Registry] = None) -> "Model":
        """Build a loaded model from a database row."""
        return cls(registry=registry).populate_from(row)

    def __init__(self, values: Optional[dict[str, Any]] = None, *,
                 registry: Optional[Registry] = None):
        self._registry = registry if registry is not None else default_registry
        self._meta = self._registry.get(type(self))
        self._model = self._meta.model
        self._state = dict.fromkeys(STATES, False)
        self._data = Storage()
        self._relations: dict[str, Any] = {}
        self._info: dict[str, Any] = {}
        self.reset()
        self._state["initialized"] = True
        if values:
            self.values(values)

    def populate_from(self, row: dict[str, Any]) -> "Model":
        """Copy a database row into the model, which ends up loaded."""
        self.loading(True)
        self.values(row)
        return self.loaded(True)

    # attribute access

    def get(self, name: str) -> Any:
        """Return the value of a field, alias or relation.

        A prepared model that is neither loaded nor loading reads its row first.
        """
        meta = self._meta
        if name in meta.aliases:
            return meta.aliases[name](self)
        if name in meta.relations:
            if name not in self._relations:
                self._relations[name] = meta.relations[name].read(self)
            return self._relations[name]
        if name not in meta.fields:
            raise UndefinedAttribute(name, type(self).__name__)
        if self.prepared() and not self.loaded() and not self.loading():
            self.read()
        return self._data[name]

    def set(self, name: str, value: Any) -> "Model":
        """Write a field or relation value."""
        meta = self._meta
        if name in meta.relations:
            meta.relations[name].reconcile(self, value)
            self._relations[name] = value
            return self
        if name not in meta.fields:
            raise UndefinedAttribute(name, type(self).__name__)
        field = meta.fields[name]
        if self.loading():
            value = field.parse(value)
        else:
            value = field.on_change(self, field.normalize(value))
        self._data[name] = value
        if field.unique and self._data.is_changed(name):
            self.prepared(True)
        return self

    def unset(self, name: str) -> "Model":
        """Reset a field to its default, or forget a loaded relation."""
        meta = self._meta
        if name in meta.relations:
            self._relations.pop(name, None)
            return self
        if name not in meta.fields:
            raise UndefinedAttribute(name, type(self).__name__)
        field = meta.fields[name]
        self._data[name] = field.normalize(field.default)
        return self

    def has(self, name: str) -> bool:
        meta = self._meta
        return name in meta.fields or name in meta.aliases or name in meta.relations

    def values(self, values: dict[str, Any]) -> "Model":
        """Write every field and relation found in `values`; other keys are ignored."""
        meta = self._meta
        for name, value in values.items():
            if name in meta.fields or name in meta.relations:
                self.set(name, value)
        return self

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
        else:
            self.unset(name)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __str__(self) -> str:
        return self.as_json()

    def __repr__(self) -> str:
        flags = ",".join(state for state in STATES[1:] if self._state[state])
        return f"<{type(self).__name__} {self._data.as_dict()!r} [{flags}]>"

    # information and serialization

    def info(self, key: Optional[str] = None, value: Any = _MISSING) -> Any:
        """Get or set information attached to this instance (never persisted).

            model.info("source", "import")  # set
            model.info("source")            # get one
            model.info()                    # get all
        """
        if key is None:
            return self._info
        if value is _MISSING:
            return self._info.get(key)
        self._info[key] = value
        return self

    def as_dict(self) -> dict[str, Any]:
        """Return every field value (reading the row first if needed)."""
        return {name: self.get(name) for name in self._meta.fields}

    def as_json(self) -> str:
        return json.dumps(serialize(self.as_dict()), ensure_ascii=False)

    # state

    def _flag(self, name: str, state: Optional[bool]) -> Any:
        if state is None:
            return self._state[name]
        self._state[name] = bool(state)
        return self

    def prepared(self, state: Optional[bool] = None) -> Any:
        return self._flag("prepared", state)

    def loading(self, state: Optional[bool] = None) -> Any:
        return self._flag("loading", state)

    def loaded(self, state: Optional[bool] = None) -> Any:
        """Get or set the loaded state.

        Becoming loaded compacts the changes, ends loading and prepares the model.
        """
        if state is None:
            return self._state["loaded"]
        self._state["loaded"] = bool(state)
        if state:
            self._data.compact()
            self.loading(False)
            self.prepared(True)
        return self

    def deleted(self, state: Optional[bool] = None) -> Any:
        return self._flag("deleted", state)

    def changed(self) -> dict[str, tuple[Any, Any]]:
        """Return `{name: (original, current)}` for the fields changed since the last load."""
        return self._data.changed()

    def reset(self) -> "Model":
        """Return to the default values, forgetting loaded relations and every state but `initialized`."""
        self._data = Storage({
            name: field.normalize(field.default)
            for name, field in self._meta.fields.items()
        })
        self._relations = {}
        return self.prepared(False).loading(False).loaded(False).deleted(False)

    # persistence

    def _touch(self, moment: str) -> None:
        """Write the current time into timestamps flagged for `moment` (on_create/on_update)."""
        now = datetime.datetime.now()
        for name, field in self._meta.fields.items():
            if getattr(field.timestamp_behavior(), moment):
                self.set(name, now)

    def create(self, query: Optional[Insert] = None) -> "Model":
        """Insert a row from the model data; the model ends up loaded."""
        meta = self._meta
        self._touch("on_create")
        result = self.query_insert(query).execute(meta.db)
        identities = meta.identity_fields
        if len(identities) == 1:
            self.loading(True)
            self.set(identities[0], result.insert_id)
        logger.debug("Created %s %r", self._model, result.insert_id)
        return self.loaded(True)

    def read(self, query: Optional[Select] = None, limit: Optional[int] = 1) -> "Model | Result":
        """Load the row identified by the model.

        With `limit` other than 1, return the `Result` of all matching models
        instead, leaving this model untouched.
        """
        meta = self._meta
        query = self.query_select(query, limit)
        if limit != 1:
            return query.execute(meta.db)
        row = query.as_object(None).execute(meta.db).current()
        if row is None:
            logger.debug("No %s row matches %r", self._model, self._data.changed())
            return self.prepared(False).loaded(False)
        return self.populate_from(row)

    def update(self, query: Optional[Update] = None, limit: Optional[int] = 1) -> "Model | int":
        """Write the changed fields to the row.

        With `limit` other than 1, update every matching row and return their count.
        """
        meta = self._meta
        self._touch("on_update")
        if limit == 1 and not self.changed():
            return self
        query = self.query_update(query, limit)
        if not query.assignments:
            return 0
        if limit == 1:
            self._require_conditions(query, "update")
        count = query.execute(meta.db)
        if limit != 1:
            return count
        logger.debug("Updated %s (%d row)", self._model, count)
        return self.loaded(True)

    def delete(self, query: Optional[Delete] = None, limit: Optional[int] = 1) -> "Model | int":
        """Delete the row; the model data stays readable.

        With `limit` other than 1, delete every matching row and return their count.
        """
        query = self.query_delete(query, limit)
        if limit == 1:
            self._require_conditions(query, "delete")
        count = query.execute(self._meta.db)
        if limit != 1:
            return count
        return self.deleted(True)

    def _require_conditions(self, query: Query, action: str) -> None:
        if not query.conditions:
            raise ValueError(f"Cannot {action} a single {self._model}: no field identifies its row")

    def save(self) -> "Model":
        """Update a loaded model, create any other.

        A prepared model that was never loaded is inserted.
        """
        if self.loaded():
            self.update()
        else:
            self.create()
        return self

    def total(self, query: Optional[Select] = None) -> int:
        """Count the rows matching the model."""
        meta = self._meta
        if query is None:
            query = Select()
        query = self.query_conditions(query.table(meta.table))
        counting = Select().select((Expression(sql="COUNT(*)"), "total")).from_subquery(query, "results")
        return int(counting.execute(meta.db).get("total") or 0)

    def select_list(self, key: str, value: str, query: Optional[Select] = None) -> dict[Any, Any]:
        """Return `{key: value}` over the rows matching the model, in default order."""
        meta = self._meta
        for name in (key, value):
            if name not in meta.fields:
                raise UndefinedAttribute(name, type(self).__name__)
        if query is None:
            query = Select().distinct(True)
        query = query.select(meta.alias(key), meta.alias(value)).table(meta.table)
        query = self.query_conditions(query)
        for name, direction in meta.sorting.items():
            query = query.order_by(meta.column(name), direction)
        rows = query.as_object(None).execute(meta.db)
        key_field, value_field = meta.fields[key], meta.fields[value]
        return {key_field.parse(row[key]): value_field.parse(row[value]) for row in rows}

    def validate(self, context: Optional[str] = None,
                 data: Optional[dict[str, Any]] = None) -> Validation:
        """Return a `Validation` of the model data (or of `data`).

        When `context` names one of `meta.validate`, only its fields are bound
        and its own labels, filters, rules and callbacks are added.
        """
        meta = self._meta
        if context in meta.validate:
            overrides = meta.validate[context]
            fields: Iterable[str] = list(overrides)
        else:
            overrides = {}
            fields = list(meta.fields)
        if data is None:
            data = self.as_dict()
        validation = Validation.factory(data)
        for field in fields:
            if field in meta.labels:
                validation.label(field, meta.labels[field])
            if field in meta.filters:
                validation.filters(field, meta.filters[field])
            if field in meta.rules:
                validation.rules(field, meta.rules[field])
            if field in meta.callbacks:
                validation.callbacks(field, meta.callbacks[field])
            bindings = overrides.get(field) or {}
            if "label" in bindings:
                validation.label(field, bindings["label"])
            if "filters" in bindings:
                validation.filters(field, bindings["filters"])
            if "rules" in bindings:
                validation.rules(field, bindings["rules"])
            if "callbacks" in bindings:
                validation.callbacks(field, bindings["callbacks"])
        return validation

    # query descriptions

    def query_insert(self, query: Optional[Insert] = None) -> Insert:
        """Return an INSERT of every non-identity field, keyed by column."""
        meta = self._meta
        if query is None:
            query = Insert()
        values = {
            meta.column(name): field.serialize(self._data[name])
            for name, field in meta.fields.items()
            if not field.is_identity
        }
        query = query.table(meta.table).columns(list(values)).values(values)
        identities = meta.identity_fields
        if len(identities) == 1:
            query = query.returning(meta.column(identities[0]))
        return query

    def query_select(self, query: Optional[Select] = None, limit: Optional[int] = None) -> Select:
        """Return a SELECT of every field, matching the model, hydrating models of this type."""
        meta = self._meta
        if query is None:
            query = Select()
        query = query.select(*(meta.alias(name) for name in meta.fields)).table(meta.table)
        query = self.query_conditions(query)
        for name, direction in meta.sorting.items():
            query = query.order_by(meta.column(name), direction)
        if limit:
            query = query.limit(limit)
        return query.as_object(type(self), self._registry)

    def query_update(self, query: Optional[Update] = None, limit: Optional[int] = None) -> Update:
        """Return an UPDATE setting the changed fields.

        The row is identified by the unique fields as they were last loaded,
        since changed fields hold their new values.
        """
        meta = self._meta
        if query is None:
            query = Update()
        query = query.table(meta.table)
        changed = self._data.changed()
        for name, (_, current) in changed.items():
            query = query.value(meta.column(name), meta.fields[name].serialize(current))
        for name, field in meta.fields.items():
            if not field.unique:
                continue
            value = changed[name][0] if name in changed else self._data[name]
            if not _is_empty(value):
                query = query.where(meta.column(name), "=", field.serialize(value))
        if limit:
            query = query.limit(limit)
        return query

    def query_delete(self, query: Optional[Delete] = None, limit: Optional[int] = None) -> Delete:
        """Return a DELETE of the rows matching the model."""
        meta = self._meta
        if query is None:
            query = Delete()
        query = self.query_conditions(query.table(meta.table))
        if limit:
            query = query.limit(limit)
        return query

    def query_conditions(self, query: Query) -> Query:
        """Add `column = value` for every changed field and every non-empty unique field."""
        meta = self._meta
        for name, field in meta.fields.items():
            value = self._data[name]
            if self._data.is_changed(name) or (field.unique and not _is_empty(value)):
                query = query.where(meta.column(name), "=", field.serialize(value))
        return query


__all__ = ["Model"]
