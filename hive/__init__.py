"""hive: models bound to relational rows, with change tracking and lazy loading."""

from .connection import connect
from .errors import HiveError, UndefinedAttribute, UnconfiguredType, ValidationFailure
from .field import (
    Field,
    AutoField,
    StringField,
    IntegerField,
    FloatField,
    BooleanField,
    TimestampField,
    JSONField,
    EnumField,
    TimestampBehavior,
)
from .meta import Meta
from .model import Model
from .query import Select, Insert, Update, Delete, Expression, Result
from .registry import Registry, registry
from .relation import Relation, BelongsTo, HasOne, HasMany
from .storage import Storage
from .validation import Validation, not_empty
