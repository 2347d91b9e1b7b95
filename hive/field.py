"""Field descriptors for model attributes.

Each field of a model's meta is a `Field` instance, stored in
`meta.fields["name"]`. Fields are frozen: they hold the default value and the
identity/unique flags, and know how to normalize any raw value into the
field's Python type (`normalize`) and back to a database-ready value
(`serialize`). Values read from the database go through `parse`, which
defaults to `normalize`. Normalization never raises: unparsable input
becomes `None`.
"""

from __future__ import annotations

import datetime
import enum
import json
import math
import numbers
from typing import Any, ClassVar, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from .model import Model


class TimestampBehavior(enum.Enum):
    """When a timestamp field is set to the current time by the model."""

    NONE = "none"
    ON_CREATE = "on_create"
    ON_UPDATE = "on_update"
    BOTH = "both"

    @property
    def on_create(self) -> bool:
        return self in (TimestampBehavior.ON_CREATE, TimestampBehavior.BOTH)

    @property
    def on_update(self) -> bool:
        return self in (TimestampBehavior.ON_UPDATE, TimestampBehavior.BOTH)


class Field(BaseModel):
    """Base field: keeps values as they are given.

    Subclass and override `on_change` to rewrite values written by callers
    (it is skipped while a model is loading from the database).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    default: Any = None
    primary: bool = False
    unique: bool = False

    @property
    def is_identity(self) -> bool:
        """True for fields whose value is generated by the database on insert."""
        return False

    def timestamp_behavior(self) -> TimestampBehavior:
        return TimestampBehavior.NONE

    def normalize(self, value: Any) -> Any:
        """Convert any raw value to this field's Python representation."""
        return value

    def parse(self, value: Any) -> Any:
        """Convert a value read from the database."""
        return self.normalize(value)

    def serialize(self, value: Any) -> Any:
        """Convert a normalized value to a database-ready form."""
        return value

    def on_change(self, model: "Model", value: Any) -> Any:
        """Hook called with every normalized value written outside of loading."""
        return value


class StringField(Field):
    """Text values."""

    def normalize(self, value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, enum.Enum):
            value = value.value
        return str(value)


class IntegerField(Field):
    """Integer values; floats are truncated, numeric strings are parsed."""

    def normalize(self, value: Any) -> int | None:
        if value is None:
            return None
        if isinstance(value, numbers.Number):
            try:
                return int(value)
            except (TypeError, ValueError, OverflowError):
                return None
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            value = value.strip()
            try:
                return int(value)
            except ValueError:
                pass
            try:
                parsed = float(value)
            except ValueError:
                return None
            return int(parsed) if math.isfinite(parsed) else None
        return None


class AutoField(IntegerField):
    """Identity column, generated by the database on insert.

    Holds `None` until a positive identifier is assigned.
    """

    primary: bool = True
    unique: bool = True

    @property
    def is_identity(self) -> bool:
        return True

    def normalize(self, value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        value = super().normalize(value)
        if value is None or value <= 0:
            return None
        return value


class FloatField(Field):
    """Floating point values."""

    def normalize(self, value: Any) -> float | None:
        if value is None:
            return None
        if isinstance(value, numbers.Number):
            try:
                return float(value)
            except (TypeError, ValueError, OverflowError):
                return None
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None
        return None


class BooleanField(Field):
    """Boolean values; "0", "false", "no", "off" and "" are false."""

    FALSE_STRINGS: ClassVar[tuple[str, ...]] = ("0", "false", "no", "off", "")

    def normalize(self, value: Any) -> bool | None:
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            return value.strip().lower() not in self.FALSE_STRINGS
        return bool(value)


class TimestampField(Field):
    """Date and time values.

    `auto_now_create` and `auto_now_update` tell the model to write the
    current time on create and on update; normalization itself never reads
    the clock.
    """

    auto_now_create: bool = False
    auto_now_update: bool = False

    def timestamp_behavior(self) -> TimestampBehavior:
        if self.auto_now_create and self.auto_now_update:
            return TimestampBehavior.BOTH
        if self.auto_now_create:
            return TimestampBehavior.ON_CREATE
        if self.auto_now_update:
            return TimestampBehavior.ON_UPDATE
        return TimestampBehavior.NONE

    def normalize(self, value: Any) -> datetime.datetime | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return datetime.datetime.combine(value, datetime.time())
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            value = value.strip()
            try:
                value = float(value)
            except ValueError:
                try:
                    return datetime.datetime.fromisoformat(value)
                except ValueError:
                    return None
        if isinstance(value, (int, float)):
            try:
                return datetime.datetime.fromtimestamp(value)
            except (OverflowError, OSError, ValueError):
                return None
        return None

    def serialize(self, value: Any) -> str | None:
        if value is None:
            return None
        return value.isoformat(sep=" ")


class JSONField(Field):
    """Any JSON-serializable value, stored as JSON text.

    Written values are kept as given; text read from the database is decoded.
    """

    def parse(self, value: Any) -> Any:
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    def serialize(self, value: Any) -> str | None:
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)


class EnumField(Field):
    """Members of `enum_type`, accepted by member, value or name."""

    enum_type: type[enum.Enum]

    def normalize(self, value: Any) -> enum.Enum | None:
        if value is None:
            return None
        if isinstance(value, self.enum_type):
            return value
        try:
            return self.enum_type(value)
        except (ValueError, TypeError):
            pass
        if isinstance(value, str):
            try:
                return self.enum_type[value]
            except KeyError:
                return None
        return None

    def serialize(self, value: Any) -> Any:
        if value is None:
            return None
        return value.value


__all__ = [
    "TimestampBehavior",
    "Field",
    "StringField",
    "IntegerField",
    "AutoField",
    "FloatField",
    "BooleanField",
    "TimestampField",
    "JSONField",
    "EnumField",
]
