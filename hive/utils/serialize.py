"""Recursive serialization of model data to JSON-serializable types."""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


def serialize(data: Any) -> dict | list | int | float | str | bool | None:
    """
    Convert any list or dict of scalars, models or pydantic.BaseModel instances
    (even nested) to a JSON serializable format using only dict, list, int,
    float, str, and bool.
    """
    from ..model import Model
    if isinstance(data, Model):
        return serialize(data.as_dict())
    if isinstance(data, BaseModel):
        return serialize(data.model_dump(mode="json"))
    if isinstance(data, dict):
        return {key: serialize(value) for key, value in data.items()}
    if isinstance(data, (list, tuple, set)):
        return [serialize(item) for item in data]
    if isinstance(data, Enum):
        return serialize(data.value)
    if isinstance(data, (int, float, str, bool)) or data is None:
        return data
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    raise ValueError(data)
