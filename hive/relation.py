"""Relation descriptors: lazily loaded attributes pointing to other models.

A relation joins the owning model to a target model type through `using`, an
ordered mapping of local attribute names to foreign attribute names.
Assigning a related model copies each of its foreign values into the
matching local attribute, whichever side holds the key.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from .model import Model


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


class Relation(BaseModel):
    """Single related model, found through the local join values."""

    model_config = ConfigDict(frozen=True)

    model: str
    using: dict[str, str]

    def _target(self, owner: "Model") -> "Model":
        """Return an empty target model carrying the owner's join values."""
        target = owner._registry.factory(self.model)
        values = {foreign: owner.get(local) for local, foreign in self.using.items()}
        for foreign, value in values.items():
            target.set(foreign, value)
        if not any(_is_empty(value) for value in values.values()):
            target.prepared(True)
        return target

    def read(self, owner: "Model") -> Any:
        """Return the related model; it reads itself on first field access."""
        return self._target(owner)

    def reconcile(self, owner: "Model", value: Any) -> None:
        """Copy the join values of an assigned model into the owner."""
        for local, foreign in self.using.items():
            owner.set(local, None if value is None else value.get(foreign))


class BelongsTo(Relation):
    """The owner holds the key of the related model (e.g. `author_id` -> `id`)."""


class HasOne(Relation):
    """The related model holds the owner's key (e.g. `id` -> `person_id`)."""


class HasMany(HasOne):
    """Every model of the target type holding the owner's key."""

    def read(self, owner: "Model") -> list["Model"]:
        template = self._target(owner)
        if not template.prepared():
            return []
        return list(template.read(limit=None))

    def reconcile(self, owner: "Model", value: Any) -> None:
        """Copy the join values of every assigned model into the owner."""
        for item in value or ():
            super().reconcile(owner, item)


__all__ = ["Relation", "BelongsTo", "HasOne", "HasMany"]
