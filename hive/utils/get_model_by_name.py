"""Resolve a model class by its type identifier."""

from typing import Iterable, Optional, TYPE_CHECKING

from ..errors import UnconfiguredType

if TYPE_CHECKING:
    from ..model import Model


def _walk(base: type) -> Iterable[type]:
    for subclass in base.__subclasses__():
        yield subclass
        yield from _walk(subclass)


def get_all_models() -> Iterable[type["Model"]]:
    """Yield every Model subclass defined so far, parents before children."""
    from ..model import Model
    seen = set()
    for cls in _walk(Model):
        if cls not in seen:
            seen.add(cls)
            yield cls


def get_model_by_name(name: str) -> Optional[type["Model"]]:
    """Return the Model subclass whose identifier or class name is `name`.

    Matching ignores case. Raises `UnconfiguredType` when several classes match.
    """
    name = name.lower()
    matches = [
        cls for cls in get_all_models()
        if name in (cls._get_model_name(), cls.__name__.lower())
    ]
    if len(matches) > 1:
        raise UnconfiguredType(
            f"More than one model found for `{name}`: "
            + ", ".join(f"{cls.__module__}.{cls.__qualname__}" for cls in matches)
        )
    return matches[0] if matches else None
