"""Change-tracking storage for model data."""

from collections.abc import MutableMapping
from typing import Any, Iterator


class Storage(MutableMapping):
    """Current attribute values of a model, remembering the original value
    of every attribute changed since the last `compact()`.

    Writing an attribute back to its original value makes it unchanged again.
    """

    def __init__(self, data: dict[str, Any] | None = None):
        self._current: dict[str, Any] = dict(data or {})
        self._original: dict[str, Any] = {}

    def __getitem__(self, name: str) -> Any:
        return self._current[name]

    def __setitem__(self, name: str, value: Any) -> None:
        current = self._current.get(name)
        if current != value:
            if name in self._original:
                if self._original[name] == value:
                    # back to the original value
                    del self._original[name]
            else:
                self._original[name] = current
        self._current[name] = value

    def __delitem__(self, name: str) -> None:
        del self._current[name]
        self._original.pop(name, None)

    def __iter__(self) -> Iterator[str]:
        return iter(self._current)

    def __len__(self) -> int:
        return len(self._current)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._current!r}, changed={list(self._original)!r})"

    def get(self, name: str, default: Any = None) -> Any:
        return self._current.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self[name] = value

    def is_changed(self, name: str) -> bool:
        """Return True if `name` differs from its value at the last compaction."""
        return name in self._original

    def changed(self) -> dict[str, tuple[Any, Any]]:
        """Return `{name: (original, current)}` for every changed attribute."""
        return {name: (original, self._current.get(name))
                for name, original in self._original.items()}

    def compact(self) -> None:
        """Forget original values: current values become the originals."""
        self._original = {}

    def as_dict(self) -> dict[str, Any]:
        return dict(self._current)
