"""Validation context: labels, filters, rules and callbacks applied to a data map.

    validation = Validation({"name": " Alice "})
    validation.filters("name", [str.strip])
    validation.rules("name", [not_empty])
    if not validation.check():
        print(validation.errors())

Filters map a value to a new value. Rules take a value and return a boolean;
the rule's `__name__` is its error key. Rules other than `not_empty` are
skipped for empty values. Callbacks receive `(validation, field)` and report
problems with `validation.error(field, key)`.
"""

from typing import Any, Callable, Iterable

from .errors import ValidationFailure


def not_empty(value: Any) -> bool:
    """Rule: value is neither None, an empty string nor an empty collection."""
    if value is None:
        return False
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) > 0
    return True


class Validation:
    """Data map annotated with per-field validation bindings."""

    def __init__(self, data: dict[str, Any]):
        self.data = dict(data)
        self._labels: dict[str, str] = {}
        self._filters: dict[str, list[Callable[[Any], Any]]] = {}
        self._rules: dict[str, list[Callable[[Any], bool]]] = {}
        self._callbacks: dict[str, list[Callable[["Validation", str], None]]] = {}
        self._errors: dict[str, str] = {}

    @classmethod
    def factory(cls, data: dict[str, Any]) -> "Validation":
        return cls(data)

    def __getitem__(self, name: str) -> Any:
        return self.data[name]

    def __contains__(self, name: str) -> bool:
        return name in self.data

    def label(self, field: str, label: str) -> "Validation":
        self._labels[field] = label
        return self

    def filters(self, field: str, filters: Iterable[Callable[[Any], Any]]) -> "Validation":
        self._filters.setdefault(field, []).extend(filters)
        return self

    def rules(self, field: str, rules: Iterable[Callable[[Any], bool]]) -> "Validation":
        self._rules.setdefault(field, []).extend(rules)
        return self

    def callbacks(self, field: str, callbacks: Iterable[Callable[["Validation", str], None]]) -> "Validation":
        self._callbacks.setdefault(field, []).extend(callbacks)
        return self

    def labels(self) -> dict[str, str]:
        return dict(self._labels)

    def bound_fields(self) -> list[str]:
        """Fields that received any binding, in binding order."""
        fields: dict[str, None] = {}
        for bindings in (self._labels, self._filters, self._rules, self._callbacks):
            fields.update(dict.fromkeys(bindings))
        return list(fields)

    def error(self, field: str, error: str) -> "Validation":
        """Record an error for a field; the first error of a field wins."""
        self._errors.setdefault(field, error)
        return self

    def check(self) -> bool:
        """Apply filters, rules and callbacks; return True when no error was recorded."""
        self._errors = {}
        for field, filters in self._filters.items():
            value = self.data.get(field)
            for filter_ in filters:
                value = filter_(value)
            self.data[field] = value
        for field, rules in self._rules.items():
            value = self.data.get(field)
            for rule in rules:
                if rule is not not_empty and not not_empty(value):
                    continue
                if not rule(value):
                    self.error(field, getattr(rule, "__name__", "rule"))
                    break
        for field, callbacks in self._callbacks.items():
            for callback in callbacks:
                callback(self, field)
        return not self._errors

    def errors(self) -> dict[str, str]:
        """Return `{field: "<label> failed <rule>"}` for the last check."""
        return {
            field: f"{self._labels.get(field, field)} failed {error}"
            for field, error in self._errors.items()
        }

    def assert_valid(self) -> "Validation":
        """Check and raise `ValidationFailure` when some rule failed."""
        if not self.check():
            raise ValidationFailure(self.errors())
        return self

    def as_dict(self) -> dict[str, Any]:
        return dict(self.data)


__all__ = ["Validation", "not_empty"]
