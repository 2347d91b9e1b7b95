"""Exceptions raised by hive."""


class HiveError(Exception):
    """Base class for hive errors."""


class UndefinedAttribute(HiveError, AttributeError):
    """Raised when a model attribute is neither a field, an alias nor a relation."""

    def __init__(self, name: str, model: str):
        self.name = name
        self.model = model
        super().__init__(f"Field `{name}` is not defined in `{model}`")


class UnconfiguredType(HiveError, LookupError):
    """Raised when a model type cannot provide its meta."""


class ValidationFailure(HiveError):
    """Raised by `Validation.assert_valid()` when some rules failed."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        fields = ", ".join(errors)
        super().__init__(f"Validation failed for: {fields}")
