"""Registry of model metas, built lazily and exactly once per model type."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, TYPE_CHECKING

from .errors import UnconfiguredType
from .meta import Meta
from .utils.get_model_by_name import get_model_by_name

if TYPE_CHECKING:
    from .model import Model

logger = logging.getLogger(__name__)


class Registry:
    """Memoizes one `Meta` per model class.

    Names are resolved to classes first, so all of the following return the
    same object, whatever name the class was registered under:

        registry.get("person")
        registry.get(Person)
        registry.get(Person(registry=registry))
    """

    def __init__(self):
        self._metas: dict[type["Model"], Meta] = {}
        self._types: dict[str, type["Model"]] = {}
        self._locks: dict[type["Model"], threading.Lock] = {}
        self._lock = threading.Lock()

    def __contains__(self, model: Any) -> bool:
        try:
            return self.resolve(model) in self._metas
        except UnconfiguredType:
            return False

    @staticmethod
    def _normalize(model: Any) -> str:
        """Return the lower-cased type identifier of a name, model class or instance."""
        from .model import Model
        if isinstance(model, Model):
            model = type(model)
        if isinstance(model, type):
            if not issubclass(model, Model):
                raise UnconfiguredType(f"{model.__name__} is not a Model subclass")
            return model._get_model_name()
        return str(model).lower()

    def register(self, model_class: type["Model"], name: Optional[str] = None) -> type["Model"]:
        """Bind an identifier to a model class (defaults to its own identifier)."""
        name = (name or model_class._get_model_name()).lower()
        with self._lock:
            self._types[name] = model_class
        return model_class

    def resolve(self, model: Any) -> type["Model"]:
        """Return the model class for a name, model class or instance."""
        from .model import Model
        if isinstance(model, Model):
            return type(model)
        name = self._normalize(model)
        if isinstance(model, type):
            return model
        cls = self._types.get(name)
        if cls is None:
            cls = get_model_by_name(name)
            if cls is None:
                raise UnconfiguredType(f"No model found for `{name}`")
            with self._lock:
                self._types.setdefault(name, cls)
        return cls

    def get(self, model: Any) -> Meta:
        """Return the meta of a model, building it on first request."""
        cls = self.resolve(model)
        meta = self._metas.get(cls)
        if meta is not None:
            return meta
        with self._lock:
            lock = self._locks.setdefault(cls, threading.Lock())
        with lock:
            meta = self._metas.get(cls)
            if meta is None:
                meta = self._build(cls)
                self._metas[cls] = meta
        return meta

    def _build(self, cls: type["Model"]) -> Meta:
        from .model import Model
        name = cls._get_model_name()
        if getattr(cls.init, "__func__", None) is Model.init.__func__:
            raise UnconfiguredType(f"Model `{cls.__name__}` must define an `init()` classmethod")
        meta = cls.init()
        if not isinstance(meta, Meta):
            raise UnconfiguredType(
                f"{cls.__name__}.init() must return a Meta, got {type(meta).__name__}"
            )
        if not meta.model:
            meta.model = name
        logger.info("Building meta for %s", name)
        return meta.finish()

    def factory(self, model: Any, values: Optional[dict[str, Any]] = None) -> "Model":
        """Return a new model instance of the given type, optionally filled with values."""
        cls = self.resolve(model)
        return cls(values, registry=self)

    def clear(self) -> None:
        """Forget every built meta and registered type."""
        with self._lock:
            self._metas.clear()
            self._types.clear()
            self._locks.clear()


registry = Registry()
"""Process-wide registry used by models built without an explicit one."""


__all__ = ["Registry", "registry"]
