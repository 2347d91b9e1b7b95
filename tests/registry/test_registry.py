"""Tests for hive.registry: memoization, resolution and single-flight construction."""

import threading
import time

import pytest

from hive.errors import UnconfiguredType
from hive.field import AutoField, StringField
from hive.meta import Meta
from hive.model import Model
from hive.registry import Registry


class RegistryGadget(Model):
    builds = 0

    @classmethod
    def init(cls):
        cls.builds += 1
        meta = super().init()
        meta.fields.update(id=AutoField(), label=StringField(default=""))
        return meta


class RegistryWithoutInit(Model):
    pass


class RegistryBadInit(Model):

    @classmethod
    def init(cls):
        return {"fields": {}}


def test_same_meta_for_class_name_and_instance(registry):
    by_class = registry.get(RegistryGadget)
    assert registry.get("registrygadget") is by_class
    assert registry.get("RegistryGadget") is by_class
    assert registry.get(RegistryGadget(registry=registry)) is by_class
    assert "REGISTRYGADGET" in registry


def test_meta_is_finished_before_it_is_returned(registry):
    meta = registry.get(RegistryGadget)
    assert isinstance(meta, Meta)
    assert meta.finished
    assert meta.model == "registrygadget"
    assert meta.table == "registrygadget"


def test_build_runs_once_per_registry():
    RegistryGadget.builds = 0
    first, second = Registry(), Registry()
    first.get(RegistryGadget)
    first.get("registrygadget")
    assert RegistryGadget.builds == 1
    assert second.get(RegistryGadget) is not first.get(RegistryGadget)
    assert RegistryGadget.builds == 2


def test_concurrent_first_requests_build_once(registry):
    calls = []
    barrier = threading.Barrier(8)

    class RegistrySlow(Model):

        @classmethod
        def init(cls):
            calls.append(threading.get_ident())
            time.sleep(0.05)
            meta = super().init()
            meta.fields["id"] = AutoField()
            return meta

    registry.register(RegistrySlow)
    results = []

    def worker(name):
        barrier.wait()
        results.append(registry.get(name))

    threads = [threading.Thread(target=worker, args=(name,))
               for name in ["RegistrySlow", "registryslow"] * 4]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(calls) == 1
    assert len(results) == 8
    assert all(meta is results[0] for meta in results)


def test_model_without_init_is_unconfigured(registry):
    with pytest.raises(UnconfiguredType, match="must define an `init\\(\\)`"):
        registry.get(RegistryWithoutInit)
    with pytest.raises(UnconfiguredType):
        RegistryWithoutInit(registry=registry)


def test_init_must_return_meta(registry):
    with pytest.raises(UnconfiguredType, match="must return a Meta"):
        registry.get(RegistryBadInit)


def test_unknown_name_is_unconfigured(registry):
    with pytest.raises(UnconfiguredType, match="No model found"):
        registry.get("nothing_like_this")


def test_non_model_class_is_unconfigured(registry):
    with pytest.raises(UnconfiguredType):
        registry.get(dict)


def test_register_under_another_name(registry):
    registry.register(RegistryGadget, name="Gizmo")
    meta = registry.get("gizmo")
    assert "gizmo" in registry
    assert meta.fields.keys() == {"id", "label"}


def test_factory_builds_models_with_values(registry):
    gadget = registry.factory("registrygadget", {"label": "lamp", "unknown": 1})
    assert isinstance(gadget, RegistryGadget)
    assert gadget.label == "lamp"
    assert gadget._registry is registry
    same = Model.factory("RegistryGadget", registry=registry)
    assert isinstance(same, RegistryGadget)


def test_clear_forgets_metas(registry):
    meta = registry.get(RegistryGadget)
    registry.clear()
    assert RegistryGadget not in registry
    assert registry.get(RegistryGadget) is not meta


def test_registered_name_and_class_share_one_meta(registry):
    RegistryGadget.builds = 0
    registry.register(RegistryGadget, name="Gizmo")
    gadget = registry.factory("gizmo")
    assert gadget._meta is registry.get("gizmo")
    assert registry.get(RegistryGadget) is registry.get("gizmo")
    assert RegistryGadget.builds == 1


def test_contains_unknown_name(registry):
    assert "nothing_like_this" not in registry
