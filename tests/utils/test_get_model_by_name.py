"""Tests for hive.utils.get_model_by_name."""

import pytest

from hive import Meta, Model, StringField, UnconfiguredType
from hive.utils.get_model_by_name import get_all_models, get_model_by_name


class LookupParent(Model):

    @classmethod
    def init(cls):
        meta = super().init()
        meta.fields.update(label=StringField())
        return meta


class LookupChild(LookupParent):
    pass


class LookupRenamed(Model):

    @classmethod
    def _get_model_name(cls):
        return "renamed_lookup"

    @classmethod
    def init(cls):
        return Meta(cls._get_model_name())


def test_all_models_include_nested_subclasses():
    models = list(get_all_models())
    assert LookupParent in models
    assert LookupChild in models
    assert models.index(LookupParent) < models.index(LookupChild)


def test_lookup_ignores_case():
    assert get_model_by_name("lookupchild") is LookupChild
    assert get_model_by_name("LookupParent") is LookupParent


def test_lookup_by_identifier_or_class_name():
    assert get_model_by_name("renamed_lookup") is LookupRenamed
    assert get_model_by_name("lookuprenamed") is LookupRenamed


def test_lookup_returns_none_when_no_match():
    assert get_model_by_name("nosuchmodel") is None


def test_lookup_raises_when_several_match():
    class LookupTwin(Model):
        pass

    first = LookupTwin

    class LookupTwin(Model):  # noqa: F811
        pass

    with pytest.raises(UnconfiguredType, match="More than one model"):
        get_model_by_name("lookuptwin")
    assert first is not LookupTwin
