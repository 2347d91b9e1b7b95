"""Tests for hive.storage: change tracking and compaction."""

from hive.storage import Storage


def test_new_storage_has_no_changes():
    storage = Storage({"name": "", "age": 0})
    assert storage.changed() == {}
    assert storage.as_dict() == {"name": "", "age": 0}


def test_set_records_original_and_current():
    storage = Storage({"name": ""})
    storage["name"] = "Alice"
    assert storage.is_changed("name")
    assert storage.changed() == {"name": ("", "Alice")}


def test_second_change_keeps_first_original():
    storage = Storage({"name": ""})
    storage["name"] = "Alice"
    storage.set("name", "Bob")
    assert storage.changed() == {"name": ("", "Bob")}


def test_writing_back_the_original_clears_the_change():
    storage = Storage({"name": ""})
    storage["name"] = "Alice"
    storage["name"] = ""
    assert not storage.is_changed("name")
    assert storage.changed() == {}


def test_set_compares_by_equality():
    storage = Storage({"tags": ["a"]})
    storage["tags"] = ["a"]
    assert storage.changed() == {}
    storage["tags"] = ["a", "b"]
    storage["tags"] = ["a"]
    assert storage.changed() == {}


def test_unknown_key_original_is_none():
    storage = Storage()
    storage["extra"] = 1
    assert storage.changed() == {"extra": (None, 1)}


def test_compact_makes_current_values_original():
    storage = Storage({"name": "", "age": 0})
    storage["name"] = "Alice"
    storage["age"] = 30
    storage.compact()
    assert storage.changed() == {}
    assert storage["name"] == "Alice"
    storage["name"] = ""
    assert storage.changed() == {"name": ("Alice", "")}


def test_mapping_protocol():
    storage = Storage({"a": 1, "b": 2})
    assert len(storage) == 2
    assert list(storage) == ["a", "b"]
    assert storage.get("missing", 3) == 3
    storage["a"] = 5
    del storage["a"]
    assert "a" not in storage
    assert storage.changed() == {}
