from __future__ import annotations

"""
Unit tests for the PropertyBag merge map and value conversion.
"""

from pathlib import Path

from scanprops.core.processing.property_bag import PropertyBag, convert_value


# -----------------------------------------------------------------------------
# Merge primitives
# -----------------------------------------------------------------------------

def test_put_if_absent_does_not_overwrite():
    bag = PropertyBag({"k": "v1"})
    bag.put_if_absent("k", "v2")
    bag.put_if_absent("other", "x")
    assert bag["k"] == "v1"
    assert bag["other"] == "x"


def test_put_if_absent_replaces_none_value():
    bag = PropertyBag()
    bag.property("sonar.sources", None)
    bag.put_if_absent("sonar.sources", "")
    assert bag["sonar.sources"] == ""


def test_append_to_missing_key_starts_a_list():
    bag = PropertyBag()
    bag.append("libs", ["a.jar"])
    assert bag["libs"] == ["a.jar"]


def test_append_to_scalar_keeps_scalar_first():
    bag = PropertyBag({"libs": "first.jar"})
    bag.append("libs", ["second.jar"])
    assert bag["libs"] == ["first.jar", "second.jar"]


def test_append_keeps_duplicates():
    bag = PropertyBag()
    bag.append("libs", ["a.jar"])
    bag.append("libs", ["a.jar"])
    assert bag["libs"] == ["a.jar", "a.jar"]


def test_append_does_not_mutate_previous_list():
    original = ["a"]
    bag = PropertyBag({"k": original})
    bag.append("k", ["b"])
    assert original == ["a"]


def test_insertion_order_is_preserved():
    bag = PropertyBag()
    for key in ("z", "a", "m"):
        bag.put(key, key)
    assert list(bag) == ["z", "a", "m"]
    assert [k for k, _ in bag.items()] == ["z", "a", "m"]


def test_remove_missing_key_is_silent():
    bag = PropertyBag({"a": "1"})
    bag.remove("missing")
    bag.remove("a")
    assert len(bag) == 0
    assert "a" not in bag


def test_user_api_marks_keys_as_user_defined():
    bag = PropertyBag()
    bag.put("sonar.projectName", "default")
    bag.property("sonar.sources", "custom")
    bag.properties({"sonar.tests": "t", "sonar.verbose": True})
    assert bag.user_defined_keys == ["sonar.sources", "sonar.tests", "sonar.verbose"]
    assert bag.get("sonar.projectName") == "default"


def test_user_defined_keys_is_a_read_only_view():
    bag = PropertyBag()
    assert bag.user_defined_keys == []
    bag.mark_user_defined("sonar.host.url")
    keys = bag.user_defined_keys
    keys.append("sonar.other")
    assert bag.user_defined_keys == ["sonar.host.url"]


# -----------------------------------------------------------------------------
# Value conversion
# -----------------------------------------------------------------------------

def test_convert_none_drops_the_key():
    assert convert_value(None) is None


def test_convert_booleans_are_lowercase():
    assert convert_value(True) == "true"
    assert convert_value(False) == "false"


def test_convert_empty_string_is_kept():
    assert convert_value("") == ""


def test_convert_nested_collections_are_flattened():
    assert convert_value(["a", ["b", "c"], None, "d"]) == "a,b,c,d"


def test_convert_empty_collection_drops_the_key():
    assert convert_value([]) is None
    assert convert_value([None, []]) is None


def test_convert_paths_in_collections_are_quoted_on_commas(tmp_path):
    odd = tmp_path / "a,b"
    plain = tmp_path / "plain"
    assert convert_value([odd, plain]) == f'"{odd}",{plain}'


def test_convert_single_path_is_not_quoted(tmp_path):
    odd = tmp_path / "a,b"
    assert convert_value(odd) == str(odd)


def test_convert_other_values_use_str():
    assert convert_value(11) == "11"
    assert convert_value(Path("x")) == "x"
