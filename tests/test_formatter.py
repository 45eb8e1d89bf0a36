"""Tests for the collision-resolving formatter."""
import json

from core.services.formatter import format_tree

E1 = "a" * 24
E2 = "b" * 24
E3 = "c" * 24
E4 = "d" * 24


def test_budget_example():
    tree = {E1: {"Budget": {"value": 50000}}, E2: {"Budget": {"value": 9000}}}
    assert format_tree(tree) == {"Budget": {"value": 50000}, "Budget 2": {"value": 9000}}


def test_suffixes_follow_stored_order():
    tree = {E3: {"x": 3}, E1: {"x": 1}, E2: {"x": 2}}
    out = format_tree(tree)
    assert list(out.items()) == [("x", 3), ("x 2", 1), ("x 3", 2)]


def test_formatting_is_deterministic():
    tree = {
        E1: {"Budget": {"value": 1}},
        E2: {"Budget": {"value": 2}},
        E3: {"Group": {E4: {"Budget": 3}}},
    }
    first = format_tree(tree)
    second = format_tree(tree)
    assert json.dumps(first) == json.dumps(second)


def test_unnamed_entries_get_placeholder():
    tree = {E1: {}, E2: {"a": 1, "b": 2}, E3: "plain", E4: [1, 2]}
    assert format_tree(tree) == {
        "New Object": {},
        "New Object 2": {"a": 1, "b": 2},
        "New Object 3": "plain",
        "New Object 4": [1, 2],
    }


def test_custom_placeholder():
    assert format_tree({E1: 5}, placeholder="Item") == {"Item": 5}


def test_nested_siblings_are_renamed_per_level():
    tree = {
        E1: {
            "teste": {
                E2: {"kanye west": {"quote": "one"}},
                "note": "text",
                E3: {"kanye west": {"quote": "two"}},
            }
        }
    }
    assert format_tree(tree) == {
        "teste": {
            "kanye west": {"quote": "one"},
            "note": "text",
            "kanye west 2": {"quote": "two"},
        }
    }


def test_same_name_at_different_levels_is_not_renamed():
    tree = {E1: {"Budget": {E2: {"Budget": {"value": 1}}}}}
    assert format_tree(tree) == {"Budget": {"Budget": {"value": 1}}}


def test_suffix_never_collides_with_existing_literal_name():
    tree = {E1: {"Budget 2": 0}, E2: {"Budget": 1}, E3: {"Budget": 2}}
    out = format_tree(tree)
    assert list(out) == ["Budget 2", "Budget", "Budget 3"]
    assert len(set(out)) == 3


def test_literal_name_taken_by_earlier_suffix_is_renamed():
    tree = {E1: {"Budget": 1}, E2: {"Budget": 2}, E3: {"Budget 2": 3}}
    assert format_tree(tree) == {"Budget": 1, "Budget 2": 2, "Budget 2 2": 3}


def test_lists_and_scalars_emitted_as_is():
    tree = {E1: {"list": [{"x": 1}, {"x": 1}], "n": 3}}
    assert format_tree(tree) == {"New Object": {"list": [{"x": 1}, {"x": 1}], "n": 3}}


def test_source_definitions_are_not_renamed_inside():
    source = {
        "apiUrl": "https://api.example.com/x",
        "JSONPath": "",
        "dataReturn": {E2: {"k": 1}},
    }
    assert format_tree({E1: {"remote": source}}) == {"remote": source}


def test_input_is_not_mutated():
    tree = {E1: {"Budget": {"value": 1}}, E2: {"Budget": {"value": 2}}}
    snapshot = json.dumps(tree)
    out = format_tree(tree)
    out["Budget"]["value"] = 99
    assert json.dumps(tree) == snapshot


def test_no_duplicate_keys_at_any_depth():
    inner = {E2: {"n": 1}, E3: {"n": 2}, E4: {"n": 3}}
    tree = {E1: {"root": {"a": dict(inner), "b": {"c": dict(inner)}}}}

    def check(node):
        if isinstance(node, dict):
            assert len(node) == len(set(node))
            for value in node.values():
                check(value)

    out = format_tree(tree)
    check(out)
    assert list(out["root"]["a"]) == ["n", "n 2", "n 3"]
    assert list(out["root"]["b"]["c"]) == ["n", "n 2", "n 3"]


def test_top_level_keys_are_entries_whatever_their_shape():
    tree = {"e1": {"Budget": {"value": 50000}}, "e2": {"Budget": {"value": 9000}}}
    assert format_tree(tree) == {"Budget": {"value": 50000}, "Budget 2": {"value": 9000}}


def test_nested_keys_not_shaped_like_entry_ids_are_kept():
    tree = {"e1": {"hashes": {"e2": {"sha": 1}, "e3": {"sha": 1}}}}
    assert format_tree(tree) == {"hashes": {"e2": {"sha": 1}, "e3": {"sha": 1}}}
