"""Tests for JSONPath-style extraction."""
import pytest

from core.services.path_extractor import NO_MATCH, PathSyntaxError, extract


@pytest.fixture
def doc():
    return {
        "store": {
            "book": [
                {"client": "A", "price": 10},
                {"client": "B", "price": 20},
                {"client": "C"},
            ],
            "bicycle": {"color": "red", "price": 99},
            "dotted.key": "yes",
        }
    }


def test_definite_path_returns_single_value():
    assert extract({"store": {"book": [{"client": "A"}]}}, "$.store.book[0].client") == "A"


def test_empty_query_is_identity(doc):
    assert extract(doc, "") is doc
    assert extract(doc, "   ") is doc
    assert extract(doc, None) is doc


def test_root_only_returns_document(doc):
    assert extract(doc, "$") == doc


def test_path_without_root_is_root_relative(doc):
    assert extract(doc, "store.bicycle.color") == "red"


def test_bracket_keys(doc):
    assert extract(doc, "$['store']['dotted.key']") == "yes"
    assert extract(doc, '$.store["bicycle"].price') == 99


def test_negative_index(doc):
    assert extract(doc, "$.store.book[-1]") == {"client": "C"}


def test_wildcard_collects_in_document_order(doc):
    assert extract(doc, "$.store.book[*].client") == ["A", "B", "C"]
    assert extract(doc, "$.store.bicycle.*") == ["red", 99]


def test_wildcard_skips_missing_members(doc):
    assert extract(doc, "$.store.book[*].price") == [10, 20]


def test_recursive_descent(doc):
    assert extract(doc, "$..price") == [10, 20, 99]


def test_wildcard_with_single_match_is_still_a_list():
    assert extract({"items": [{"id": 1}]}, "$.items[*].id") == [1]


def test_zero_matches_is_no_match(doc):
    assert extract(doc, "$.store.magazine") is NO_MATCH
    assert extract(doc, "$.store.book[7]") is NO_MATCH
    assert extract(doc, "$..nothing") is NO_MATCH
    assert extract(doc, "$.store.bicycle.color.shade") is NO_MATCH


def test_no_match_is_falsy_singleton():
    assert not NO_MATCH
    assert repr(NO_MATCH) == "NO_MATCH"


def test_null_value_is_a_match():
    assert extract({"a": None}, "$.a") is None


def test_document_not_mutated(doc):
    before = repr(doc)
    extract(doc, "$..*")
    assert repr(doc) == before


@pytest.mark.parametrize("query", ["$.", "$[", "$[]", "$[abc]", "$.a[0", "$['a]"])
def test_malformed_queries_raise(query):
    with pytest.raises(PathSyntaxError):
        extract({"a": [1]}, query)
