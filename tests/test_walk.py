"""Tests for nested traversal."""

from __future__ import annotations

import numpy

from collection_proxy import deep_equals, join_path, split_path, walk, walked


class TestWalk:
    def test_nested_mappings_and_sequences(self):
        data = {"a": [1, {"b": 2}], "c": 3}
        assert walked(data) == {"a.0": 1, "a.1.b": 2, "c": 3}

    def test_text_is_a_leaf(self):
        assert walked({"a": "hello", "b": b"raw"}) == {"a": "hello", "b": b"raw"}

    def test_any_shape(self):
        data = {"t": (1, 2), "s": {5}, "n": numpy.array([7, 8])}
        assert walked(data) == {"t.0": 1, "t.1": 2, "s.0": 5, "n.0": 7, "n.1": 8}

    def test_callback_and_filter(self):
        data = {"a": 1, "b": 2}
        assert list(walk(data, callback=str)) == [("a", "1"), ("b", "2")]
        assert walked(data, filter=lambda path, value: value > 1) == {"b": 2}

    def test_excluded_types_are_leaves(self):
        assert walked({"t": (1, 2)}, excluded=(tuple,)) == {"t": (1, 2)}

    def test_strings_can_be_walked(self):
        assert walked(["ab"], excluded=()) == {"0.0": "a", "0.1": "b"}

    def test_empty_containers_have_no_leaves(self):
        assert walked({"a": []}) == {}


class TestDeepEquals:
    def test_equal_structures_of_different_types(self):
        assert deep_equals([1, [2, 3]], (1, (2, 3)))

    def test_different(self):
        assert not deep_equals({"a": 1}, {"a": 2})
        assert not deep_equals({"a": 1}, {"b": 1})

    def test_numpy_leaves(self):
        assert deep_equals({"x": [numpy.float64(1.5)]}, {"x": [1.5]})


class TestPaths:
    def test_join_and_split(self):
        assert join_path(("a", 0, "b")) == "a.0.b"
        assert split_path("a.0.b") == ("a", 0, "b")
