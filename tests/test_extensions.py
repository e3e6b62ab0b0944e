"""Tests for the collection helpers."""

from __future__ import annotations

import pytest

from collection_proxy import (
    InvalidArgumentError,
    OutOfRangeError,
    UnsupportedOperationError,
    add_range_when,
    add_when,
    most_common_value,
    when,
)


class TestMostCommonValue:
    def test_most_frequent(self):
        assert most_common_value([3, 1, 3, 2, 1, 3]) == 3

    def test_first_encountered_wins_ties(self):
        assert most_common_value([2, 1, 1, 2]) == 2

    def test_any_collection(self):
        assert most_common_value({"a": 1, "b": 2, "c": 2}) == 2
        assert most_common_value(value for value in "abb") == "b"

    def test_unhashable_values(self):
        assert most_common_value([[1], [2], [2]]) == [2]

    def test_errors(self):
        with pytest.raises(InvalidArgumentError):
            most_common_value(None)
        with pytest.raises(OutOfRangeError):
            most_common_value([])


class TestWhen:
    def test_condition_true(self):
        assert when([1, 2], lambda: True, lambda values: [v * 2 for v in values]) == [2, 4]

    def test_condition_false(self):
        values = [1, 2]
        assert when(values, lambda: False, lambda values: []) is values

    def test_none_arguments(self):
        with pytest.raises(InvalidArgumentError):
            when(None, lambda: True, list)
        with pytest.raises(InvalidArgumentError):
            when([], None, list)
        with pytest.raises(InvalidArgumentError):
            when([], lambda: True, None)


class TestAddWhen:
    def test_bool_condition(self):
        values = [1]
        assert add_when(values, True, 2) is values
        add_when(values, False, 3)
        assert values == [1, 2]

    def test_callable_condition_uses_a_factory(self):
        values = set()
        add_when(values, lambda: True, lambda: 5)
        add_when(values, lambda: False, lambda: 6)
        assert values == {5}

    def test_errors(self):
        with pytest.raises(InvalidArgumentError):
            add_when(None, True, 1)
        with pytest.raises(InvalidArgumentError):
            add_when([], lambda: True, None)
        with pytest.raises(UnsupportedOperationError):
            add_when((1,), True, 2)


class TestAddRangeWhen:
    def test_list(self):
        values = [1]
        assert add_range_when(values, lambda: True, lambda: [2, 3]) is values
        assert values == [1, 2, 3]

    def test_condition_false(self):
        values = [1]
        add_range_when(values, lambda: False, lambda: [2])
        assert values == [1]

    def test_set(self):
        values = {1}
        add_range_when(values, lambda: True, lambda: [2, 3])
        assert values == {1, 2, 3}

    def test_none_arguments(self):
        with pytest.raises(InvalidArgumentError):
            add_range_when([], None, lambda: [])
        with pytest.raises(InvalidArgumentError):
            add_range_when([], lambda: True, None)
