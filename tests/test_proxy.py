"""Tests for proxy creation, capability queries and the end to end scenarios."""

from __future__ import annotations

from typing import List

import numpy
import pytest

from collection_proxy import (
    CollectionProxy,
    InvalidArgumentError,
    UnsupportedOperationError,
    as_proxy,
    try_create,
)
from conftest import SAMPLE_FACTORIES, IntList, sample_dict, sample_values


class TestCreation:
    def test_none_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            try_create(None)
        with pytest.raises(InvalidArgumentError):
            as_proxy(None)

    def test_unclassifiable_values(self):
        assert try_create(42) is None
        with pytest.raises(InvalidArgumentError):
            as_proxy(42)

    def test_existing_proxy_is_returned_unchanged(self):
        proxy = as_proxy([1])
        assert try_create(proxy) is proxy

    def test_proxy_does_not_copy_its_source(self):
        source = [1, 2]
        proxy = as_proxy(source)
        assert proxy.source is source
        source.append(3)
        assert proxy.count == 3

    def test_hint(self):
        proxy = as_proxy([], List[int])
        proxy.add("5")
        assert proxy.source == [5]

    def test_direct_construction(self):
        proxy = CollectionProxy({"a": 1})
        assert proxy["a"] == 1
        with pytest.raises(InvalidArgumentError):
            CollectionProxy(3)

    def test_repr(self):
        assert repr(as_proxy([1])) == "CollectionProxy(UNTYPED_INDEXED, list)"


class TestCapabilities:
    def test_count_matches_len(self, sample_name, sample):
        proxy = as_proxy(sample)
        expected = 12 if sample_name == "fixed_array" else 8
        assert proxy.count == expected
        assert len(proxy) == expected

    def test_is_associative(self):
        assert as_proxy(sample_dict()).is_associative
        assert not as_proxy(sample_values()).is_associative

    def test_is_fixed_array(self):
        assert as_proxy(numpy.arange(3)).is_fixed_array
        assert not as_proxy((1, 2)).is_fixed_array
        assert not as_proxy([1, 2]).is_fixed_array

    def test_types(self):
        proxy = as_proxy(IntList())
        assert proxy.value_type is int
        assert proxy.key_type is None

    def test_is_synchronized_prefers_the_instance_attribute(self):
        class Tracked(list):
            pass

        source = Tracked()
        assert not as_proxy(source).is_synchronized
        source.is_synchronized = True
        assert as_proxy(source).is_synchronized

        class Locked(list):
            is_synchronized = True

        unlocked = Locked()
        unlocked.is_synchronized = False
        proxy = as_proxy(unlocked)
        assert proxy.descriptor.is_synchronized
        assert not proxy.is_synchronized

    def test_clear_fails_on_read_only_and_fixed_proxies(self, sample):
        proxy = as_proxy(sample)
        if not (proxy.is_read_only or proxy.is_fixed_capacity):
            pytest.skip("resizable collection")
        count = proxy.count
        with pytest.raises(UnsupportedOperationError):
            proxy.clear()
        assert proxy.count == count

    def test_to_list_round_trip_keeps_count(self, sample):
        proxy = as_proxy(sample)
        assert as_proxy(proxy.to_list()).count == proxy.count


class TestScenarios:
    def test_remove_key_from_associative(self):
        proxy = as_proxy(sample_dict())
        assert proxy.remove("item 6")
        assert proxy.count == 7
        assert not proxy.contains_key("item 6")

    def test_set_character_in_fixed_array(self):
        proxy = as_proxy(SAMPLE_FACTORIES["fixed_array"]())
        proxy[0] = "A"
        assert proxy[0] == "A"
        assert "".join(proxy.to_list(str)) == "Aello World!"

    def test_sequence_equals_detects_a_difference(self):
        assert not as_proxy([1, 2, 3, 4]).sequence_equals(as_proxy([1, 2, 3, 5]))

    def test_try_copy_to(self):
        source = as_proxy({0: "Zero", 1: "One", 2: "Two"})
        target = {3: "Three"}
        assert source.try_copy_to(as_proxy(target))
        assert target == {3: "Three", 0: "Zero", 1: "One", 2: "Two"}
        assert not source.try_copy_to(None)
