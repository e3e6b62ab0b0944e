"""Tests for type descriptors and the descriptor cache."""

from __future__ import annotations

import array
from dataclasses import FrozenInstanceError
from typing import Any, Dict, Tuple

import numpy
import pytest

from collection_proxy import (
    CollectionShape,
    DescriptorCache,
    describe,
    get_descriptor_cache,
    reset_descriptor_cache,
)
from collection_proxy._descriptor import type_key
from conftest import IntList, IntSequence, IntSet, Registry, sample_dict


class TestTypeDescriptor:
    def test_typed_associative(self):
        descriptor = describe(Registry(sample_dict()))
        assert descriptor.source_type is Registry
        assert descriptor.shape is CollectionShape.TYPED_ASSOCIATIVE
        assert descriptor.key_type is str
        assert descriptor.value_type is int
        assert descriptor.element_type == Tuple[str, int]
        assert descriptor.default_value == 0

    def test_untyped_associative(self):
        descriptor = describe(sample_dict())
        assert descriptor.key_type is Any
        assert descriptor.value_type is Any
        assert descriptor.default_value is None

    def test_non_associative_has_no_key_type(self):
        descriptor = describe(IntList([1]))
        assert descriptor.key_type is None
        assert descriptor.value_type is int
        assert descriptor.element_type is int

    def test_typed_set_and_forward_only(self):
        assert describe(IntSet()).value_type is int
        assert describe(IntSequence([])).value_type is int

    def test_intrinsic_element_types(self):
        assert describe(array.array("i")).value_type is int
        assert describe(numpy.array([1.5])).value_type is numpy.float64
        assert describe(numpy.array(list("ab"))).value_type is numpy.str_

    def test_default_values(self):
        assert describe(numpy.array([True])).default_value == False  # noqa: E712
        assert describe(numpy.array([1.5])).default_value == 0.0
        assert describe("abc").default_value is None

    def test_synchronized_class_attribute(self):
        class SynchronizedList(list):
            is_synchronized = True

        assert describe(SynchronizedList()).is_synchronized
        assert not describe([]).is_synchronized

    def test_descriptor_is_frozen(self):
        descriptor = describe([])
        with pytest.raises(FrozenInstanceError):
            descriptor.is_read_only = True


class TestDescriptorCache:
    def test_descriptors_are_cached_by_type(self):
        assert describe([1]) is describe([2, 3])
        assert len(get_descriptor_cache()) == 1

    def test_hints_get_their_own_entry(self):
        plain = describe({"a": 1})
        typed = describe({"a": 1}, Dict[str, int])
        assert plain is not typed
        assert typed.shape is CollectionShape.TYPED_ASSOCIATIVE

    def test_numpy_dtype_is_part_of_the_key(self):
        assert describe(numpy.array([1])) is not describe(numpy.array([1.0]))
        assert type_key(numpy.array([1])) != type_key(numpy.array([1.0]))

    def test_reset(self):
        first = describe([1])
        reset_descriptor_cache()
        assert len(get_descriptor_cache()) == 0
        assert describe([1]) is not first

    def test_uncached_describe(self):
        describe([1], use_cache=False)
        assert len(get_descriptor_cache()) == 0

    def test_cache_builds_once(self):
        cache = DescriptorCache()
        calls = []

        def factory():
            calls.append(1)
            return describe([], use_cache=False)

        cache.get("key", factory)
        cache.get("key", factory)
        assert len(calls) == 1
        assert "key" in cache

    def test_none_has_no_descriptor(self):
        assert describe(None) is None
