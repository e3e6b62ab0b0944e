"""Tests for for_each, items, iteration and the forward-only buffering policy."""

from __future__ import annotations

from collection_proxy import as_proxy
from conftest import IntSequence, sample_dict


class TestForEach:
    def test_associative_entries(self):
        seen = []
        as_proxy(sample_dict()).for_each(lambda key, value: seen.append((key, value)))
        assert seen == list(sample_dict().items())

    def test_positional_entries(self):
        seen = []
        as_proxy(["a", "b"]).for_each(lambda key, value: seen.append((key, value)))
        assert seen == [(0, "a"), (1, "b")]

    def test_none_visitor_is_ignored(self):
        as_proxy([1, 2]).for_each(None)


class TestIteration:
    def test_iter_yields_values(self):
        assert list(as_proxy({"a": 1, "b": 2})) == [1, 2]
        assert list(as_proxy((3, 4))) == [3, 4]

    def test_items(self):
        assert list(as_proxy({"a": 1}).items()) == [("a", 1)]
        assert list(as_proxy("ab").items()) == [(0, "a"), (1, "b")]


class TestForwardOnly:
    def test_single_pass_source_is_buffered(self):
        proxy = as_proxy(value for value in range(5))
        assert proxy.count == 5
        assert proxy.count == 5
        assert list(proxy) == [0, 1, 2, 3, 4]
        assert proxy[4] == 4

    def test_iterator_source(self):
        proxy = as_proxy(iter([1, 2, 3]))
        assert proxy.to_list() == [1, 2, 3]
        assert proxy.last() == 3

    def test_reiterable_source_is_enumerated_every_time(self):
        source = IntSequence([1, 2])
        proxy = as_proxy(source)
        assert proxy.count == 2
        source.values.append(3)
        assert proxy.count == 3
        assert list(proxy) == [1, 2, 3]
