"""Tests for index_of, membership queries and key/value views."""

from __future__ import annotations

from collection_proxy import NOT_FOUND, KeysView, ValuesView, as_proxy
from conftest import IntList, IntSequence, Registry, sample_dict, sample_values


class TestIndexOf:
    def test_associative_matches_keys(self):
        proxy = as_proxy(sample_dict())
        assert proxy.index_of("item 3") == 2
        assert proxy.index_of("nope") == NOT_FOUND
        assert proxy.index_of(3) == NOT_FOUND

    def test_sequence(self):
        proxy = as_proxy(sample_values())
        assert proxy.index_of(4) == 3
        assert proxy.index_of(42) == -1

    def test_value_is_coerced_when_possible(self):
        proxy = as_proxy(IntList([1, 2, 3]))
        assert proxy.index_of("3") == 2
        assert proxy.index_of("x") == NOT_FOUND

    def test_forward_only(self):
        assert as_proxy(IntSequence([5, 6])).index_of(6) == 1


class TestMembership:
    def test_contains_key_on_associative(self):
        proxy = as_proxy(Registry(sample_dict()))
        assert proxy.contains_key("item 8")
        assert not proxy.contains_key("item 9")

    def test_contains_key_on_positions(self):
        proxy = as_proxy(sample_values())
        assert proxy.contains_key(0)
        assert proxy.contains_key("3")
        assert not proxy.contains_key(8)
        assert not proxy.contains_key(-1)
        assert not proxy.contains_key("x")

    def test_contains_value(self):
        proxy = as_proxy(sample_dict())
        assert proxy.contains_value(8)
        assert 8 in proxy
        assert "item 1" not in proxy

    def test_contains(self):
        assert as_proxy(sample_dict()).contains("item 1")
        assert not as_proxy(sample_dict()).contains(1)
        assert as_proxy(sample_values()).contains(1)

    def test_sized_membership(self):
        proxy = as_proxy({1, 2})
        assert proxy.contains_value(2)
        assert not proxy.contains_value([1])


class TestViews:
    def test_associative_keys_and_values(self):
        source = sample_dict()
        proxy = as_proxy(source)
        keys = proxy.keys()
        assert isinstance(keys, KeysView)
        assert list(keys) == list(source)
        assert list(proxy.values()) == list(source.values())
        assert "item 2" in keys
        assert len(keys) == 8

    def test_positional_keys(self):
        proxy = as_proxy(["a", "b"])
        assert list(proxy.keys()) == [0, 1]
        assert isinstance(proxy.values(), ValuesView)
        assert list(proxy.values()) == ["a", "b"]

    def test_views_follow_the_source(self):
        source = ["a"]
        values = as_proxy(source).values()
        source.append("b")
        assert len(values) == 2

    def test_repr_is_truncated(self):
        text = repr(as_proxy(list(range(20))).values())
        assert text.startswith("ValuesView(0, 1, 2")
        assert text.endswith(", ...)")
