"""Shared sample containers for the collection proxy tests."""

from __future__ import annotations

import types
from typing import Dict, Iterable, Iterator, List, Set

import numpy
import pytest

from collection_proxy import reset_default_config, reset_descriptor_cache
from collection_proxy._config import ENV_VARIABLES


class Registry(Dict[str, int]):
    """Typed associative container."""


class IntList(List[int]):
    """Typed growable sequence."""


class IntSet(Set[int]):
    """Typed sized collection."""


class IntSequence(Iterable[int]):
    """Typed re-iterable forward-only sequence."""

    def __init__(self, values):
        self.values = list(values)

    def __iter__(self) -> Iterator[int]:
        return iter(self.values)


def sample_dict() -> dict:
    return {f"item {i}": i for i in range(1, 9)}


def sample_values() -> list:
    return list(range(1, 9))


SAMPLE_FACTORIES = {
    "read_only_dict": lambda: types.MappingProxyType(sample_dict()),
    "typed_dict": lambda: Registry(sample_dict()),
    "dict": sample_dict,
    "read_only_list": lambda: tuple(sample_values()),
    "typed_list": lambda: IntList(sample_values()),
    "list": sample_values,
    "read_only_set": lambda: frozenset(sample_values()),
    "typed_set": lambda: IntSet(sample_values()),
    "set": lambda: set(sample_values()),
    "typed_forward_only": lambda: IntSequence(sample_values()),
    "forward_only": lambda: (value for value in sample_values()),
    "fixed_array": lambda: numpy.array(list("Hello World!")),
}


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Every test starts without environment overrides and with empty caches."""
    for variable in ENV_VARIABLES:
        monkeypatch.delenv(variable, raising=False)
    reset_default_config()
    reset_descriptor_cache()
    yield
    reset_default_config()
    reset_descriptor_cache()


@pytest.fixture(params=sorted(SAMPLE_FACTORIES))
def sample_name(request) -> str:
    return request.param


@pytest.fixture
def sample(sample_name):
    return SAMPLE_FACTORIES[sample_name]()
