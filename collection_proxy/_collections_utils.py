"""Collections utilities shared by the collection proxy modules.

This module holds the small building blocks the proxy is made of: the MISSING
sentinel, the explicit indexer key variants, path helpers used by the nested
traversal functions, and the read-only views returned by ``keys()`` and
``values()``.

Main Components:
    - MISSING: Sentinel value for distinguishing missing values from None
    - Position / Name: Explicit indexer keys (integer position or named key)
    - as_key(): Normalizes raw indexer arguments into a key variant
    - View: Base class for read-only views over a proxy's entries

Typical Usage:
    >>> as_key(3)
    Position(index=3)
    >>> as_key("item 1")
    Name(text='item 1')
    >>> Name("7").to_position()
    7

Notes:
    - Booleans are never treated as positions even though bool subclasses int
    - Keys that are neither int nor str are returned unchanged so that mappings
      with arbitrary hashable keys (tuples, enums...) can still be addressed
"""

from collections.abc import Collection
from dataclasses import dataclass
from itertools import islice
from numbers import Integral
from typing import Any, Union, TypeVar, Tuple, Iterator, TypeAlias

import numpy

from ._errors import InvalidArgumentError

T = TypeVar('T')  # Generic type for view elements

class _MISSING:
    """Sentinel class representing a missing value.

    Used instead of None when None is a valid value. This helps distinguish
    between "no value passed" and "value explicitly set to None".
    """
    def __str__(self)->str:
        return "MISSING"

    def __repr__(self)->str:
        return "MISSING"

    def __bool__(self)->bool:
        return False

# Sentinel instance
MISSING=_MISSING()

# Returned by index_of when nothing matches
NOT_FOUND = -1

#region: indexer keys

@dataclass(frozen=True)
class Position:
    """An integer position in the iteration order of a collection."""
    index: int

    def to_position(self) -> int:
        return self.index

@dataclass(frozen=True)
class Name:
    """
    A named key.

    Associative shapes look it up directly against their stored keys,
    every other shape parses it as an integer position.
    """
    text: str

    def to_position(self) -> int:
        """Parse the name as an integer position.

        Raises:
            InvalidArgumentError: If the text is not an integer literal
        """
        try:
            return int(self.text.strip())
        except ValueError:
            raise InvalidArgumentError(f"Key {self.text!r} cannot be used as a position")

Key: TypeAlias = Union[Position, Name]

def as_key(obj: Any) -> Any:
    """Convert a raw indexer argument into a key variant.

    Args:
        obj: An int, a str, an existing Position/Name, or any other hashable

    Returns:
        Position for integers, Name for strings, the object itself otherwise
    """
    if isinstance(obj, (Position, Name)):
        return obj
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, Integral):
        return Position(int(obj))
    if isinstance(obj, str):
        return Name(obj)
    return obj

def raw_key(key: Any) -> Any:
    """Inverse of as_key: unwrap a key variant into the plain value it carries."""
    if isinstance(key, Position):
        return key.index
    if isinstance(key, Name):
        return key.text
    return key

#endregion

def values_equal(a: Any, b: Any) -> bool:
    """
    Equality that never raises, arrays compare as a whole.
    """
    if a is b:
        return True
    try:
        return bool(a == b)
    except (ValueError, TypeError):
        pass
    # ambiguous truth value of element-wise comparisons
    try:
        return bool(numpy.array_equal(a, b))
    except (ValueError, TypeError):
        return False

#region: paths

def join_path(path_tuple:Tuple[Any,...])-> str:
    """
    joins a path tuple into a path str : ('a',0,'b') -> "a.0.b"
    """
    return '.'.join(str(k) for k in path_tuple)

def split_path(path_str:str)-> Tuple[Any,...]:
    """
    splits a path str into a path tuple : "a.0.b" -> ('a',0,'b')
    """
    def format(key:str)-> Any:
        try:
            return int(key)
        except ValueError:
            return key
    return tuple(format(k) for k in path_str.split('.'))

#endregion

#region: views

class View(Collection[T]):

    """Base View class for read-only views over the entries of a collection proxy.

    Subclasses must implement _get_element(key, value) to pick what the view exposes.

    Args:
        proxy: The CollectionProxy the view reads from

    Examples:
        >>> class Keys(View):
        ...     def _get_element(self, key, value):
        ...         return key
    """

    def __init__(self, proxy) -> None:
        self._proxy = proxy
        self._nmax: int = 10 # max number of elements to show in repr

    @property
    def proxy(self):
        return self._proxy

    def _get_element(self, key: Any, value: Any) -> T:
        """Takes an entry and returns the corresponding view element"""
        raise NotImplementedError()

    def __iter__(self) -> Iterator[T]:
        """Return an iterator over view elements"""
        return iter(self._get_element(key, value) for key, value in self._proxy.items())

    def __len__(self) -> int:
        """Return the number of elements in the view."""
        return self._proxy.count

    def __repr__(self) -> str:
        """String representation of the view"""
        content=', '.join(repr(element) for element in islice(self, self._nmax))
        if len(self)>self._nmax:
            content+=", ..."
        return f"{self.__class__.__name__}({content})"

    def __contains__(self, item:Any) -> bool:
        """Check if an element is in the view."""
        return any(values_equal(item, element) for element in self)

class KeysView(View[Any]):
    """Keys of an associative proxy, positions of any other proxy."""

    def _get_element(self, key: Any, value: Any) -> Any:
        return key

class ValuesView(View[Any]):
    """Values of an associative proxy, elements of any other proxy."""

    def _get_element(self, key: Any, value: Any) -> Any:
        return value

#endregion
