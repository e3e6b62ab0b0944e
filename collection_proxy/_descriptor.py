"""
Type descriptors.

A TypeDescriptor records everything the proxy needs to know about a container
type: its shape, the element/key/value types and its capability flags. Building
one requires walking the class hierarchy, so descriptors are cached by runtime
type key in a shared DescriptorCache.

Element types are resolved in this order:

    explicit hint -> __orig_class__ -> parameterized bases in the MRO -> intrinsic types -> Any
"""
import array
import ctypes
import logging
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Tuple, TypeVar, get_args, get_origin

import numpy

from ._shapes import CollectionShape

logger = logging.getLogger(__name__)

#region: TypeDescriptor

@dataclass(frozen=True)
class TypeDescriptor:
    """Immutable description of a container type.

    Attributes:
        source_type: The concrete Python type of the container
        shape: The classified CollectionShape
        element_type: Item type, Tuple[K, V] for associative shapes
        key_type: K for associative shapes, None otherwise
        value_type: V for associative shapes, the element type otherwise
        is_fixed_capacity: The container cannot grow or shrink
        is_read_only: The container is an immutable view
        is_synchronized: The container class declares itself synchronized. This is
            a per type default: CollectionProxy.is_synchronized lets a boolean
            is_synchronized attribute on the instance win over it
        default_value: Default of value_type (zero for numbers and bool, None otherwise)
    """
    source_type: type
    shape: CollectionShape
    element_type: Any
    key_type: Any
    value_type: Any
    is_fixed_capacity: bool
    is_read_only: bool
    is_synchronized: bool = False
    default_value: Any = None

def default_value_for(hint: Any) -> Any:
    """Zero for numeric and bool types (numpy scalars included), None otherwise."""
    if not isinstance(hint, type):
        return None
    if issubclass(hint, (bool, numpy.bool_)):
        return hint(False)
    if issubclass(hint, (numbers.Number, numpy.number)):
        return hint(0)
    return None

#endregion

#region: element type resolution

# array.array typecodes and memoryview/struct formats
_FORMAT_TYPES = {
    'b': int, 'B': int, 'h': int, 'H': int, 'i': int, 'I': int,
    'l': int, 'L': int, 'q': int, 'Q': int, 'n': int, 'N': int,
    'f': float, 'd': float, 'e': float,
    'u': str, 'w': str,
    '?': bool, 'c': bytes,
}

# ctypes simple type codes
_CTYPES_TYPES = {
    'c': bytes, 'u': str, 'z': bytes, 'Z': str,
    '?': bool, 'f': float, 'd': float, 'g': float,
    'b': int, 'B': int, 'h': int, 'H': int, 'i': int, 'I': int,
    'l': int, 'L': int, 'q': int, 'Q': int,
}

def _substitute(args: Tuple[Any, ...], substitutions: Dict[Any, Any]) -> Tuple[Any, ...]:
    return tuple(substitutions.get(arg, arg) if isinstance(arg, TypeVar) else arg for arg in args)

def _is_resolved(args: Tuple[Any, ...]) -> bool:
    return bool(args) and not any(isinstance(arg, TypeVar) for arg in args)

def _generic_args(cls: type, target_abc: type, substitutions: Dict[Any, Any]) -> Optional[Tuple[Any, ...]]:
    """
    Look for a parameterized base of cls whose origin is a subclass of target_abc
    and return its arguments once TypeVars have been substituted.
    """
    for klass in getattr(cls, '__mro__', ()):
        for base in getattr(klass, '__orig_bases__', ()):
            origin = get_origin(base)
            if not isinstance(origin, type) or not issubclass(origin, target_abc):
                continue
            args = _substitute(get_args(base), substitutions)
            if _is_resolved(args):
                return args
    return None

def _hint_args(hint: Any, target_abc: type) -> Optional[Tuple[Any, ...]]:
    origin = get_origin(hint)
    if not isinstance(origin, type):
        return None
    args = get_args(hint)
    if issubclass(origin, target_abc) and _is_resolved(args):
        # dict[str, int], Iterable[int]... are usable as they are
        if origin.__module__ in ('builtins', 'collections.abc', 'collections', 'typing'):
            return args
    # user generics: Bag[int] -> map Bag's parameters, then look at its bases
    parameters = getattr(origin, '__parameters__', ())
    substitutions = dict(zip(parameters, args))
    if issubclass(origin, target_abc) and len(args) == len(parameters) == (2 if target_abc is Mapping else 1):
        if not _generic_args(origin, target_abc, {}):
            return _substitute(parameters, substitutions)
    return _generic_args(origin, target_abc, substitutions)

def _intrinsic_args(value: Any) -> Optional[Tuple[Any, ...]]:
    if isinstance(value, str):
        return (str,)
    if isinstance(value, (bytes, bytearray)):
        return (int,)
    if isinstance(value, array.array):
        element = _FORMAT_TYPES.get(value.typecode)
        return (element,) if element else None
    if isinstance(value, numpy.ndarray):
        if value.dtype == object or value.ndim != 1:
            return None
        return (value.dtype.type,)
    if isinstance(value, memoryview):
        element = _FORMAT_TYPES.get(value.format.lstrip('@=<>!'))
        return (element,) if element else None
    if isinstance(value, ctypes.Array):
        element = _CTYPES_TYPES.get(getattr(value._type_, '_type_', None))
        return (element,) if element else None
    return None

def resolve_type_args(value: Any, associative: bool, hint: Any = None) -> Optional[Tuple[Any, ...]]:
    """
    Resolve the generic arguments of a container: (K, V) for associative
    containers, (T,) otherwise. Returns None when the container is untyped.
    """
    target_abc = Mapping if associative else Iterable
    expected = 2 if associative else 1

    candidates = []
    if hint is not None:
        candidates.append(lambda: _hint_args(hint, target_abc))
    orig_class = getattr(value, '__orig_class__', None)
    if orig_class is not None:
        candidates.append(lambda: _hint_args(orig_class, target_abc))
    candidates.append(lambda: _generic_args(type(value), target_abc, {}))
    if not associative:
        candidates.append(lambda: _intrinsic_args(value))

    for candidate in candidates:
        args = candidate()
        if args is None or len(args) != expected:
            continue
        if all(arg is Any for arg in args):
            continue
        return args
    return None

#endregion

#region: DescriptorCache

def type_key(value: Any, hint: Any = None) -> Hashable:
    """
    Runtime type key of a value: the hint if given, else __orig_class__, else
    type(value), extended with the per-instance type marker of intrinsically
    typed containers.
    """
    if hint is not None:
        base = ('hint', hint, type(value))
    else:
        orig_class = getattr(value, '__orig_class__', None)
        base = ('type', orig_class if orig_class is not None else type(value))
    if isinstance(value, array.array):
        return base + (value.typecode,)
    if isinstance(value, numpy.ndarray):
        return base + (value.dtype.str, value.ndim, bool(value.flags.writeable))
    if isinstance(value, memoryview):
        return base + (value.format, value.ndim, value.readonly)
    return base

class DescriptorCache:
    """
    Descriptors keyed by runtime type key.

    Examples:
        >>> cache = DescriptorCache()
        >>> descriptor = cache.get(key, lambda: build(value))
    """

    def __init__(self):
        self._descriptors: Dict[Hashable, Optional[TypeDescriptor]] = {}

    def get(self, key: Hashable, factory: Callable[[], Optional[TypeDescriptor]]) -> Optional[TypeDescriptor]:
        """Return the cached descriptor for key, building it with factory on a miss."""
        try:
            return self._descriptors[key]
        except KeyError:
            pass
        except TypeError:
            # unhashable hint
            logger.debug("Unhashable type key %r, descriptor not cached", key)
            return factory()
        descriptor = factory()
        logger.debug("Descriptor cache miss for %r -> %r", key, descriptor.shape if descriptor else None)
        self._descriptors[key] = descriptor
        return descriptor

    def clear(self):
        self._descriptors.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

_global_descriptor_cache = None

def get_descriptor_cache() -> DescriptorCache:
    """
    Lazily created shared DescriptorCache.
    """
    global _global_descriptor_cache
    if _global_descriptor_cache is None:
        _global_descriptor_cache = DescriptorCache()
    return _global_descriptor_cache

def reset_descriptor_cache():
    """
    Drop the shared descriptor cache.
    """
    global _global_descriptor_cache
    _global_descriptor_cache = None

#endregion
