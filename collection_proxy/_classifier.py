"""
Shape classifier.

Maps an arbitrary value to one of the eight CollectionShape members by probing
its capabilities. Classification only looks at the value's type and a few
instance flags (numpy writeability, memoryview readonly...); it never iterates
the value.
"""
import array
import ctypes
import logging
from collections.abc import Collection, Iterable, Mapping, MutableMapping, MutableSequence, MutableSet, Sequence
from typing import Any, Optional, Tuple

import numpy

from ._descriptor import TypeDescriptor, default_value_for, get_descriptor_cache, resolve_type_args, type_key
from ._shapes import CollectionShape, ShapeFamily

logger = logging.getLogger(__name__)

def _probe(value: Any) -> Optional[Tuple[ShapeFamily, bool, bool]]:
    """
    Capability probe.

    Returns:
        (family, is_fixed_capacity, is_read_only), or None when the value has no shape
    """
    # fixed arrays first, they are indexed whatever else they look like
    if isinstance(value, numpy.ndarray):
        if value.ndim == 0:
            return None
        return ShapeFamily.INDEXED, True, not value.flags.writeable
    if isinstance(value, memoryview):
        if value.ndim != 1:
            return None
        return ShapeFamily.INDEXED, True, value.readonly
    if isinstance(value, ctypes.Array):
        return ShapeFamily.INDEXED, True, False

    if isinstance(value, array.array):
        return ShapeFamily.INDEXED, False, False

    if isinstance(value, Mapping):
        read_only = not isinstance(value, MutableMapping)
        return ShapeFamily.ASSOCIATIVE, read_only, read_only

    if isinstance(value, Sequence):
        if isinstance(value, MutableSequence):
            return ShapeFamily.INDEXED, False, False
        if hasattr(type(value), '__setitem__') and not hasattr(value, 'insert'):
            return ShapeFamily.INDEXED, True, False
        return ShapeFamily.INDEXED, True, True

    if isinstance(value, Collection):
        mutable = isinstance(value, MutableSet) or (
            hasattr(value, 'add') and (hasattr(value, 'discard') or hasattr(value, 'remove'))
        )
        return ShapeFamily.SIZED, not mutable, not mutable

    if isinstance(value, Iterable):
        return ShapeFamily.FORWARD_ONLY, True, False

    return None

def _declared_synchronized(value: Any) -> bool:
    for name in ('is_synchronized', '_is_synchronized'):
        flag = getattr(type(value), name, None)
        if isinstance(flag, bool):
            return flag
    return False

def _build_descriptor(value: Any, hint: Any) -> Optional[TypeDescriptor]:
    probe = _probe(value)
    if probe is None:
        return None
    family, is_fixed_capacity, is_read_only = probe
    associative = family is ShapeFamily.ASSOCIATIVE
    args = resolve_type_args(value, associative, hint)
    shape = CollectionShape.of(family, args is not None)

    if associative:
        key_type, value_type = args if args else (Any, Any)
        element_type = Tuple[key_type, value_type]
    else:
        key_type = None
        value_type = element_type = args[0] if args else Any

    return TypeDescriptor(
        source_type=type(value),
        shape=shape,
        element_type=element_type,
        key_type=key_type,
        value_type=value_type,
        is_fixed_capacity=is_fixed_capacity,
        is_read_only=is_read_only,
        is_synchronized=_declared_synchronized(value),
        default_value=default_value_for(value_type),
    )

def describe(value: Any, hint: Any = None, use_cache: bool = True) -> Optional[TypeDescriptor]:
    """
    Get the TypeDescriptor of a value.

    Args:
        value: Any value
        hint: Optional type hint giving the element types (Dict[str, int], List[float]...)
        use_cache: Look the descriptor up in the shared DescriptorCache

    Returns:
        The descriptor, or None when the value has no collection shape
    """
    if value is None:
        return None
    if not use_cache:
        return _build_descriptor(value, hint)
    return get_descriptor_cache().get(type_key(value, hint), lambda: _build_descriptor(value, hint))

def classify(value: Any, hint: Any = None) -> Optional[CollectionShape]:
    """
    Classify a value into its CollectionShape.

    Examples:
        >>> classify({"a": 1})
        CollectionShape.UNTYPED_ASSOCIATIVE
        >>> classify("text")
        CollectionShape.TYPED_INDEXED
        >>> classify(42) is None
        True
    """
    descriptor = describe(value, hint)
    shape = descriptor.shape if descriptor is not None else None
    logger.debug("Classified %s as %r", type(value).__name__, shape)
    return shape
