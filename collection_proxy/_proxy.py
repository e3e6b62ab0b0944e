"""
CollectionProxy - one uniform operation set over any container.

The proxy wraps a container it does not own, classifies it once and delegates the
structural work to the adapter of its shape family. Keys and values written
through the proxy are converted into the container's key/value types first, and
every validation happens before the first write.

Typical Usage:
    >>> proxy = as_proxy({"item 1": 1, "item 2": 2})
    >>> proxy["item 2"]
    2
    >>> proxy.remove("item 1")
    True
    >>> proxy.count
    1
    >>> as_proxy([1, 2, 3]).to_list(str)
    ['1', '2', '3']
"""
import logging
from typing import Any, Callable, Iterator, List, Optional, Tuple

import numpy

from ._adapters import ShapeAdapter, adapter_for
from ._classifier import describe
from ._collections_utils import MISSING, KeysView, ValuesView, values_equal
from ._config import ProxyConfig, default_config
from ._descriptor import TypeDescriptor
from ._errors import InvalidArgumentError, OutOfRangeError, UnsupportedOperationError
from ._shapes import CollectionShape, ShapeFamily
from ._typechecker import CoercionError, coerce

logger = logging.getLogger(__name__)

# element types to_array maps onto a native numpy dtype
_NATIVE_DTYPES = (bool, int, float, complex, str, bytes)

def _native_dtype(element_type: Any) -> Optional[type]:
    if element_type in _NATIVE_DTYPES:
        return element_type
    if isinstance(element_type, type) and issubclass(element_type, numpy.generic) and element_type is not numpy.object_:
        return element_type
    return None

def _convert_strict(value: Any, hint: Any) -> Any:
    try:
        return coerce(value, hint)
    except CoercionError as err:
        raise InvalidArgumentError(f"Cannot convert {value!r} to {hint}") from err

class CollectionProxy:
    """
    Uniform wrapper around a container of any shape.

    Subclasses may set a class level ``_config`` built with ``CollectionProxy.config()``;
    it is merged over the configs of their bases.

    Args:
        source: The container to wrap
        hint: Optional type hint giving the element types (Dict[str, int], List[float]...)
        config: Optional ProxyConfig overriding the class and environment configs
        descriptor: A TypeDescriptor already computed for source

    Raises:
        InvalidArgumentError: If source is None or has no collection shape
    """

    _config: ProxyConfig = ProxyConfig()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        # the left-most base wins, like dict.update applied from the right
        parent_config = None
        for base in reversed(cls.__bases__):
            base_conf = getattr(base, '_config', None)
            if base_conf is None:
                continue
            parent_config = base_conf if parent_config is None else parent_config.merge(base_conf)

        if '_config' in cls.__dict__:
            local_config = cls.__dict__['_config']
            if not isinstance(local_config, ProxyConfig):
                raise TypeError(
                    f"_config must be a ProxyConfig instance created via CollectionProxy.config(), "
                    f"got {type(local_config)}"
                )
            cls._config = parent_config.merge(local_config) if parent_config is not None else local_config
        elif parent_config is not None:
            cls._config = parent_config

    def __init__(self, source: Any, hint: Any = None, config: Optional[ProxyConfig] = None,
                 descriptor: Optional[TypeDescriptor] = None):
        if source is None:
            raise InvalidArgumentError("Cannot wrap None in a collection proxy")
        self._config = self._effective_config(config)
        if descriptor is None:
            descriptor = describe(source, hint, use_cache=self._config.cache_descriptors)
            if descriptor is None:
                raise InvalidArgumentError(f"Values of type {type(source).__name__} are not collections")
        self._source = source
        self._descriptor = descriptor
        self._adapter: ShapeAdapter = adapter_for(source, descriptor, self._try_convert)

    #region: construction

    @classmethod
    def config(cls, **kwargs) -> ProxyConfig:
        """
        Class method to create a ProxyConfig.

        Usage:
            class LenientProxy(CollectionProxy):
                _config = CollectionProxy.config(strict=False)

        Args:
            coerce: Convert written keys/values into the container's types
            strict: Raise InvalidArgumentError when a conversion fails
            cache_descriptors: Use the shared descriptor cache

        Returns:
            ProxyConfig instance
        """
        return ProxyConfig(**kwargs)

    @classmethod
    def _effective_config(cls, config: Optional[ProxyConfig]) -> ProxyConfig:
        return default_config().merge(cls._config).merge(config)

    @classmethod
    def try_create(cls, value: Any, hint: Any = None, config: Optional[ProxyConfig] = None) -> Optional["CollectionProxy"]:
        """
        Wrap value in a proxy.

        Returns:
            The proxy, value itself if it already is a proxy, None when value has no collection shape

        Raises:
            InvalidArgumentError: If value is None
        """
        if value is None:
            raise InvalidArgumentError("Cannot create a collection proxy for None")
        if isinstance(value, CollectionProxy):
            return value
        effective = cls._effective_config(config)
        descriptor = describe(value, hint, use_cache=effective.cache_descriptors)
        if descriptor is None:
            return None
        return cls(value, config=config, descriptor=descriptor)

    @classmethod
    def create(cls, value: Any, hint: Any = None, config: Optional[ProxyConfig] = None) -> "CollectionProxy":
        """
        Like try_create but raising InvalidArgumentError when value has no collection shape.
        """
        proxy = cls.try_create(value, hint, config)
        if proxy is None:
            raise InvalidArgumentError(f"Values of type {type(value).__name__} are not collections")
        return proxy

    #endregion

    #region: conversions of written values

    def _coerce(self, value: Any, hint: Any) -> Any:
        """Convert a value about to be written, honoring the proxy config."""
        if not self._config.coerce:
            return value
        try:
            return coerce(value, hint)
        except CoercionError as err:
            if not self._config.strict:
                return value
            raise InvalidArgumentError(f"Cannot convert {value!r} to {hint}") from err

    def _try_convert(self, value: Any, hint: Any) -> Tuple[bool, Any]:
        try:
            return True, self._coerce(value, hint)
        except InvalidArgumentError:
            return False, value

    #endregion

    #region: capabilities

    @property
    def source(self) -> Any:
        """The wrapped container."""
        return self._source

    @property
    def descriptor(self) -> TypeDescriptor:
        return self._descriptor

    @property
    def shape(self) -> CollectionShape:
        return self._descriptor.shape

    @property
    def key_type(self) -> Any:
        return self._descriptor.key_type

    @property
    def value_type(self) -> Any:
        return self._descriptor.value_type

    @property
    def element_type(self) -> Any:
        return self._descriptor.element_type

    @property
    def is_associative(self) -> bool:
        return self.shape.is_associative

    @property
    def is_read_only(self) -> bool:
        return self._descriptor.is_read_only

    @property
    def is_fixed_capacity(self) -> bool:
        return self._descriptor.is_fixed_capacity

    @property
    def is_fixed_array(self) -> bool:
        """Fixed capacity indexed sequence accepting item assignment (numpy arrays, ctypes arrays...)."""
        return self.shape.is_indexed and self.is_fixed_capacity and not self.is_read_only

    @property
    def is_synchronized(self) -> bool:
        """Instance level is_synchronized flag if set, the class level one recorded by the descriptor otherwise."""
        flag = getattr(self._source, 'is_synchronized', None)
        if isinstance(flag, bool):
            return flag
        return self._descriptor.is_synchronized

    @property
    def count(self) -> int:
        """
        Number of elements. Forward-only sources are enumerated on every call,
        except single pass ones which are buffered on first use.
        """
        return self._adapter.count()

    def __len__(self) -> int:
        return self.count

    def _require_resizable(self, operation: str):
        if self.is_read_only:
            raise UnsupportedOperationError(f"Cannot {operation}: the collection is read-only")
        if self.is_fixed_capacity:
            raise UnsupportedOperationError(f"Cannot {operation}: the collection has a fixed capacity")

    def _require_family(self, operation: str, *families: ShapeFamily):
        if self.shape.family not in families:
            raise UnsupportedOperationError(
                f"{operation} is not supported by {self.shape.family.value} collections"
            )

    #endregion

    #region: indexer

    def __getitem__(self, key: Any) -> Any:
        """
        Read by key (associative shapes) or by position (every other shape).
        Integer positions on associative shapes address the n-th value unless
        the mapping holds that integer key.

        Raises:
            OutOfRangeError: Missing key or invalid position
            InvalidArgumentError: Name that is not an integer on a non associative shape
        """
        return self._adapter.get(key)

    def __setitem__(self, key: Any, value: Any):
        if self.is_read_only:
            raise UnsupportedOperationError("Cannot assign items: the collection is read-only")
        self._require_family("Item assignment", ShapeFamily.ASSOCIATIVE, ShapeFamily.INDEXED)
        self._adapter.set(key, self._coerce(value, self.value_type))

    #endregion

    #region: mutations

    def add(self, value_or_key: Any, value: Any = MISSING) -> int:
        """
        add(value) appends to indexed and sized collections, add(key, value)
        inserts a new entry into an associative collection.

        Returns:
            The new count minus one (the position of the added element for indexed shapes)

        Raises:
            UnsupportedOperationError: Read-only, fixed capacity or incompatible shape
            InvalidArgumentError: Conversion failure or duplicate key
        """
        self._require_resizable("add")
        if value is MISSING:
            self._require_family("add(value)", ShapeFamily.INDEXED, ShapeFamily.SIZED)
            self._adapter.add(self._coerce(value_or_key, self.value_type))
        else:
            self._require_family("add(key, value)", ShapeFamily.ASSOCIATIVE)
            self._adapter.add_entry(value_or_key, self._coerce(value, self.value_type))
        return self.count - 1

    def add_range(self, values: Any):
        """
        Append every value, converted beforehand: nothing is appended if one fails.
        """
        if values is None:
            raise InvalidArgumentError("values cannot be None")
        self._require_resizable("add a range")
        self._require_family("add_range", ShapeFamily.INDEXED)
        converted = [self._coerce(value, self.value_type) for value in values]
        self._adapter.extend(converted)

    def insert(self, position: Any, value: Any):
        self._require_resizable("insert")
        self._require_family("insert", ShapeFamily.INDEXED)
        self._adapter.insert(position, self._coerce(value, self.value_type))

    def remove(self, value: Any) -> bool:
        """
        Remove a key (associative shapes) or the first matching element.

        Returns:
            True if something was removed, False if it was absent
        """
        self._require_resizable("remove")
        self._require_family("remove", ShapeFamily.ASSOCIATIVE, ShapeFamily.INDEXED, ShapeFamily.SIZED)
        hint = self.key_type if self.is_associative else self.value_type
        return self._adapter.remove(self._coerce(value, hint))

    def remove_at(self, position: Any):
        """
        Remove the element at a position (the n-th entry for associative shapes).
        """
        self._require_resizable("remove")
        self._require_family("remove_at", ShapeFamily.ASSOCIATIVE, ShapeFamily.INDEXED)
        self._adapter.remove_at(position)

    def clear(self):
        self._require_resizable("clear")
        self._adapter.clear()

    #endregion

    #region: lookups

    def index_of(self, value: Any) -> int:
        """
        Position of the key matching value (associative shapes) or of the first
        element equal to value. NOT_FOUND (-1) otherwise.
        """
        if self.is_associative:
            return self._adapter.index_of(value)
        _, converted = self._try_convert(value, self.value_type)
        return self._adapter.index_of(converted)

    def contains_key(self, key: Any) -> bool:
        return self._adapter.contains_key(key)

    def contains_value(self, value: Any) -> bool:
        _, converted = self._try_convert(value, self.value_type)
        return self._adapter.contains_value(converted)

    def contains(self, value: Any) -> bool:
        """Key membership for associative shapes, element membership otherwise."""
        if self.is_associative:
            return self.contains_key(value)
        return self.contains_value(value)

    def __contains__(self, value: Any) -> bool:
        return self.contains_value(value)

    def keys(self) -> KeysView:
        """Keys of an associative collection, positions otherwise."""
        return KeysView(self)

    def values(self) -> ValuesView:
        return ValuesView(self)

    #endregion

    #region: iteration

    def items(self) -> Iterator[Tuple[Any, Any]]:
        """(key, value) pairs for associative shapes, (position, element) otherwise."""
        return self._adapter.items()

    def __iter__(self) -> Iterator[Any]:
        return self._adapter.values()

    def for_each(self, visitor: Optional[Callable[[Any, Any], Any]]):
        """
        Call visitor(key, value) on every entry. A None visitor is ignored.
        """
        if visitor is None:
            return
        for key, value in self._adapter.items():
            visitor(key, value)

    #endregion

    #region: conversion and comparison

    def to_list(self, element_type: Any = Any) -> List[Any]:
        """
        New list of the values converted to element_type.

        Raises:
            InvalidArgumentError: If a value cannot be converted
        """
        return [_convert_strict(value, element_type) for value in self._adapter.values()]

    def to_array(self, element_type: Any = Any) -> numpy.ndarray:
        """
        New one-dimensional numpy array of the values converted to element_type.
        Numeric, bool and text element types get a native dtype, anything else object.
        """
        items = self.to_list(element_type)
        dtype = _native_dtype(element_type)
        if dtype is not None:
            return numpy.array(items, dtype=dtype)
        result = numpy.empty(len(items), dtype=object)
        for position, item in enumerate(items):
            result[position] = item
        return result

    def copy_to(self, target: Any, offset: int = 0):
        """
        Write the values into target starting at offset. Values are converted to the
        target's element type before anything is written.

        Raises:
            InvalidArgumentError: None or non indexed target, conversion failure
            UnsupportedOperationError: Read-only target
            OutOfRangeError: Negative offset or not enough room in target
        """
        if target is None:
            raise InvalidArgumentError("target cannot be None")
        target_proxy = CollectionProxy.try_create(target)
        if target_proxy is None or not target_proxy.shape.is_indexed:
            raise InvalidArgumentError(f"Cannot copy into a {type(target).__name__}, an indexed sequence is required")
        if target_proxy.is_read_only:
            raise UnsupportedOperationError("Cannot copy into a read-only sequence")

        count = self.count
        size = target_proxy.count
        if offset < 0 or offset + count > size:
            raise OutOfRangeError(f"Cannot copy {count} elements at offset {offset} into a sequence of {size} elements")

        converted = [_convert_strict(value, target_proxy.value_type) for value in self._adapter.values()]
        target_proxy._adapter.assign(offset, converted)

    def _reject_copy(self, target: Any, reason: str) -> bool:
        logger.debug("try_copy_to into %s rejected: %s", type(target).__name__, reason)
        return False

    def try_copy_to(self, other: Any) -> bool:
        """
        Copy the entries of this proxy into another collection: merged into
        associative targets, assigned to the positions of fixed arrays,
        appended to growable and sized targets.

        Returns:
            True on success, False when the target cannot receive the entries.
            Nothing is written in that case.
        """
        if other is None:
            return False
        target = CollectionProxy.try_create(other)
        if target is None:
            return self._reject_copy(other, "not a collection")
        if target.is_read_only:
            return self._reject_copy(other, "read-only target")
        if target.shape.is_forward_only:
            return self._reject_copy(other, "forward-only target")

        entries = list(self._adapter.items())

        if target.is_associative:
            pairs = []
            for key, value in entries:
                key_ok, new_key = target._try_convert(key, target.key_type)
                value_ok, new_value = target._try_convert(value, target.value_type)
                if not (key_ok and value_ok):
                    return self._reject_copy(other, f"entry {key!r} cannot be converted")
                if target.contains_key(new_key):
                    return self._reject_copy(other, f"key {new_key!r} already exists")
                pairs.append((new_key, new_value))
            try:
                if len({key for key, _ in pairs}) != len(pairs):
                    return self._reject_copy(other, "keys collide once converted")
            except TypeError:
                return self._reject_copy(other, "unhashable key")
            try:
                target._adapter.add_entries(pairs)
            except InvalidArgumentError as err:
                return self._reject_copy(other, str(err))
            return True

        converted = []
        for _, value in entries:
            value_ok, new_value = target._try_convert(value, target.value_type)
            if not value_ok:
                return self._reject_copy(other, f"value {value!r} cannot be converted")
            converted.append(new_value)

        if target.is_fixed_capacity and len(converted) > target.count:
            return self._reject_copy(other, "not enough room in fixed target")
        try:
            if target.is_fixed_capacity:
                target._adapter.assign(0, converted)
            else:
                target._adapter.extend(converted)
        except InvalidArgumentError as err:
            return self._reject_copy(other, str(err))
        return True

    def sequence_equals(self, other: Any) -> bool:
        """
        Positional comparison of the values. A value also matches when the other
        value converts to an equal value of this proxy's value type. Never raises.
        """
        if other is None:
            return False
        target = CollectionProxy.try_create(other)
        if target is None:
            return False
        mine = list(self._adapter.values())
        theirs = list(target._adapter.values())
        if len(mine) != len(theirs):
            return False
        for a, b in zip(mine, theirs):
            if values_equal(a, b):
                continue
            converted, b = self._try_convert(b, self.value_type)
            if converted and values_equal(a, b):
                continue
            return False
        return True

    def first(self) -> Any:
        """
        Raises:
            OutOfRangeError: If the collection is empty
        """
        for value in self._adapter.values():
            return value
        raise OutOfRangeError("The collection is empty")

    def last(self) -> Any:
        """
        Raises:
            OutOfRangeError: If the collection is empty
        """
        value = self._adapter.last()
        if value is MISSING:
            raise OutOfRangeError("The collection is empty")
        return value

    def first_or_default(self, default: Any = MISSING) -> Any:
        """First value, or default (the value type's default when omitted) if empty."""
        try:
            return self.first()
        except OutOfRangeError:
            return self._descriptor.default_value if default is MISSING else default

    def last_or_default(self, default: Any = MISSING) -> Any:
        try:
            return self.last()
        except OutOfRangeError:
            return self._descriptor.default_value if default is MISSING else default

    #endregion

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.shape.name}, {type(self._source).__name__})"

def try_create(value: Any, hint: Any = None, config: Optional[ProxyConfig] = None) -> Optional[CollectionProxy]:
    """
    Wrap value in a CollectionProxy, None when it has no collection shape.

    Raises:
        InvalidArgumentError: If value is None
    """
    return CollectionProxy.try_create(value, hint, config)

def as_proxy(value: Any, hint: Any = None, config: Optional[ProxyConfig] = None) -> CollectionProxy:
    """
    Wrap value in a CollectionProxy.

    Raises:
        InvalidArgumentError: If value is None or has no collection shape
    """
    return CollectionProxy.create(value, hint, config)
