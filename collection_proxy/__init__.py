"""Public package exports for ``collection_proxy``.

A collection proxy inspects a container it knows nothing about, classifies its
shape (keyed, indexed, sized or forward-only, typed or not) and exposes one
uniform set of operations over it.

    >>> from collection_proxy import as_proxy
    >>> proxy = as_proxy({"item 1": 1, "item 2": 2})
    >>> proxy.shape
    CollectionShape.UNTYPED_ASSOCIATIVE
    >>> proxy[0]
    1
"""
import logging

from ._errors import CollectionProxyError, InvalidArgumentError, OutOfRangeError, UnsupportedOperationError
from ._collections_utils import MISSING, NOT_FOUND, Position, Name, Key, as_key, raw_key, View, KeysView, ValuesView, join_path, split_path
from ._typechecker import TypeChecker, Coercer, TypeMismatchError, TypeCheckError, CoercionError, coerce, try_coerce, can_coerce, check_type, reset_global_coercer, reset_global_typechecker
from ._shapes import CollectionShape, ShapeFamily
from ._descriptor import TypeDescriptor, DescriptorCache, get_descriptor_cache, reset_descriptor_cache
from ._classifier import classify, describe
from ._config import ProxyConfig, default_config, reset_default_config
from ._proxy import CollectionProxy, try_create, as_proxy
from ._extensions import most_common_value, when, add_when, add_range_when
from ._walk import walk, walked, deep_equals

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CollectionProxy", "try_create", "as_proxy",
    "CollectionShape", "ShapeFamily", "classify", "describe",
    "TypeDescriptor", "DescriptorCache", "get_descriptor_cache", "reset_descriptor_cache",
    "ProxyConfig", "default_config", "reset_default_config",
    "CollectionProxyError", "InvalidArgumentError", "OutOfRangeError", "UnsupportedOperationError",
    "TypeChecker", "Coercer", "TypeMismatchError", "TypeCheckError", "CoercionError",
    "coerce", "try_coerce", "can_coerce", "check_type", "reset_global_coercer", "reset_global_typechecker",
    "MISSING", "NOT_FOUND", "Position", "Name", "Key", "as_key", "raw_key",
    "View", "KeysView", "ValuesView", "join_path", "split_path",
    "most_common_value", "when", "add_when", "add_range_when",
    "walk", "walked", "deep_equals",
]
