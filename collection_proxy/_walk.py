"""
Nested traversal over containers of any shape.

Every container met on the way is wrapped in a CollectionProxy, so mappings,
sequences, sets, numpy arrays and plain iterables can be mixed freely. Paths are
dotted strings (see join_path / split_path).
"""
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Type

from ._collections_utils import join_path, values_equal
from ._proxy import CollectionProxy

CallbackFn = Callable[[Any], Any]
FilterFn = Callable[[str, Any], bool]

# container types treated as leaves by default
TEXT_TYPES = (str, bytes, bytearray)

def as_container(obj: Any, excluded: Optional[Tuple[Type, ...]] = None) -> Optional[CollectionProxy]:
    """
    Proxy of obj if it is a container that is not excluded, None otherwise.
    """
    if obj is None:
        return None
    excluded = TEXT_TYPES if excluded is None else excluded
    if excluded and isinstance(obj, excluded):
        return None
    # a one character string is its own only element
    if isinstance(obj, str) and len(obj) <= 1:
        return None
    return CollectionProxy.try_create(obj)

def walk(
    obj: Any,
    callback: Optional[CallbackFn] = None,
    filter: Optional[FilterFn] = None,
    excluded: Optional[Tuple[Type, ...]] = None
) -> Iterator[Tuple[str, Any]]:
    """Walk through a nested container yielding (path, value) pairs.

    Recursively traverses the container, yielding paths and values for leaf nodes.
    Leaves can be transformed by callback and filtered by the filter predicate.

    Args:
        obj: Container to traverse
        callback: Optional function to transform leaf values
        filter: Optional predicate to filter paths/values (receives path and value)
        excluded: Container types to treat as leaves (default: str, bytes, bytearray)

    Yields:
        Tuples of (path_string, value) for each leaf node

    Examples:
        >>> data = {"a": [1, {"b": 2}], "c": {3, 4}}
        >>> list(walk(data))
        [('a.0', 1), ('a.1.b', 2), ('c.0', 3), ('c.1', 4)]
    """

    def _walk(obj: Any, path: Tuple[Any, ...]) -> Iterator[Tuple[str, Any]]:
        proxy = as_container(obj, excluded=excluded)
        if proxy is not None:
            for k, v in proxy.items():
                yield from _walk(v, path + (k,))
        else:
            joined_path=join_path(path)
            if filter is None or filter(joined_path,obj):
                yield joined_path, callback(obj) if callback is not None else obj

    yield from _walk(obj, ())

def walked(
    obj: Any,
    callback: Optional[CallbackFn] = None,
    filter: Optional[FilterFn] = None,
    excluded: Optional[Tuple[Type, ...]] = None
) -> Dict[str, Any]:
    """Return a flattened dictionary of path:value pairs from a nested container.

    Examples:
        >>> walked({"a": [1, {"b": 2}], "c": 3})
        {'a.0': 1, 'a.1.b': 2, 'c': 3}
    """
    return dict(walk(obj,callback=callback,filter=filter,excluded=excluded))

def deep_equals(obj1: Any, obj2: Any, excluded: Optional[Tuple[Type, ...]] = None) -> bool:
    """
    Compares two nested structures deeply by comparing their walked dicts
    """
    walked1 = walked(obj1, excluded=excluded)
    walked2 = walked(obj2, excluded=excluded)
    if walked1.keys() != walked2.keys():
        return False
    return all(values_equal(value, walked2[path]) for path, value in walked1.items())
