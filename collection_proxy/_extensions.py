"""
Helpers built on top of CollectionProxy: conditional additions and frequency lookups.
"""
from collections import Counter
from typing import Any, Callable, Iterable, Union

from ._collections_utils import values_equal
from ._errors import InvalidArgumentError, OutOfRangeError
from ._proxy import as_proxy

def most_common_value(values: Iterable[Any]) -> Any:
    """
    Most frequent value of a collection, the first one encountered wins ties.

    Raises:
        InvalidArgumentError: If values is None
        OutOfRangeError: If values is empty

    Examples:
        >>> most_common_value([3, 1, 3, 2, 1])
        3
    """
    if values is None:
        raise InvalidArgumentError("values cannot be None")
    items = list(as_proxy(values))
    if not items:
        raise OutOfRangeError("Cannot find the most common value of an empty collection")
    try:
        # Counter keeps first insertion order among equal counts
        return Counter(items).most_common(1)[0][0]
    except TypeError:
        pass

    # unhashable values
    counts = []
    for item in items:
        for entry in counts:
            if values_equal(entry[0], item):
                entry[1] += 1
                break
        else:
            counts.append([item, 1])
    highest = max(count for _, count in counts)
    return next(item for item, count in counts if count == highest)

def when(values: Any, condition: Callable[[], bool], transform: Callable[[Any], Any]) -> Any:
    """
    transform(values) when condition() is true, values unchanged otherwise.

    Examples:
        >>> when([1, 2, 3], lambda: True, lambda v: [x * 2 for x in v])
        [2, 4, 6]
    """
    if values is None:
        raise InvalidArgumentError("values cannot be None")
    if condition is None:
        raise InvalidArgumentError("condition cannot be None")
    if transform is None:
        raise InvalidArgumentError("transform cannot be None")
    return transform(values) if condition() else values

def add_when(target: Any, condition: Union[bool, Callable[[], bool]], value: Any) -> Any:
    """
    Add value to target when condition holds.

    condition is either a bool or a callable. With a callable condition, value
    is a factory called only when the condition holds.

    Returns:
        target
    """
    if target is None:
        raise InvalidArgumentError("target cannot be None")
    if callable(condition):
        if value is None:
            raise InvalidArgumentError("value factory cannot be None")
        if condition():
            as_proxy(target).add(value())
    elif condition:
        as_proxy(target).add(value)
    return target

def add_range_when(target: Any, condition: Callable[[], bool], values_factory: Callable[[], Iterable[Any]]) -> Any:
    """
    Add every value produced by values_factory() to target when condition() is true.

    Returns:
        target
    """
    if target is None:
        raise InvalidArgumentError("target cannot be None")
    if condition is None:
        raise InvalidArgumentError("condition cannot be None")
    if values_factory is None:
        raise InvalidArgumentError("values_factory cannot be None")
    if not condition():
        return target
    proxy = as_proxy(target)
    if proxy.shape.is_indexed:
        proxy.add_range(values_factory())
    else:
        for value in values_factory():
            proxy.add(value)
    return target
