"""
Shape adapters.

One adapter class per shape family implements the structural side of the proxy
operations (reads, lookups, writes) for the containers of that family. Typed and
untyped shapes share the same adapter, they only differ through the types held
by the descriptor.

Adapters receive values that were already converted by the proxy. They only
convert keys, through the ``convert`` callable they are built with, because
associative lookups fall back to the raw key when the conversion fails.
"""
import logging
from contextlib import contextmanager
from itertools import islice
from typing import Any, Callable, Dict, Iterable, Iterator, Tuple, Type

from ._collections_utils import MISSING, NOT_FOUND, Name, Position, as_key, raw_key, values_equal
from ._descriptor import TypeDescriptor
from ._errors import InvalidArgumentError, OutOfRangeError, UnsupportedOperationError
from ._shapes import CollectionShape, ShapeFamily

logger = logging.getLogger(__name__)

Converter = Callable[[Any, Any], Tuple[bool, Any]]

# Rejections raised by typed storage (array.array, bytearray, numpy...) for
# values that were converted successfully
STORAGE_ERRORS = (ValueError, TypeError, OverflowError)

@contextmanager
def storage_errors(source: Any):
    """Report a write rejected by the container itself as an InvalidArgumentError."""
    try:
        yield
    except InvalidArgumentError:
        raise
    except STORAGE_ERRORS as err:
        raise InvalidArgumentError(f"{type(source).__name__} rejected the value: {err}") from err

#region: base adapter

class ShapeAdapter:
    """
    Base adapter: enumeration based reads, every mutation unsupported.

    Args:
        source: The wrapped container
        descriptor: The TypeDescriptor of the container
        convert: (value, hint) -> (success, converted value)
    """
    family: ShapeFamily = None

    def __init__(self, source: Any, descriptor: TypeDescriptor, convert: Converter):
        self.source = source
        self.descriptor = descriptor
        self._convert = convert

    #region: reads

    def values(self) -> Iterator[Any]:
        return iter(self.source)

    def items(self) -> Iterator[Tuple[Any, Any]]:
        return enumerate(self.values())

    def keys(self) -> Iterator[Any]:
        return (key for key, _ in self.items())

    def count(self) -> int:
        return len(self.source)

    def position(self, key: Any, upper: int = None) -> int:
        """
        Turn an indexer key into a validated position.

        Raises:
            InvalidArgumentError: If the key is not a position nor a numeric name
            OutOfRangeError: If the position is negative or >= upper (count by default)
        """
        key = as_key(key)
        if not isinstance(key, (Position, Name)):
            raise InvalidArgumentError(f"{key!r} cannot be used as a position")
        position = key.to_position()
        upper = self.count() if upper is None else upper
        if not 0 <= position < upper:
            raise OutOfRangeError(f"Position {position} is out of range for a collection of {upper} elements")
        return position

    def get(self, key: Any) -> Any:
        position = self.position(key)
        return next(islice(self.values(), position, None))

    def index_of(self, value: Any) -> int:
        for position, element in enumerate(self.values()):
            if values_equal(element, value):
                return position
        return NOT_FOUND

    def contains_value(self, value: Any) -> bool:
        return self.index_of(value) != NOT_FOUND

    def contains_key(self, key: Any) -> bool:
        try:
            self.position(key)
        except (InvalidArgumentError, OutOfRangeError):
            return False
        return True

    def last(self) -> Any:
        result = MISSING
        for result in self.values():
            pass
        return result

    #endregion

    #region: writes

    def _unsupported(self, operation: str):
        raise UnsupportedOperationError(f"{operation} is not supported by {self.family.value} collections")

    def set(self, key: Any, value: Any):
        self._unsupported("Item assignment")

    def add(self, value: Any):
        self._unsupported("add(value)")

    def add_entry(self, key: Any, value: Any):
        self._unsupported("add(key, value)")

    def extend(self, values: Iterable[Any]):
        self._unsupported("add_range")

    def insert(self, position: Any, value: Any):
        self._unsupported("insert")

    def remove(self, value: Any) -> bool:
        self._unsupported("remove")

    def remove_at(self, key: Any):
        self._unsupported("remove_at")

    def clear(self):
        self._unsupported("clear")

    #endregion

#endregion

#region: associative

class AssociativeAdapter(ShapeAdapter):
    """Mappings: key based lookups, positions address the n-th value."""
    family = ShapeFamily.ASSOCIATIVE

    def values(self) -> Iterator[Any]:
        return iter(self.source.values())

    def items(self) -> Iterator[Tuple[Any, Any]]:
        return iter(self.source.items())

    def keys(self) -> Iterator[Any]:
        return iter(self.source)

    def find_key(self, key: Any) -> Any:
        """
        Stored key matching key, converted to the key type first then as is.
        MISSING when the mapping has no such key.
        """
        raw = raw_key(key)
        converted, typed_key = self._convert(raw, self.descriptor.key_type)
        for candidate in ((typed_key, raw) if converted else (raw,)):
            try:
                if candidate in self.source:
                    return candidate
            except TypeError:
                # unhashable
                continue
        return MISSING

    def nth_key(self, key: Any) -> Any:
        position = self.position(key)
        return next(islice(iter(self.source), position, None))

    def get(self, key: Any) -> Any:
        stored = self.find_key(key)
        if stored is not MISSING:
            return self.source[stored]
        if isinstance(as_key(key), Position):
            return self.source[self.nth_key(key)]
        raise OutOfRangeError(f"Key {raw_key(key)!r} not found")

    def index_of(self, value: Any) -> int:
        stored = self.find_key(value)
        if stored is MISSING:
            return NOT_FOUND
        for position, key in enumerate(self.source):
            if key is stored or values_equal(key, stored):
                return position
        return NOT_FOUND

    def contains_key(self, key: Any) -> bool:
        return self.find_key(key) is not MISSING

    def contains_value(self, value: Any) -> bool:
        return any(values_equal(element, value) for element in self.source.values())

    def set(self, key: Any, value: Any):
        stored = self.find_key(key)
        if stored is MISSING:
            stored = self._new_key(key)
        with storage_errors(self.source):
            self.source[stored] = value

    def _new_key(self, key: Any) -> Any:
        raw = raw_key(key)
        converted, new_key = self._convert(raw, self.descriptor.key_type)
        if not converted:
            raise InvalidArgumentError(f"Key {raw!r} cannot be converted to {self.descriptor.key_type}")
        return new_key

    def add_entry(self, key: Any, value: Any):
        if self.find_key(key) is not MISSING:
            raise InvalidArgumentError(f"An entry with key {raw_key(key)!r} already exists")
        new_key = self._new_key(key)
        with storage_errors(self.source):
            self.source[new_key] = value

    def add_entries(self, pairs: Iterable[Tuple[Any, Any]]):
        """Add new entries, removing the ones already added if one is rejected."""
        added = []
        try:
            for key, value in pairs:
                self.add_entry(key, value)
                added.append(key)
        except InvalidArgumentError:
            for key in reversed(added):
                self.remove(key)
            raise

    def remove(self, key: Any) -> bool:
        stored = self.find_key(key)
        if stored is MISSING:
            return False
        del self.source[stored]
        return True

    def remove_at(self, key: Any):
        del self.source[self.nth_key(key)]

    def clear(self):
        self.source.clear()

#endregion

#region: indexed

class IndexedAdapter(ShapeAdapter):
    """Random access sequences, growable or fixed."""
    family = ShapeFamily.INDEXED

    def values(self) -> Iterator[Any]:
        # ctypes arrays only support the legacy __getitem__ protocol
        source = self.source
        return (source[position] for position in range(len(source)))

    def get(self, key: Any) -> Any:
        return self.source[self.position(key)]

    def last(self) -> Any:
        count = self.count()
        return self.source[count - 1] if count else MISSING

    def set(self, key: Any, value: Any):
        position = self.position(key)
        with storage_errors(self.source):
            self.source[position] = value

    def assign(self, start: int, values: Iterable[Any]):
        """
        Write values from position start on. If the container rejects one of
        them, the overwritten elements are restored.
        """
        values = list(values)
        previous = [self.source[position] for position in range(start, start + len(values))]
        try:
            with storage_errors(self.source):
                for position, value in enumerate(values, start):
                    self.source[position] = value
        except InvalidArgumentError:
            for position, value in enumerate(previous, start):
                self.source[position] = value
            raise

    def add(self, value: Any):
        with storage_errors(self.source):
            self.source.append(value)

    def extend(self, values: Iterable[Any]):
        """Append every value, or none of them if the container rejects one."""
        size = len(self.source)
        try:
            with storage_errors(self.source):
                for value in values:
                    self.source.append(value)
        except InvalidArgumentError:
            # deque has no slice deletion
            while len(self.source) > size:
                self.source.pop()
            raise

    def insert(self, position: Any, value: Any):
        # inserting right after the last element is allowed
        position = self.position(position, upper=self.count() + 1)
        with storage_errors(self.source):
            self.source.insert(position, value)

    def remove(self, value: Any) -> bool:
        position = self.index_of(value)
        if position == NOT_FOUND:
            return False
        del self.source[position]
        return True

    def remove_at(self, key: Any):
        del self.source[self.position(key)]

    def clear(self):
        clear = getattr(self.source, 'clear', None)
        if callable(clear):
            clear()
        else:
            # array.array has no clear()
            del self.source[:]

#endregion

#region: sized

class SizedAdapter(ShapeAdapter):
    """Sets and other sized collections without random access."""
    family = ShapeFamily.SIZED

    def contains_value(self, value: Any) -> bool:
        try:
            if value in self.source:
                return True
        except TypeError:
            # unhashable probe on a hash based collection
            pass
        return super().contains_value(value)

    def add(self, value: Any):
        with storage_errors(self.source):
            self.source.add(value)

    def extend(self, values: Iterable[Any]):
        """Add every value, or none of them if the container rejects one."""
        added = []
        try:
            with storage_errors(self.source):
                for value in values:
                    if value not in self.source:
                        self.source.add(value)
                        added.append(value)
        except InvalidArgumentError:
            for value in added:
                self.remove(value)
            raise

    def remove(self, value: Any) -> bool:
        try:
            present = value in self.source
        except TypeError:
            return False
        if not present:
            return False
        discard = getattr(self.source, 'discard', None)
        if callable(discard):
            discard(value)
        else:
            self.source.remove(value)
        return True

    def clear(self):
        clear = getattr(self.source, 'clear', None)
        if callable(clear):
            clear()
            return
        for value in list(self.source):
            self.remove(value)

#endregion

#region: forward only

class ForwardOnlyAdapter(ShapeAdapter):
    """
    Plain iterables. Single pass sources (iter(source) is source) are
    materialized into a buffer the first time they are enumerated, every later
    read is served from that buffer.
    """
    family = ShapeFamily.FORWARD_ONLY

    def __init__(self, source: Any, descriptor: TypeDescriptor, convert: Converter):
        super().__init__(source, descriptor, convert)
        self._single_pass = iter(source) is source
        self._buffer = None

    @property
    def is_buffered(self) -> bool:
        return self._buffer is not None

    def values(self) -> Iterator[Any]:
        if not self._single_pass:
            return iter(self.source)
        if self._buffer is None:
            self._buffer = list(self.source)
            logger.debug("Materialized %d items from single pass %s", len(self._buffer), type(self.source).__name__)
        return iter(self._buffer)

    def count(self) -> int:
        return sum(1 for _ in self.values())

#endregion

ADAPTERS: Dict[CollectionShape, Type[ShapeAdapter]] = {
    CollectionShape.TYPED_ASSOCIATIVE: AssociativeAdapter,
    CollectionShape.UNTYPED_ASSOCIATIVE: AssociativeAdapter,
    CollectionShape.TYPED_INDEXED: IndexedAdapter,
    CollectionShape.UNTYPED_INDEXED: IndexedAdapter,
    CollectionShape.TYPED_SIZED: SizedAdapter,
    CollectionShape.UNTYPED_SIZED: SizedAdapter,
    CollectionShape.TYPED_FORWARD_ONLY: ForwardOnlyAdapter,
    CollectionShape.UNTYPED_FORWARD_ONLY: ForwardOnlyAdapter,
}

def adapter_for(source: Any, descriptor: TypeDescriptor, convert: Converter) -> ShapeAdapter:
    """Instantiate the adapter matching the descriptor's shape."""
    return ADAPTERS[descriptor.shape](source, descriptor, convert)
