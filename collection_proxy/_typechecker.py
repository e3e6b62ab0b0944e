"""
TypeChecker and Coercer - runtime type checks and value coercion for collection elements.

The proxy calls into this module whenever a key or a value has to be converted
into the element, key or value type of the container it wraps. Coercion follows
a fixed fallback order:

    exact type match -> numeric widening -> parse from text -> constructor fallback -> fail
"""
import collections
import collections.abc
import types
import typing
from typing import Any, Dict, Tuple, Callable, TypeVar, get_origin, get_args

import numpy

#region: Errors

class TypeCheckException(Exception):
    pass

class TypeCheckError(TypeCheckException):
    """Exception raised for common type check errors"""
    pass

class TypeMismatchError(TypeCheckException):
    """Exception raised when a value doesn't match the type."""
    pass

class CoercionError(Exception):
    """Exception raised when coercion is not possible."""
    pass

#endregion

#region: TypeChecker Class
class TypeChecker:
    """
    Runtime type checker covering the hints collection descriptors produce:
    plain classes, Any/object, Union/Optional/Literal/Annotated, TypeVars,
    NewTypes and the parameterized builtin and collections.abc containers.
    """

    def __init__(self):

        self.origin_to_type_map = {
            # Basic collections
            typing.List: list,
            typing.Tuple: tuple,
            typing.Dict: dict,
            typing.Set: set,
            typing.FrozenSet: frozenset,

            # Sequence abstractions
            typing.Sequence: collections.abc.Sequence,
            typing.MutableSequence: collections.abc.MutableSequence,

            # Mapping abstractions
            typing.Mapping: collections.abc.Mapping,
            typing.MutableMapping: collections.abc.MutableMapping,

            # Set abstractions
            typing.AbstractSet: collections.abc.Set,
            typing.MutableSet: collections.abc.MutableSet,

            # Collection abstractions
            typing.Collection: collections.abc.Collection,

            # Iterator types
            typing.Iterable: collections.abc.Iterable,
            typing.Iterator: collections.abc.Iterator,

            # Concrete collections
            typing.Deque: collections.deque,
            typing.OrderedDict: collections.OrderedDict,
        }

        self.type_checkers = {
            (typing.List, list): self._check_sequence_like,
            (typing.Tuple, tuple): self._check_tuple_like,
            (typing.Dict, dict): self._check_mapping_like,
            (typing.Set, set): self._check_set_like,
            (typing.FrozenSet, frozenset): self._check_set_like,

            (typing.Sequence, collections.abc.Sequence): self._check_sequence_like,
            (typing.MutableSequence, collections.abc.MutableSequence): self._check_sequence_like,

            (typing.Mapping, collections.abc.Mapping): self._check_mapping_like,
            (typing.MutableMapping, collections.abc.MutableMapping): self._check_mapping_like,

            (typing.AbstractSet, collections.abc.Set): self._check_set_like,
            (typing.MutableSet, collections.abc.MutableSet): self._check_set_like,

            (typing.Collection, collections.abc.Collection): self._check_iterable_like,
            (typing.Iterable, collections.abc.Iterable): self._check_iterable_like,
            (typing.Iterator, collections.abc.Iterator): self._check_iterable_like,

            (typing.Deque, collections.deque): self._check_sequence_like,
            (typing.OrderedDict, collections.OrderedDict): self._check_mapping_like,
        }

    #region: entry point
    def check_type(self, hint: Any, value: Any) -> bool:
        """
        Check if a value matches the given type hint.

        Args:
            hint: A type annotation or typing construct
            value: The value to check against the type hint

        Returns:
            bool: True if the value matches the type hint

        Raises:
            TypeMismatchError: When the value doesn't match the type hint
            TypeCheckError: When the hint is not supported
        """
        if not self._check_type_internal(hint, value):
            raise TypeMismatchError(f"Expected an instance of {hint}, got {type(value)}")
        return True

    def matches(self, hint: Any, value: Any) -> bool:
        """Non raising variant of check_type. Unsupported hints never match."""
        try:
            return self._check_type_internal(hint, value)
        except TypeCheckError:
            return False
    #endregion

    #region: hint parsing

    def _origin_to_type(self,origin):
        return self.origin_to_type_map.get(origin,origin)

    def _is_newtype(self,hint):
        return hasattr(hint, '__supertype__')

    def _is_basic_type(self,hint):
        return isinstance(hint,type) and not self._is_newtype(hint)

    def _is_generic_alias(self, hint):
        """
        Check if a hint is a generic alias like List[int], dict[str, int], etc.
        Special forms (Union, Optional...) are not considered generic aliases.
        """
        if self._is_special_form(hint):
            return False
        return get_origin(hint) is not None

    def _is_special_form(self, hint):
        """
        Check if a hint is a special form (Union, Optional, Literal, etc.).
        """
        # PEP 604 unions (int | str)
        if isinstance(hint, types.UnionType):
            return True
        return self._get_special_form_name(hint) in {'Union', 'Optional', 'Literal', 'Annotated'}

    def _get_special_form_name(self, hint):
        """
        Get the name of a special form type hint, parameterized or not.
        """
        if isinstance(hint, types.UnionType):
            return 'Union'
        origin = get_origin(hint)
        if origin is typing.Union:
            return 'Optional' if type(None) in get_args(hint) and len(get_args(hint)) == 2 else 'Union'
        if origin is typing.Literal:
            return 'Literal'
        if origin is typing.Annotated:
            return 'Annotated'
        if origin is not None:
            name = getattr(origin, '_name', None)
            if name:
                return name
        return getattr(hint, '_name', None)

    #endregion

    #region: core logic

    def _check_basic_type(self,hint,value):
        """
        Similar to isinstance check but doesn't accept booleans as int
        """
        if hint is int:
            return isinstance(value, int) and not isinstance(value,bool)
        return isinstance(value,hint)

    def _check_type_internal(self, hint: Any, value: Any) -> bool:
        """
        Core recursive check.

        Raises:
            TypeCheckError: When the hint is not supported
        """
        if hint in (None, type(None)):
            return value is None

        if hint in (Any, object):
            return True

        if self._is_special_form(hint):
            return self._check_special_form(hint, value)

        if self._is_generic_alias(hint):
            return self._check_generic_alias(hint, value)

        if self._is_basic_type(hint):
            return self._check_basic_type(hint, value)

        if isinstance(hint, TypeVar):
            return self._check_typevar(hint, value)

        if self._is_newtype(hint):
            return self._check_type_internal(hint.__supertype__, value)

        raise TypeCheckError(f"Unsupported type hint: {hint}")

    def _check_special_form(self, hint, value):
        form_name = self._get_special_form_name(hint)
        args = get_args(hint)

        if form_name in ('Union', 'Optional'):
            return any(self._check_type_internal(arg, value) for arg in args)
        if form_name == 'Literal':
            return value in args
        if form_name == 'Annotated':
            return self._check_type_internal(args[0], value) if args else True

        raise TypeCheckError(f"Unsupported special form: {hint}")

    def _check_generic_alias(self, hint, value):
        origin = get_origin(hint)
        checker = self._get_checker(origin)
        if checker is not None:
            return checker(hint, value)
        # User generics (Bag[int]...): only the origin class can be verified
        if isinstance(origin, type):
            return isinstance(value, origin)
        raise TypeCheckError(f"Unsupported generic alias: {hint}")

    def _get_checker(self, origin):
        """
        Get the checker registered for an origin, typing alias or concrete class.
        """
        for type_key, checker_method in self.type_checkers.items():
            if origin in type_key:
                return checker_method
        return None

    #endregion

    #region: Generic type checkers

    def _check_sequence_like(self, hint, value):
        origin = get_origin(hint) or hint
        args = get_args(hint)
        if not isinstance(value, self._origin_to_type(origin)):
            return False
        if not args:
            return True
        return all(self._check_type_internal(args[0], item) for item in value)

    def _check_tuple_like(self, hint, value):
        args = get_args(hint)
        if not isinstance(value, tuple):
            return False
        if not args:
            return True
        if len(args) == 2 and args[1] is ...:
            return all(self._check_type_internal(args[0], item) for item in value)
        if len(args) == 1 and args[0] == ():
            return len(value) == 0
        if len(value) != len(args):
            return False
        return all(self._check_type_internal(arg, item) for arg, item in zip(args, value))

    def _check_set_like(self, hint, value):
        origin = get_origin(hint) or hint
        args = get_args(hint)
        if not isinstance(value, self._origin_to_type(origin)):
            return False
        if not args:
            return True
        return all(self._check_type_internal(args[0], item) for item in value)

    def _check_mapping_like(self, hint, value):
        origin = get_origin(hint) or hint
        args = get_args(hint)
        if not isinstance(value, self._origin_to_type(origin)):
            return False
        if len(args) != 2:
            return True
        key_type, value_type = args
        return all(
            self._check_type_internal(key_type, k) and
            self._check_type_internal(value_type, v)
            for k, v in value.items()
        )

    def _check_iterable_like(self, hint, value):
        """
        Iterables are checked element by element unless they are iterators,
        which would be consumed by the check.
        """
        origin = get_origin(hint) or hint
        args = get_args(hint)
        if not isinstance(value, self._origin_to_type(origin)):
            return False
        if not args or isinstance(value, collections.abc.Iterator):
            return True
        return all(self._check_type_internal(args[0], item) for item in value)

    def _check_typevar(self,hint,value):
        if hint.__constraints__:
            return any(self._check_type_internal(constraint, value)
                    for constraint in hint.__constraints__)
        if hint.__bound__:
            return self._check_type_internal(hint.__bound__, value)
        return True

    #endregion

#endregion

#region: Coercer Class

# Builtin counterparts of the numpy scalar hierarchy, most specific first
_NUMPY_BUILTINS = (
    (numpy.bool_, bool),
    (numpy.integer, int),
    (numpy.floating, float),
    (numpy.complexfloating, complex),
    (numpy.str_, str),
    (numpy.bytes_, bytes),
)

class Coercer:
    """
    Coercion engine built on top of the TypeChecker.
    Values that already match the target are returned untouched.
    """

    def __init__(self, type_checker: TypeChecker):
        self.type_checker = type_checker
        self._widening = self._build_widening_strategies()
        self._parsing = self._build_parsing_strategies()
        self._conversions = self._build_conversion_strategies()

    def coerce(self, value: Any, target_hint: Any) -> Any:
        """
        Main entry point: coerce value into target_hint.

        Raises:
            CoercionError: If no strategy can produce a matching value
        """
        try:
            if self.type_checker.check_type(target_hint, value):
                return value
        except (TypeMismatchError, TypeCheckError):
            pass

        return self._attempt_smart_coercion(value, target_hint)

    def _attempt_smart_coercion(self, value: Any, target_hint: Any) -> Any:
        if self.type_checker._is_special_form(target_hint):
            return self._coerce_special_form(value, target_hint)
        elif self.type_checker._is_generic_alias(target_hint):
            return self._coerce_generic_alias(value, target_hint)
        elif self.type_checker._is_basic_type(target_hint):
            return self._coerce_basic_type(value, target_hint)
        elif isinstance(target_hint, TypeVar):
            return self._coerce_typevar(value, target_hint)
        elif self.type_checker._is_newtype(target_hint):
            return self.coerce(value, target_hint.__supertype__)
        raise CoercionError(f"No coercion strategy available for {target_hint}")

    def _coerce_special_form(self, value: Any, target_hint: Any) -> Any:
        form_name = self.type_checker._get_special_form_name(target_hint)
        args = get_args(target_hint)

        if form_name in ('Union', 'Optional'):
            return self._coerce_union(value, target_hint)
        elif form_name == 'Literal':
            return self._coerce_literal(value, target_hint)
        elif form_name == 'Annotated':
            return self.coerce(value, args[0]) if args else value
        raise CoercionError(f"Cannot coerce to special form: {form_name}")

    def _coerce_union(self, value: Any, target_hint: Any) -> Any:
        """
        Union: the first member the value coerces into wins, in declaration order.
        """
        args = get_args(target_hint)
        if value is None and type(None) in args:
            return None
        for union_type in args:
            if union_type is type(None):
                continue
            try:
                return self.coerce(value, union_type)
            except CoercionError:
                continue
        raise CoercionError(f"Cannot coerce {type(value)} to any type in {target_hint}")

    def _coerce_literal(self, value: Any, target_hint: Any) -> Any:
        args = get_args(target_hint)
        if value in args:
            return value
        for literal_val in args:
            try:
                coerced = self._coerce_basic_type(value, type(literal_val))
            except CoercionError:
                continue
            if coerced == literal_val:
                return coerced
        raise CoercionError(f"Cannot coerce {value!r} to any literal value in {args}")

    def _coerce_generic_alias(self, value: Any, target_hint: Any) -> Any:
        """
        List[int], Dict[str, float], Tuple[str, int]... element-wise coercion.
        """
        origin = get_origin(target_hint)
        args = get_args(target_hint)
        checker = self.type_checker._get_checker(origin)

        if checker == self.type_checker._check_tuple_like:
            return self._coerce_tuple_like(value, args)
        elif checker == self.type_checker._check_mapping_like:
            return self._coerce_mapping_like(value, origin, args)
        elif checker in (self.type_checker._check_sequence_like, self.type_checker._check_set_like, self.type_checker._check_iterable_like):
            return self._coerce_iterable_like(value, origin, args)
        raise CoercionError(f"No coercion strategy for {target_hint}")

    def _coerce_iterable_like(self, value: Any, origin: Any, args: Tuple) -> Any:
        if not isinstance(value, collections.abc.Iterable):
            raise CoercionError(f"Cannot coerce {type(value)} to {origin}")
        items = list(value)
        if args:
            items = [self.coerce(item, args[0]) for item in items]

        target_type = self.type_checker._origin_to_type(origin)
        if target_type in (collections.abc.Sequence, collections.abc.MutableSequence,
                           collections.abc.Iterable, collections.abc.Collection, collections.abc.Iterator):
            return iter(items) if target_type is collections.abc.Iterator else items
        if target_type in (collections.abc.Set, collections.abc.MutableSet):
            return set(items)
        try:
            return target_type(items)
        except (TypeError, ValueError) as e:
            raise CoercionError(f"Cannot build {target_type} from {type(value)}: {e}")

    def _coerce_mapping_like(self, value: Any, origin: Any, args: Tuple) -> Any:
        if isinstance(value, collections.abc.Mapping):
            pairs = list(value.items())
        else:
            try:
                pairs = list(dict(value).items())
            except (ValueError, TypeError):
                raise CoercionError(f"Cannot coerce {type(value)} to mapping")

        if len(args) == 2:
            key_type, value_type = args
            pairs = [(self.coerce(k, key_type), self.coerce(v, value_type)) for k, v in pairs]

        target_type = self.type_checker._origin_to_type(origin)
        if target_type in (collections.abc.Mapping, collections.abc.MutableMapping, dict):
            return dict(pairs)
        try:
            return target_type(pairs)
        except (TypeError, ValueError) as e:
            raise CoercionError(f"Cannot build {target_type} from {type(value)}: {e}")

    def _coerce_tuple_like(self, value: Any, args: Tuple) -> Any:
        """
        Tuple[int, ...] vs Tuple[int, str] vs Tuple[()]
        """
        if not isinstance(value, collections.abc.Iterable):
            raise CoercionError(f"Cannot coerce {type(value)} to tuple")
        converted = tuple(value)
        if not args:
            return converted
        if len(args) == 1 and args[0] == ():
            if converted:
                raise CoercionError(f"Expected empty tuple, got {len(converted)} elements")
            return converted
        if len(args) == 2 and args[1] is ...:
            return tuple(self.coerce(item, args[0]) for item in converted)
        if len(converted) != len(args):
            raise CoercionError(f"Expected tuple of length {len(args)}, got {len(converted)}")
        return tuple(self.coerce(item, arg) for item, arg in zip(converted, args))

    def _coerce_basic_type(self, value: Any, target_hint: Any) -> Any:
        """
        Coercion into a plain class, following the documented fallback order.
        """
        numpy_target = self._numpy_builtin(target_hint)
        if numpy_target is not None:
            return self._coerce_numpy_scalar(self.coerce(value, numpy_target), target_hint)

        if isinstance(value, numpy.generic):
            value = value.item()
            if self.type_checker._check_basic_type(target_hint, value):
                return value

        coercion_key = (type(value), target_hint)
        for strategies in (self._widening, self._parsing, self._conversions):
            if coercion_key in strategies:
                try:
                    return strategies[coercion_key](value)
                except (ValueError, TypeError, OverflowError) as e:
                    raise CoercionError(f"Cannot coerce {value!r} to {target_hint}: {e}")

        return self._generic_basic_coercion(value, target_hint)

    def _coerce_typevar(self, value: Any, target_hint: TypeVar) -> Any:
        if target_hint.__constraints__:
            for constraint in target_hint.__constraints__:
                try:
                    return self.coerce(value, constraint)
                except CoercionError:
                    continue
            raise CoercionError(f"Cannot coerce {type(value)} to any constraint of {target_hint}")
        if target_hint.__bound__:
            return self.coerce(value, target_hint.__bound__)
        return value

    def _coerce_numpy_scalar(self, value: Any, target_hint: Any) -> Any:
        """
        Build a numpy scalar from its builtin counterpart. Integers outside the
        range of the target are rejected instead of wrapping around.
        """
        try:
            if issubclass(target_hint, numpy.integer):
                bounds = numpy.iinfo(target_hint)
                if not bounds.min <= value <= bounds.max:
                    raise CoercionError(f"{value} is out of bounds for {target_hint.__name__}")
            return target_hint(value)
        except (ValueError, TypeError, OverflowError) as e:
            raise CoercionError(f"Cannot coerce {value!r} to {target_hint}: {e}")

    def _numpy_builtin(self, target_hint: Any):
        if not (isinstance(target_hint, type) and issubclass(target_hint, numpy.generic)):
            return None
        for numpy_type, builtin in _NUMPY_BUILTINS:
            if issubclass(target_hint, numpy_type):
                return builtin
        return None

    def _build_widening_strategies(self) -> Dict[Tuple[type, type], Callable]:
        """Lossless numeric widenings."""
        return {
            (int, float): float,
            (int, complex): complex,
            (float, complex): complex,
            (bool, int): int,  # True -> 1, False -> 0
            (bool, float): float,
        }

    def _build_parsing_strategies(self) -> Dict[Tuple[type, type], Callable]:
        """Parsing from text."""
        return {
            (str, int): self._str_to_int,
            (str, float): self._str_to_float,
            (str, bool): self._str_to_bool,
            (str, complex): lambda value: complex(value.strip()),
            (bytes, str): lambda value: value.decode(),
        }

    def _build_conversion_strategies(self) -> Dict[Tuple[type, type], Callable]:
        """Narrowings that must stay exact, text rendering and container swaps."""
        return {
            (float, int): self._float_to_int,
            (int, bool): self._int_to_bool,

            (int, str): str,
            (float, str): str,
            (bool, str): str,
            (complex, str): str,

            (tuple, list): list,
            (list, tuple): tuple,
            (set, list): list,
            (list, set): set,
            (frozenset, set): set,
            (set, frozenset): frozenset,
            (str, list): list,  # "abc" -> ['a', 'b', 'c']
            (str, tuple): tuple,
        }

    def _str_to_int(self, value: str) -> int:
        """Conversion string -> int, "123.0" is accepted as 123."""
        value = value.strip()
        if not value:
            raise CoercionError("Empty string cannot be converted to int")
        if '.' in value:
            float_val = float(value)
            if float_val.is_integer():
                return int(float_val)
            raise CoercionError(f"String '{value}' represents a non-integer float")
        return int(value)

    def _str_to_float(self, value: str) -> float:
        value = value.strip()
        if not value:
            raise CoercionError("Empty string cannot be converted to float")
        return float(value)

    def _str_to_bool(self, value: str) -> bool:
        value = value.strip().lower()
        if value in ('true', '1', 'yes', 'on', 'y', 't'):
            return True
        elif value in ('false', '0', 'no', 'off', 'n', 'f', ''):
            return False
        raise CoercionError(f"Cannot convert '{value}' to bool")

    def _float_to_int(self, value: float) -> int:
        """Conversion float -> int only when there is no decimal part."""
        if value.is_integer():
            return int(value)
        raise CoercionError(f"Float {value} has decimal part, cannot convert to int")

    def _int_to_bool(self, value: int) -> bool:
        if value in (0, 1):
            return bool(value)
        raise CoercionError(f"Int {value} is not a boolean value")

    def _generic_basic_coercion(self, value: Any, target_hint: Any) -> Any:
        """
        Last resort: call the target class on the value.
        """
        try:
            result = target_hint(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise CoercionError(f"Cannot coerce {type(value)} to {target_hint}: {e}")
        if not isinstance(result, target_hint):
            raise CoercionError(f"Constructor of {target_hint} returned {type(result)}")
        return result

#endregion

#region: Public API

_global_coercer = None
_global_typechecker=None

def _get_global_typechecker() -> TypeChecker:
    """
    Lazily created shared TypeChecker.
    """
    global _global_typechecker
    if _global_typechecker is None:
        _global_typechecker = TypeChecker()
    return _global_typechecker

def _get_global_coercer() -> Coercer:
    """
    Lazily created shared Coercer.
    """
    global _global_coercer
    if _global_coercer is None:
        _global_coercer = Coercer(_get_global_typechecker())
    return _global_coercer

def reset_global_typechecker():
    """
    Drop the shared typechecker (tests use this to start from a clean state).
    """
    global _global_typechecker
    _global_typechecker = None

def reset_global_coercer():
    """
    Drop the shared coercer.
    """
    global _global_coercer
    _global_coercer = None

def coerce(value: Any, hint: Any) -> Any:
    """
    Coerce a value into a type.

    Args:
        value: The value to coerce
        hint: The target type (int, str, List[str], Union[int, str], numpy.float32...)

    Returns:
        The value coerced into the target type

    Raises:
        CoercionError: If the coercion is not possible

    Examples:
        >>> coerce("42", int)
        42
        >>> coerce(3, float)
        3.0
        >>> coerce(("a", "b"), List[str])
        ['a', 'b']
        >>> coerce("7", numpy.int32)
        7
    """
    return _get_global_coercer().coerce(value, hint)

def try_coerce(value: Any, hint: Any) -> Tuple[bool, Any]:
    """
    Non raising coerce.

    Returns:
        (True, coerced value) on success, (False, value) otherwise

    Examples:
        >>> try_coerce("12", int)
        (True, 12)
        >>> try_coerce("abc", int)
        (False, 'abc')
    """
    try:
        return True, _get_global_coercer().coerce(value, hint)
    except CoercionError:
        return False, value

def can_coerce(value: Any, hint: Any) -> bool:
    """
    Check whether a value can be coerced into a type without keeping the result.

    Examples:
        >>> can_coerce("42", int)
        True
        >>> can_coerce("abc", int)
        False
    """
    return try_coerce(value, hint)[0]

def check_type(hint: Any, value: Any) -> bool:
    """
    Convenience function to check if a value matches a type hint.

    Raises:
        TypeMismatchError: When the value doesn't match the type hint
        TypeCheckError: When the hint is not supported
    """
    return _get_global_typechecker().check_type(hint, value)

#endregion
