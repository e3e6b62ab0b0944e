"""
Error taxonomy shared by every collection proxy operation.
"""

#region: Errors

class CollectionProxyError(Exception):
    """Base class for all errors raised by collection proxies."""
    pass

class InvalidArgumentError(CollectionProxyError, ValueError):
    """
    Raised for absent input, unclassifiable values, missing copy targets,
    keys that cannot be interpreted and values that cannot be coerced.
    """
    pass

class OutOfRangeError(CollectionProxyError, IndexError, KeyError):
    """Raised for invalid positions, missing keys and copy offset overflows."""

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return Exception.__str__(self)

class UnsupportedOperationError(CollectionProxyError, TypeError):
    """Raised when a mutation is attempted on a read-only, fixed-capacity or incompatible shape."""
    pass

#endregion
