"""
Proxy configuration.

ProxyConfig keeps track of the fields that were passed explicitly so that
configs can be layered with merge(): environment defaults, then the class level
``_config`` of CollectionProxy subclasses, then the config given to try_create.
"""
import logging
import os
from dataclasses import dataclass, field, fields, MISSING as DC_MISSING
from typing import FrozenSet, Optional

from dotenv import load_dotenv

from ._typechecker import CoercionError, coerce

logger = logging.getLogger(__name__)

# Environment variable -> ProxyConfig field
ENV_VARIABLES = {
    'COLLECTION_PROXY_COERCE': 'coerce',
    'COLLECTION_PROXY_STRICT': 'strict',
    'COLLECTION_PROXY_CACHE_DESCRIPTORS': 'cache_descriptors',
}

@dataclass(frozen=True)
class ProxyConfig:
    coerce: bool = True
    strict: bool = True
    cache_descriptors: bool = True

    # fields passed explicitly to __init__
    _explicit: FrozenSet[str] = field(default_factory=frozenset,init=False,repr=False)

    def __init__(self, **kwargs):
        unknown = set(kwargs) - {f.name for f in fields(self) if f.name != "_explicit"}
        if unknown:
            raise TypeError(f"Unknown config field(s): {', '.join(sorted(unknown))}")

        # 1) remember which keys were given explicitly
        object.__setattr__(self, "_explicit", frozenset(kwargs.keys()))

        # 2) apply kwargs or class defaults
        for f in fields(self):
            if f.name == "_explicit":
                continue

            if f.name in kwargs:
                value = kwargs[f.name]
            elif f.default is not DC_MISSING:
                value = f.default
            else:
                raise TypeError(f"Missing required field {f.name!r}")

            object.__setattr__(self, f.name, value)

    @classmethod
    def _from_values(cls, values: dict[str, object], explicit: FrozenSet[str]) -> "ProxyConfig":
        """
        Internal constructor bypassing __init__ to control both the values and _explicit.
        """
        self = object.__new__(cls)
        for f in fields(cls):
            if f.name == "_explicit":
                continue
            object.__setattr__(self, f.name, values[f.name])
        object.__setattr__(self, "_explicit", explicit)
        return self

    def merge(self, other: Optional["ProxyConfig"]) -> "ProxyConfig":
        """
        Like dict.update:
        - fields set explicitly in `other` override those of `self`
        - the others keep the value of `self`
        - _explicit of the result is the union of both
        """
        if other is None:
            return self

        merged_values: dict[str, object] = {}
        for f in fields(self):
            if f.name == "_explicit":
                continue
            source = other if f.name in other._explicit else self
            merged_values[f.name] = getattr(source, f.name)

        return ProxyConfig._from_values(merged_values, self._explicit | other._explicit)

    @property
    def explicit(self) -> FrozenSet[str]:
        return self._explicit

#region: environment defaults

_default_config = None

def _read_environment() -> dict:
    values = {}
    for variable, name in ENV_VARIABLES.items():
        raw = os.environ.get(variable)
        if raw is None:
            continue
        try:
            values[name] = coerce(raw, bool)
        except CoercionError:
            logger.warning("Ignoring %s=%r: not a boolean value", variable, raw)
    return values

def default_config() -> ProxyConfig:
    """
    Config built from the environment (a .env file in the working directory is
    loaded first). Memoized until reset_default_config() is called.
    """
    global _default_config
    if _default_config is None:
        load_dotenv(os.path.join(os.getcwd(), '.env'))
        _default_config = ProxyConfig(**_read_environment())
    return _default_config

def reset_default_config():
    """
    Forget the memoized default config, the environment is read again on next use.
    """
    global _default_config
    _default_config = None

#endregion
