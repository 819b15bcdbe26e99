"""
Small helpers shared by the formats, fields and menus layers.

- Unset: the "not given" marker. Formats use it to remember which properties
  were customized, fields use it for optional parameters. None stays a value.
- coalesce(object, default): Unset becomes `default`, anything else is kept.
- rename(...): give generated accessors a readable name in tracebacks.
- mirror(name): read-only property over `self._name`; containers come back frozen.

    >>> coalesce(Unset, ">> ")
    '>> '
    >>> coalesce("", ">> ")
    ''
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker; there is exactly one instance.

    Unset is falsy and prints as "Unset". It can take part in `X | Unset`
    unions, so `isinstance(value, str | Unset)` accepts strings and the marker.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when it is Unset.

    Only the marker is replaced: None, 0, "" and empty containers are kept.
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    Set __name__ and __qualname__ of a callable.

    rename(callable, name) updates and returns the callable; rename(name)
    returns a decorator doing the same. TypeError on bad arguments.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a renamable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def decorator(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must decorate a callable")
                return rename(callable, name)

            return rename(decorator, "rename")
        case count:
            raise TypeError(f"rename() takes 1 or 2 arguments ({count} given)")


def _freeze(object):
    # Shallow only: items of a frozen container are returned as they are.
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Build the read-only property `name` backed by the attribute `_name`.

    Lists, mappings and sets are returned as tuple, MappingProxyType and
    frozenset so a built field cannot be changed through its properties.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
