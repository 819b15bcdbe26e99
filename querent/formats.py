"""
Querent formatting rules and their inheritance.

Overview
- Format: immutable layout configuration of a prompt.
  • chip: short marker printed before the message (default "--> ").
  • prefix: text printed right before the user input (default ">> ").
  • suffix: text printed right after the message and its hint (default "").
  • line_break: put the prefix and the input on a new line (default True).
  • show_default: display the default value hint (default True).

- merge(child, parent) / child.inherit(parent)
  • Per property, the child's value wins when the child customized it;
    otherwise the parent's stored value is inherited.

Customization tracking
- A property is customized when it was given to the constructor, even when the
  given value equals the built-in default. Non-customized properties are stored
  as Unset and read through DEFAULTS, so a Format is a sparse set of overrides.
- merge() keeps Unset for properties neither side customized, which makes it
  associative and idempotent:
    merge(merge(a, b), c) == merge(a, merge(b, c))
    merge(a, a) == a

Rendered layout of a written field
    <chip><message>[ (<hint>)]<suffix>{\\n}<prefix>
"""
from types import MappingProxyType

from .utils import Unset, rename

DEFAULTS = MappingProxyType({
    "chip": "--> ",
    "prefix": ">> ",
    "suffix": "",
    "line_break": True,
    "show_default": True,
})


def _option(name, kind, /):
    """
    Internal: read-only property resolving a customized value or its default.
    """

    @rename(name)
    def getter(self):
        value = object.__getattribute__(self, "_" + name)
        return DEFAULTS[name] if value is Unset else value

    getter.__doc__ = f"{name} ({kind.__name__}), {DEFAULTS[name]!r} unless customized."
    return property(getter)


class Format:
    """
    Layout configuration of a field, possibly sparse.

    Instances are immutable and hashable. Two formats are equal when they
    customize the same properties with the same values.
    """
    __slots__ = ("_chip", "_prefix", "_suffix", "_line_break", "_show_default")

    __properties__ = {
        "chip": str,
        "prefix": str,
        "suffix": str,
        "line_break": bool,
        "show_default": bool,
    }

    chip = _option("chip", str)
    prefix = _option("prefix", str)
    suffix = _option("suffix", str)
    line_break = _option("line_break", bool)
    show_default = _option("show_default", bool)

    def __init__(self, *, chip=Unset, prefix=Unset, suffix=Unset, line_break=Unset, show_default=Unset):
        arguments = {
            "chip": chip,
            "prefix": prefix,
            "suffix": suffix,
            "line_break": line_break,
            "show_default": show_default,
        }
        for name, value in arguments.items():
            if value is not Unset and not isinstance(value, kind := type(self).__properties__[name]):
                raise TypeError(f"format {name!r} must be a {kind.__name__}")
            object.__setattr__(self, "_" + name, value)

    def __setattr__(self, name, value, /):
        raise AttributeError("format objects are immutable")

    def __delattr__(self, name, /):
        raise AttributeError("format objects are immutable")

    def customized(self, name, /):
        """
        Tell whether the property was explicitly set on this format.
        """
        if name not in type(self).__properties__:
            raise ValueError(f"unknown format property {name!r}")
        return object.__getattribute__(self, "_" + name) is not Unset

    def customizations(self):
        """
        Return the explicitly set properties as a read-only mapping.
        """
        return MappingProxyType({
            name: object.__getattribute__(self, "_" + name)
            for name in type(self).__properties__
            if self.customized(name)
        })

    def inherit(self, parent, /):
        """
        Return this format completed with the properties of `parent`.
        """
        return merge(self, parent)

    def __eq__(self, other, /):
        if not isinstance(other, Format):
            return NotImplemented
        return self.customizations() == other.customizations()

    def __hash__(self):
        return hash(tuple(sorted(self.customizations().items())))

    def __repr__(self):
        return f"format({", ".join(f"{name}={value!r}" for name, value in self.customizations().items())})"

    def __rich_repr__(self):
        for name in type(self).__properties__:
            yield name, getattr(self, name), DEFAULTS[name]


def merge(child, parent, /):
    """
    Combine two formats property by property.

    Parameters
    - child: Format
      Overrides; its customized properties always win.
    - parent: Format
      Inherited values for the properties the child left unset.

    Returns
    - Format: a new format whose customized properties are the union of both,
      the child taking precedence. Properties neither side customized stay unset.

    Raises
    - TypeError: when an argument is not a Format.
    """
    if not isinstance(child, Format) or not isinstance(parent, Format):
        raise TypeError("merge() arguments must be formats")
    return Format(**(parent.customizations() | child.customizations()))


__all__ = (
    "DEFAULTS",
    "Format",
    "merge",
)
