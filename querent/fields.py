r"""
Querent field specifications and the selection matcher.

Overview
- Specs
  • Written: a free-text prompt converted into a typed value (converter given via 'type'),
    with an optional default, example, validation predicate and custom format.
  • Choice: one labeled entry of a selection, carrying its value and an optional binding.
  • Selected: a numbered list of choices, with an optional default index and custom format.
- Helpers
  • FieldDetails: the "(example: ..., default: ...)" hint rendered next to a written prompt.
  • match(raw, choices): selection-matching algorithm (label first, then 1-based index).
  • keep(value): the always-true validation predicate.

Introspection & representation
- FieldType metaclass provides stable __repr__/__rich_repr__ and exposes the
  fields declared in __introspectable__ as read-only properties (via mirror()).
  Properties defined by the class itself are kept as they are.
  Specs are built once and are immutable afterwards.

Rendering
- Written:
    <chip><message>[ (<hint>)]<suffix>{\n}<prefix>
- Selected (the list always ends with a new line before the prefix):
    <chip><message><suffix>
    1<choice-chip><label>[ (default)]
    2<choice-chip><label>
    <prefix>

Quick example:
    >>> year = Written("Year", type=int, default="2022")
    >>> kind = Selected("License", [("MIT", "mit"), ("BSD", "bsd")], default=0)
"""
import builtins
import functools
import operator
import re
import warnings
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from .defaults import DefaultValue, default as normalize_default, parse
from .faults import ExampleMismatchWarning, ParseFailureError
from .formats import Format, merge
from .utils import *


def keep(value, /):
    """
    Validation predicate accepting every value.
    """
    return True


class FieldType(type):
    """
    Metaclass that turns field specs into introspectable, read-only descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_message(cls, message, /):
    if not isinstance(message, str):
        raise TypeError(f"{cls.__typename__} 'message' must be a string")
    elif not message.strip():
        raise ValueError(f"{cls.__typename__} 'message' cannot be empty")
    return message


def _sanitize_format(cls, format, /):
    if not isinstance(format, Format | Unset):
        raise TypeError(f"{cls.__typename__} 'format' must be a format")
    return coalesce(format, Format())


class FieldDetails(NamedTuple):
    """
    Example/default annotation displayed next to a written prompt.

    The default is hidden when show_default is False; the example is always shown.
    """
    example: str | None = None
    default: DefaultValue | None = None
    show_default: bool = True

    def __str__(self):
        parts = []
        if self.example is not None:
            parts.append(f"example: {self.example}")
        if self.default is not None and self.show_default:
            parts.append(f"default: {self.default}")
        return f" ({", ".join(parts)})" if parts else ""


class Written(metaclass=FieldType):
    """
    Free-text field converted into a typed value.

    Parameters
    - message: str
      Text of the prompt. Must be non-empty.
    - type: Callable[[str], T]
      Converter applied to the trimmed input (str by default). ValueError,
      TypeError and ArithmeticError raised by it mean "not a valid value".
    - default: Unset | str | DefaultValue
      Value returned when the user enters nothing or something unparsable.
      Plain strings are literal defaults; use EnvironmentDefault for variables.
    - example: Unset | str
      Example shown in the hint. A warning is emitted if it does not convert.
    - until: Unset | Callable[[T], bool]
      Validation predicate; values it refuses are asked again.
    - format: Unset | Format
      Overrides merged over the container format.
    """

    __introspectable__ = (
        "message",
        "type",
        "default",
        "example",
        "until",
        "format",
    )
    __displayable__ = (
        "message",
        "type",
        "default",
        "example",
        "format",
    )

    def __init__(self, message, /, type=str, default=Unset, example=Unset, until=Unset, format=Unset):
        cls = builtins.type(self)
        self._message = _sanitize_message(cls, message)

        if not callable(type):
            raise TypeError(f"{cls.__typename__} 'type' must be callable")
        self._type = type

        self._default = None if default is Unset else normalize_default(default)

        if not isinstance(example, str | Unset):
            raise TypeError(f"{cls.__typename__} 'example' must be a string")
        self._example = coalesce(example)

        if not callable(until := coalesce(until, keep)):
            raise TypeError(f"{cls.__typename__} 'until' must be callable")
        self._until = until

        self._format = _sanitize_format(cls, format)

        if self._example is not None:
            try:
                parse(self._example.strip(), type)
            except ParseFailureError:
                # Only misleading for the user, so it does not prevent the field from working.
                warnings.warn(ExampleMismatchWarning(
                    f"example {self._example!r} of field {message!r} does not convert with its type",
                    field=message,
                    example=self._example,
                ), stacklevel=2)

    def details(self, show_default=True, /):
        return FieldDetails(self._example, self._default, show_default)

    def render(self, parent=Unset, /):
        """
        Render the prompt text with this field's format merged over `parent`.
        """
        format = merge(self._format, coalesce(parent, Format()))
        return "".join((
            format.chip,
            self._message,
            str(self.details(format.show_default)),
            format.suffix,
            "\n" if format.line_break else "",
            format.prefix,
        ))


class Choice(metaclass=FieldType):
    """
    Labeled entry of a selected field.

    Parameters
    - label: str
      Text shown in the list and matched (case-insensitively) against the input.
    - value: Any
      Object returned when this choice is selected.
    - chip: Unset | str
      Marker placed between the number and the label (" - " by default).
    - bind: Unset | Callable[[MenuStream], Any]
      Called once with the stream right after this choice is selected, before
      its value is returned. Exceptions propagate to the caller.
    """

    __introspectable__ = (
        "label",
        "value",
        "chip",
        "bind",
    )

    def __init__(self, label, value, /, chip=Unset, bind=Unset):
        if not isinstance(label, str):
            raise TypeError("choice 'label' must be a string")
        elif not (label := label.strip()):
            raise ValueError("choice 'label' cannot be empty")
        if not isinstance(chip, str | Unset):
            raise TypeError("choice 'chip' must be a string")
        if not callable(bind) and bind is not Unset:
            raise TypeError("choice 'bind' must be callable")
        self._label = label
        self._value = value
        self._chip = coalesce(chip, " - ")
        self._bind = coalesce(bind)

    @property
    def value(self):
        # Returned as given, containers included.
        return self._value


def match(raw, choices, /):
    """
    Find which choice the raw input designates.

    Algorithm (on the trimmed input)
    1. case-insensitive exact match against the labels, first one wins;
    2. otherwise, a positive 1-based index within the choices.

    Returns
    - int: the 0-based index of the matched choice.
    - None: nothing matched (default handling is up to the engine).
    """
    key = raw.strip().casefold()
    for index, choice in enumerate(choices):
        if choice.label.casefold() == key:
            return index
    try:
        number = int(key)
    except ValueError:
        return None
    if 1 <= number <= len(choices):
        return number - 1
    return None


class Selected(metaclass=FieldType):
    """
    Choice-from-list field.

    Parameters
    - message: str
      Header of the list. Must be non-empty.
    - choices: Iterable[Choice | tuple[str, Any]] | Mapping[str, Any]
      Ordered entries; pairs and mappings are turned into Choice objects.
      At least one entry is required and labels must be unique (case-insensitively).
    - default: Unset | int
      0-based index of the choice used when the input matches nothing.
      Its range is checked when the selection happens (DefaultIndexError).
    - format: Unset | Format
      Overrides merged over the container format.
    """

    __introspectable__ = (
        "message",
        "choices",
        "default",
        "format",
    )

    def __init__(self, message, choices, /, default=Unset, format=Unset):
        cls = type(self)
        self._message = _sanitize_message(cls, message)

        if isinstance(choices, Mapping):
            choices = choices.items()
        if not isinstance(choices, Iterable) or isinstance(choices, str):
            raise TypeError(f"{cls.__typename__} 'choices' must be iterable")

        sanitized = []
        labels = set()
        for choice in choices:
            if not isinstance(choice, Choice):
                try:
                    label, value = choice
                except (TypeError, ValueError):
                    raise TypeError(f"{cls.__typename__} 'choices' must be choices or (label, value) pairs") from None
                choice = Choice(label, value)
            if (key := choice.label.casefold()) in labels:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicated labels")
            labels.add(key)
            sanitized.append(choice)
        if not sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot be empty")
        self._choices = tuple(sanitized)

        if isinstance(default, bool) or not isinstance(default, int | Unset):
            raise TypeError(f"{cls.__typename__} 'default' must be an index")
        self._default = coalesce(default)

        self._format = _sanitize_format(cls, format)

    def match(self, raw, /):
        return match(raw, self._choices)

    def render(self, parent=Unset, /):
        """
        Render the header, the numbered list and the input prefix.
        """
        format = merge(self._format, coalesce(parent, Format()))
        lines = [f"{format.chip}{self._message}{format.suffix}\n"]
        for index, choice in enumerate(self._choices):
            marker = " (default)" if format.show_default and index == self._default else ""
            lines.append(f"{index + 1}{choice.chip}{choice.label}{marker}\n")
        lines.append(format.prefix)
        return "".join(lines)


__all__ = (
    "FieldDetails",
    "Written",
    "Choice",
    "Selected",
    "match",
    "keep",
)
