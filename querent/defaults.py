"""
Default values of written fields and the textual-parse rule they share with user input.

Overview
- parse(raw, type): convert a piece of text with the field converter; conversion
  errors become ParseFailureError (user misuse, recoverable).
- DefaultValue: base of the two default sources.
  • LiteralDefault(text): a default written in the program.
  • EnvironmentDefault(variable): a default read from the process environment,
    looked up once at construction (MissingEnvironmentDefaultError when absent).
- resolve(default, type): lazy typed resolution of a default; a default that
  does not convert is a programmer error and raises MisconfiguredDefaultError,
  never ParseFailureError.
"""
import os
from abc import ABC, abstractmethod

from .faults import MissingEnvironmentDefaultError, MisconfiguredDefaultError, ParseFailureError
from .utils import Unset, coalesce


def _typename(type, /):
    return getattr(type, "__qualname__", repr(type))


def parse(raw, type, /):
    """
    Convert `raw` with the converter `type`.

    Parameters
    - raw: str
      Already trimmed text.
    - type: Callable[[str], T]
      Converter; ValueError, TypeError and ArithmeticError mean "not convertible".

    Returns
    - the converted value.

    Raises
    - ParseFailureError: with options raw and type.
    """
    try:
        return type(raw)
    except (ValueError, TypeError, ArithmeticError) as error:
        raise ParseFailureError(f"cannot convert {raw!r} to {_typename(type)}", raw=raw, type=type) from error


def split(raw, sep, /):
    """
    Split a many-values line into trimmed, non-empty tokens.
    """
    return [token for token in map(str.strip, raw.split(sep)) if token]


class DefaultValue(ABC):
    """
    Text source of a default value.

    Subclasses only decide where the text comes from; conversion to the field
    type is deferred to resolve().
    """
    __slots__ = ("_text",)

    @property
    def text(self):
        """The untyped default text, as displayed in prompt hints."""
        return self._text

    def resolve(self, type, /, *, sep=Unset, field=Unset):
        return resolve(self, type, sep=sep, field=field)

    def __str__(self):
        return self._text

    def __eq__(self, other, /):
        if type(other) is not type(self):
            return NotImplemented
        return self.__rich_repr__() == other.__rich_repr__()

    def __hash__(self):
        return hash((type(self), self.__rich_repr__()))

    def __repr__(self):
        return f"{type(self).__name__}({", ".join(f"{name}={value!r}" for name, value in self.__rich_repr__())})"

    @abstractmethod
    def __rich_repr__(self):
        raise NotImplementedError


class LiteralDefault(DefaultValue):
    __slots__ = ()

    def __init__(self, text, /):
        if not isinstance(text, str):
            raise TypeError("literal default must be a string")
        self._text = text

    def __rich_repr__(self):
        return (("text", self._text),)


class EnvironmentDefault(DefaultValue):
    """
    Default read from an environment variable when the field is declared.

    The lookup happens here, once; later changes to the environment do not
    affect an existing field. `environ` can be any mapping (os.environ by default).
    """
    __slots__ = ("_variable",)

    def __init__(self, variable, /, environ=Unset):
        if not isinstance(variable, str):
            raise TypeError("environment default variable must be a string")
        elif not (variable := variable.strip()):
            raise ValueError("environment default variable cannot be empty")
        try:
            self._text = coalesce(environ, os.environ)[variable]
        except KeyError:
            raise MissingEnvironmentDefaultError(
                f"environment variable {variable!r} is not set",
                variable=variable
            ) from None
        self._variable = variable

    @property
    def variable(self):
        return self._variable

    def __rich_repr__(self):
        return (("variable", self._variable), ("text", self._text))


def default(object, /):
    """
    Normalize a user-provided default: strings become LiteralDefault.
    """
    if isinstance(object, DefaultValue):
        return object
    if isinstance(object, str):
        return LiteralDefault(object)
    raise TypeError("default must be a string or a DefaultValue")


def resolve(default, type, /, *, sep=Unset, field=Unset):
    """
    Convert a default value into the target type.

    Parameters
    - default: DefaultValue
    - type: Callable[[str], T], the same converter used for user input.
    - sep: Unset | str
      When given, the text is split like a many-values answer and a list is returned.
    - field: Unset | str
      Name (message) of the field, reported in the error.

    Raises
    - MisconfiguredDefaultError: the default does not convert; the calling code
      declared it for the wrong type.
    """
    if not isinstance(default, DefaultValue):
        raise TypeError("resolve() argument must be a DefaultValue")
    where = f" for field {field!r}" if field is not Unset else ""
    try:
        if sep is Unset:
            return parse(default.text.strip(), type)
        return [parse(token, type) for token in split(default.text, sep)]
    except ParseFailureError as error:
        raise MisconfiguredDefaultError(
            f"default {default.text!r}{where} does not convert to {_typename(type)}",
            default=default,
            type=type,
            field=coalesce(field),
        ) from error


__all__ = (
    "DefaultValue",
    "LiteralDefault",
    "EnvironmentDefault",
    "parse",
    "split",
    "default",
    "resolve",
)
