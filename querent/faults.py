"""
Querent faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the engines
  can surface. Codes are grouped by domain to keep messages consistent and make
  logs/searches predictable.
- MenuException / MenuWarning: base types that carry a message + options and
  know how to render themselves with rich (header, message, single hint).
- trigger(): caller-side entry point to surface a fault (raise/warn, or print
  in shell mode).

Taxonomy
- stream (211xx): StreamFailureError, NoMoreInputError, StreamBusyError
- user input (2111x/2112x): ParseFailureError, InvalidSelectionError
- caller misuse (2113x): MissingEnvironmentDefaultError, MisconfiguredDefaultError,
  DefaultIndexError
- warnings (22xxx): ExampleMismatchWarning

Integration
- Engines raise; they never print diagnostics. Presenting a fault to the end
  user is the caller's job, typically through trigger(fault, shell=True).
- Host applications may tune the rendering through __main__ attributes:
  __prog__ (program name), __styles__ (rich styles), __codes__ (code labels).
"""
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across querent (stable identifiers).

    grouping (by high-level domain)
    - stream (2110x)
      • STREAM_FAILURE, NO_MORE_INPUT, STREAM_BUSY
    - user input (2111x/2112x)
      • PARSE_FAILURE, INVALID_SELECTION
    - caller misuse (2113x)
      • MISSING_ENVIRONMENT_DEFAULT, MISCONFIGURED_DEFAULT, DEFAULT_INDEX_OUT_OF_RANGE
    - warnings (22xxx)
      • EXAMPLE_MISMATCH
    """
    # --- stream errors (21xxx) ---
    STREAM_FAILURE              = 21101
    NO_MORE_INPUT               = 21102
    STREAM_BUSY                 = 21103

    # --- user input errors (21xxx) ---
    PARSE_FAILURE               = 21111
    INVALID_SELECTION           = 21121

    # --- caller misuse errors (21xxx) ---
    MISSING_ENVIRONMENT_DEFAULT = 21131
    MISCONFIGURED_DEFAULT       = 21132
    DEFAULT_INDEX_OUT_OF_RANGE  = 21133

    # --- warnings (22xxx) ---
    EXAMPLE_MISMATCH            = 22111

    def normalize(self):
        """
        label of this code as shown in rendered faults.

        a `__codes__` mapping defined in __main__ may relabel codes (e.g.
        {FaultCode.PARSE_FAILURE: "E-PARSE"}); otherwise the number is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    Build the rich renderable shared by errors and warnings.

    Layout
    - header: "[ <prog> — <code> | <Title> ]"
    - body: message, then " → hint"
    - fancy=True wraps the body in a Panel titled by the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", "querent"), "prog-name"),
        " — ",
        text(fault.code.normalize(), "code"),
        " | ",
        text(fault.title.title(), "title"),
        " ]"
    )
    message = text(coalesce(fault.message, ""), "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(fault.hint, "hint"))

    if fancy:
        return Panel(Group(message, hint), title=header, title_align="left")
    return Group(header, message, hint)


class MenuException(Exception):
    """
    Base class of every error raised by querent.

    Each subclass declares a stable code, a short title and a one-sentence
    hint; any of them may be overridden per instance through options. Other
    options carry the context of the fault (raw input, variable name, ...)
    and are readable as attributes.
    """
    __code__ = FaultCode.STREAM_FAILURE
    __title__ = "menu error"
    __hint__ = ""

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(coalesce(message, type(self).__title__))
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint", type(self).__hint__)

    def __rich__(self):
        return _render(self, {
            # header
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",

            # body
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "overrides must be given by keyword"
        return type(self)(self.message, **{**self.options, **overrides})


class StreamFailureError(MenuException):
    __code__ = FaultCode.STREAM_FAILURE
    __title__ = "stream failure"
    __hint__ = "check that the terminal streams are still open"


class NoMoreInputError(MenuException):
    __code__ = FaultCode.NO_MORE_INPUT
    __title__ = "no more input"
    __hint__ = "provide a default value or more input lines"


class StreamBusyError(MenuException):
    __code__ = FaultCode.STREAM_BUSY
    __title__ = "stream busy"
    __hint__ = "finish the current prompt before starting another one"


class ParseFailureError(MenuException):
    __code__ = FaultCode.PARSE_FAILURE
    __title__ = "parse failure"
    __hint__ = "enter a value of the expected type"


class InvalidSelectionError(MenuException):
    __code__ = FaultCode.INVALID_SELECTION
    __title__ = "invalid selection"
    __hint__ = "enter one of the listed labels or its number"


class MissingEnvironmentDefaultError(MenuException):
    __code__ = FaultCode.MISSING_ENVIRONMENT_DEFAULT
    __title__ = "missing environment default"
    __hint__ = "export the variable or declare a literal default instead"


class MisconfiguredDefaultError(MenuException):
    __code__ = FaultCode.MISCONFIGURED_DEFAULT
    __title__ = "misconfigured default"
    __hint__ = "declare a default that converts with the field type"


class DefaultIndexError(MisconfiguredDefaultError):
    __code__ = FaultCode.DEFAULT_INDEX_OUT_OF_RANGE
    __title__ = "default index out of range"
    __hint__ = "use a default index within the declared choices"


class MenuWarning(Warning):
    """
    Base class of the warnings emitted for non-fatal caller mistakes.
    """
    __code__ = FaultCode.EXAMPLE_MISMATCH
    __title__ = "menu warning"
    __hint__ = ""

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(coalesce(message, type(self).__title__))
        self.message = message
        self.options = MappingProxyType(options)

    __getattr__ = MenuException.__getattr__
    code = MenuException.code
    title = MenuException.title
    hint = MenuException.hint

    def __rich__(self):
        return _render(self, {
            # header
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",

            # body
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=3)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "overrides must be given by keyword"
        return type(self)(self.message, **{**self.options, **overrides})


class ExampleMismatchWarning(MenuWarning):
    __code__ = FaultCode.EXAMPLE_MISMATCH
    __title__ = "example mismatch"
    __hint__ = "give an example that converts with the field type"


def trigger(fault, /, **options):
    """
    surface a fault with the given presentation options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - shell=False (default): errors are raised, warnings go through warnings.warn.
    - shell=True: the fault is printed on the stderr console; errors then exit
      with status 1 unless deferred=True.

    typical options
    - shell, fancy, colorful, deferred, title, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "MenuException",
    "StreamFailureError",
    "NoMoreInputError",
    "StreamBusyError",
    "ParseFailureError",
    "InvalidSelectionError",
    "MissingEnvironmentDefaultError",
    "MisconfiguredDefaultError",
    "DefaultIndexError",
    "MenuWarning",
    "ExampleMismatchWarning",
    "trigger",
)
