"""
Querent engines and menu containers: ask, read, match, retry or fall back.

What this module provides
- Query outcomes: Accepted(value), Rejected(raw, error), Failed(error), the
  result of one prompt-read-parse attempt.
- Written engine
  • query(field, stream): exactly one attempt.
  • prompt(field, stream): loop until a value is accepted, the default is used,
    or the stream fails. prompt_many() reads several values from one line.
  • prompt_or_default(field, stream): one attempt, then the field default or type().
- Selected engine
  • select(field, stream): render the list once, read once, match or fall back.
    There is no retry: an unmatched input without default is an InvalidSelectionError.
- Values: container sharing one Format and one MenuStream between many fields.
- MenuTree + navigate(): nested selections kept in an arena of nodes addressed
  by index, each node remembering its parent for "back" entries.

Written engine states
    Prompting → Reading → Validating → {Accepted, RetryPrompting, Fallback, Failed}
- accepted by the converter and the predicate  → Accepted
- empty line, default configured               → Fallback
- conversion failure, default configured       → Fallback
- predicate refused a non-empty line           → RetryPrompting
- conversion failure without default           → RetryPrompting
- end of input                                 → Fallback, or NoMoreInputError
- stream failure                               → Failed (raised, never retried)

Quick start
    from querent import Values, Written, Selected, Format

    values = Values(Format(chip="* ", line_break=False, suffix=": ", prefix=""))
    name = values.written(Written("Author"))
    year = values.written(Written("Year", type=int, default="2022"))
    kind = values.selected(Selected("License", [("MIT", "mit"), ("BSD", "bsd")]))
"""
from collections import namedtuple
from contextlib import contextmanager
from typing import final

from .defaults import parse, resolve, split
from .faults import (
    DefaultIndexError,
    InvalidSelectionError,
    MisconfiguredDefaultError,
    NoMoreInputError,
    ParseFailureError,
    StreamBusyError,
    StreamFailureError,
)
from .fields import Choice, Selected, Written
from .formats import Format
from .streams import MenuStream
from .utils import Unset, coalesce


class Outcome:
    """
    Result of one query attempt (see Accepted, Rejected, Failed).
    """
    __slots__ = ()

    def __eq__(self, other, /):
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in type(self).__slots__)

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}({", ".join(repr(getattr(self, name)) for name in type(self).__slots__)})"


@final
class Accepted(Outcome):
    __slots__ = ("value",)
    __match_args__ = ("value",)

    def __init__(self, value):
        self.value = value


@final
class Rejected(Outcome):
    """
    The line was read but refused.

    error is the ParseFailureError when the conversion failed, None when the
    validation predicate refused the converted value.
    """
    __slots__ = ("raw", "error")
    __match_args__ = ("raw", "error")

    def __init__(self, raw, error=None):
        self.raw = raw
        self.error = error


@final
class Failed(Outcome):
    """
    Nothing could be read: StreamFailureError or NoMoreInputError.
    """
    __slots__ = ("error",)
    __match_args__ = ("error",)

    def __init__(self, error):
        self.error = error


def _written(field, /):
    if not isinstance(field, Written):
        raise TypeError("written field expected")
    return field


def _fallback(field, sep, /):
    """
    Resolve the field default before any I/O, so a misconfigured default fails fast.
    """
    if field.default is None:
        return Unset
    return resolve(field.default, field.type, sep=sep, field=field.message)


def query(field, stream, /, format=Unset, *, sep=Unset):
    """
    Run one prompt-read-parse attempt of a written field.

    Parameters
    - field: Written
    - stream: MenuStream
    - format: Unset | Format, the parent format the field's own format is merged over.
    - sep: Unset | str, when given the line holds many values separated by `sep`.

    Returns
    - Accepted(value): converted and accepted by field.until (a list when sep is given).
    - Rejected(raw, error): conversion failed (error set) or the predicate refused (error None).
    - Failed(error): the stream failed or reached its end.
    """
    _written(field)
    try:
        stream.show(field.render(format))
        line = stream.read_line()
    except StreamFailureError as error:
        return Failed(error)

    if not line:
        return Failed(NoMoreInputError(f"no more input for field {field.message!r}", field=field.message))

    raw = line.strip()
    if not raw and field.default is not None:
        # An empty answer asks for the default, even when the type accepts "".
        return Rejected(raw)
    try:
        if sep is Unset:
            value = parse(raw, field.type)
            accepted = field.until(value)
        else:
            if not (tokens := split(raw, sep)):
                return Rejected(raw)
            value = [parse(token, field.type) for token in tokens]
            accepted = all(map(field.until, value))
    except ParseFailureError as error:
        return Rejected(raw, error)

    return Accepted(value) if accepted else Rejected(raw)


def _ask(field, stream, format, sep, /):
    fallback = _fallback(_written(field), sep)
    while True:
        match query(field, stream, format, sep=sep):
            case Accepted(value):
                return value
            case Rejected(raw, error) if fallback is not Unset and (not raw or error is not None):
                return fallback
            case Rejected():
                continue
            case Failed(NoMoreInputError()) if fallback is not Unset:
                return fallback
            case Failed(error):
                raise error


def prompt(field, stream, /, format=Unset):
    """
    Ask a written field until a value is accepted.

    The loop has no attempt limit: it ends on an accepted value, on the
    default (empty line, unparsable line, end of input), or on an error.

    Raises
    - MisconfiguredDefaultError: the default does not convert (before any prompt).
    - NoMoreInputError: end of input and no default.
    - StreamFailureError: the stream failed.
    """
    return _ask(field, stream, format, Unset)


def prompt_many(field, stream, /, sep, format=Unset):
    """
    Ask several values of a written field on a single line.

    The line is split on `sep`, tokens are trimmed and empty ones dropped. Every
    token must convert and pass the predicate, otherwise the whole line is asked
    again (or the default, split the same way, is returned). Returns a list.
    """
    if not isinstance(sep, str) or not sep:
        raise ValueError("many values separator must be a non-empty string")
    return _ask(field, stream, format, sep)


def prompt_or_default(field, stream, /, format=Unset):
    """
    Ask a written field once; on any refusal return its default instead.

    Without a declared default, the value built by calling the field type
    without arguments is returned (0 for int, "" for str, ...). Stream failures
    still propagate.
    """
    fallback = _fallback(_written(field), Unset)
    match query(field, stream, format):
        case Accepted(value):
            return value
        case Failed(StreamFailureError() as error):
            raise error
    if fallback is not Unset:
        return fallback
    try:
        return field.type()
    except (TypeError, ValueError) as error:
        raise MisconfiguredDefaultError(
            f"field {field.message!r} has no default and its type cannot build one",
            type=field.type,
            field=field.message,
        ) from error


def select(field, stream, /, format=Unset):
    """
    Show a selected field once and return the value of the chosen entry.

    Matching (on the trimmed input)
    1. case-insensitive label;
    2. 1-based index;
    3. default index, when configured (no re-prompt);
    4. otherwise InvalidSelectionError carrying the raw input.

    The chosen entry's binding, if any, runs once with the stream before the
    value is returned; its exceptions propagate.

    Raises
    - DefaultIndexError: the default index is outside the choices.
    - InvalidSelectionError, NoMoreInputError, StreamFailureError.
    """
    choice, _ = _choose(field, stream, format)
    if choice.bind is not None:
        choice.bind(stream)
    return choice.value


def _choose(field, stream, format, /):
    """
    Render, read and match once; return the choice and whether input had ended.
    """
    if not isinstance(field, Selected):
        raise TypeError("selected field expected")
    choices = field.choices
    if (default := field.default) is not None and not 0 <= default < len(choices):
        raise DefaultIndexError(
            f"default index {default} of field {field.message!r} is out of range for {len(choices)} choices",
            index=default,
            size=len(choices),
            field=field.message,
        )

    stream.show(field.render(format))
    line = stream.read_line()

    if not line:
        if default is None:
            raise NoMoreInputError(f"no more input for field {field.message!r}", field=field.message)
        index = default
    elif (index := field.match(raw := line.strip())) is None:
        if default is None:
            raise InvalidSelectionError(f"{raw!r} matches none of the choices", raw=raw, field=field.message)
        index = default

    return choices[index], not line


Entry = namedtuple("Entry", ("kind", "label", "target", "bind"))
Entry.__doc__ = """
Entry of a MenuTree node.

kind is "leaf" (target is the returned value), "branch" (target is the child
node index) or "back" (target is the parent node index).
"""


class MenuTree:
    """
    Nested selections stored as an arena of nodes.

    Node 0 is the root. Each node keeps its title, its parent index (None for
    the root), an optional default entry index and its ordered entries. Moving
    down follows a branch entry, moving up follows the parent index, so
    navigation is a loop over indexes and never recursion.

    Example
        tree = MenuTree("Main menu")
        settings = tree.submenu(MenuTree.ROOT, "Settings")
        tree.leaf(settings, "Dark theme", "dark")
        tree.back(settings)
        tree.leaf(MenuTree.ROOT, "Quit", None)
    """
    ROOT = 0

    def __init__(self, title, /, default=Unset):
        self._nodes = []
        self._add(title, None, default)

    def _add(self, title, parent, default, /):
        if not isinstance(title, str) or not title.strip():
            raise ValueError("menu tree titles must be non-empty strings")
        if isinstance(default, bool) or not isinstance(default, int | Unset):
            raise TypeError("menu tree default must be an entry index")
        self._nodes.append({"title": title, "parent": parent, "default": default, "entries": []})
        return len(self._nodes) - 1

    def _append(self, node, entry, /):
        if not isinstance(entry.label, str) or not entry.label.strip():
            raise ValueError("menu tree entry labels must be non-empty strings")
        if entry.bind is not None and not callable(entry.bind):
            raise TypeError("menu tree entry bindings must be callable")
        entries = self._node(node)["entries"]
        if any(other.label.strip().casefold() == entry.label.strip().casefold() for other in entries):
            raise ValueError(f"menu tree node {node} already has an entry labeled {entry.label!r}")
        entries.append(entry)

    def _node(self, index, /):
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._nodes):
            raise IndexError(f"menu tree has no node {index!r}")
        return self._nodes[index]

    def __len__(self):
        return len(self._nodes)

    def title(self, node, /):
        return self._node(node)["title"]

    def parent(self, node, /):
        return self._node(node)["parent"]

    def entries(self, node, /):
        return tuple(self._node(node)["entries"])

    def submenu(self, parent, title, /, label=Unset, default=Unset):
        """
        Add a child node under `parent` and the branch entry leading to it.

        The entry label defaults to the child title. Returns the child index.
        """
        self._node(parent)
        child = self._add(title, parent, default)
        try:
            self._append(parent, Entry("branch", coalesce(label, title), child, None))
        except (TypeError, ValueError):
            self._nodes.pop()
            raise
        return child

    def leaf(self, node, label, value, /, bind=Unset):
        """
        Add an entry returning `value` (after running `bind`, if given).
        """
        self._append(node, Entry("leaf", label, value, coalesce(bind)))

    def back(self, node, /, label="Back"):
        """
        Add an entry returning to the parent node.
        """
        if (parent := self.parent(node)) is None:
            raise ValueError("the root node cannot go back")
        self._append(node, Entry("back", label, parent, None))

    def selected(self, node, /):
        """
        Build the selected field presenting the entries of `node`.
        """
        record = self._node(node)
        if not record["entries"]:
            raise ValueError(f"menu tree node {record['title']!r} has no entries")
        return Selected(
            record["title"],
            [Choice(entry.label, entry, bind=Unset if entry.bind is None else entry.bind) for entry in record["entries"]],
            default=record["default"],
        )


def navigate(tree, stream, /, format=Unset):
    """
    Walk a MenuTree from its root until a leaf entry is chosen; return its value.

    Each node is presented with the selected engine, so an unmatched input
    falls back to the node default or raises InvalidSelectionError. At end of
    input only a leaf default is returned; a branch or back default raises
    NoMoreInputError.
    """
    if not isinstance(tree, MenuTree):
        raise TypeError("navigate() argument must be a menu tree")
    node = MenuTree.ROOT
    while True:
        choice, exhausted = _choose(tree.selected(node), stream, format)
        entry = choice.value
        if exhausted and entry.kind != "leaf":
            # Nothing is left to read: only a leaf can end the walk.
            raise NoMoreInputError(f"no more input for menu {tree.title(node)!r}", field=tree.title(node))
        if entry.bind is not None:
            entry.bind(stream)
        match entry.kind:
            case "leaf":
                return entry.target
            case "branch" | "back":
                node = entry.target


class Values:
    """
    Container asking many fields through one stream with one shared format.

    Each call merges the field's own format over the container's format and
    takes exclusive access to the stream for its whole duration; starting
    another call meanwhile (e.g. from a binding) raises StreamBusyError.

    Parameters
    - format: Unset | Format, container-wide formatting (built-in defaults otherwise).
    - stream: Unset | MenuStream, stdin/stdout otherwise.
    """

    def __init__(self, format=Unset, stream=Unset):
        if not isinstance(format, Format | Unset):
            raise TypeError("values 'format' must be a format")
        if not isinstance(stream, MenuStream | Unset):
            raise TypeError("values 'stream' must be a menu stream")
        self._format = coalesce(format, Format())
        self._stream = MenuStream() if stream is Unset else stream
        self._busy = False

    @property
    def format(self):
        return self._format

    @property
    def stream(self):
        return self._stream

    @contextmanager
    def _borrow(self):
        if self._busy:
            raise StreamBusyError("the stream is already used by another prompt")
        self._busy = True
        try:
            yield self._stream
        finally:
            self._busy = False

    def written(self, field, /):
        """Ask a written field until a value is accepted (see prompt())."""
        with self._borrow() as stream:
            return prompt(field, stream, self._format)

    def many_written(self, field, /, sep):
        """Ask many values of a written field on one line (see prompt_many())."""
        with self._borrow() as stream:
            return prompt_many(field, stream, sep, self._format)

    def written_or_default(self, field, /):
        """Ask a written field once, falling back to its default (see prompt_or_default())."""
        with self._borrow() as stream:
            return prompt_or_default(field, stream, self._format)

    def selected(self, field, /):
        """Ask a selected field once (see select())."""
        with self._borrow() as stream:
            return select(field, stream, self._format)

    def navigate(self, tree, /):
        """Walk a menu tree until a leaf is chosen (see navigate())."""
        with self._borrow() as stream:
            return navigate(tree, stream, self._format)

    def __repr__(self):
        return f"values(format={self._format!r}, stream={self._stream!r})"


__all__ = (
    "Outcome",
    "Accepted",
    "Rejected",
    "Failed",
    "query",
    "prompt",
    "prompt_many",
    "prompt_or_default",
    "select",
    "Entry",
    "MenuTree",
    "navigate",
    "Values",
)
