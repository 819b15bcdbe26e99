"""
Line-oriented terminal stream used by the engines.

MenuStream pairs a readable and a writable text stream (stdin/stdout unless
given). It only prints prompts and reads one line at a time; OSError raised by
the underlying streams (and undecodable input) is re-raised as StreamFailureError. End of input is the
empty string returned by read_line(), never an exception.
"""
import sys

from .faults import StreamFailureError
from .utils import Unset, coalesce


class MenuStream:
    """
    Paired reader/writer of a terminal session.

    Parameters
    - reader: readable text stream with readline() (sys.stdin by default).
    - writer: writable text stream with write()/flush() (sys.stdout by default).
    """

    def __init__(self, reader=Unset, writer=Unset):
        self._reader = coalesce(reader, sys.stdin)
        self._writer = coalesce(writer, sys.stdout)

    @property
    def reader(self):
        return self._reader

    @property
    def writer(self):
        return self._writer

    def write(self, text, /):
        try:
            self._writer.write(text)
        except OSError as error:
            raise StreamFailureError(f"cannot write to the output stream: {error}") from error

    def flush(self):
        try:
            self._writer.flush()
        except OSError as error:
            raise StreamFailureError(f"cannot flush the output stream: {error}") from error

    def show(self, text, /):
        """
        Write `text` and flush it so it is visible before the next read.
        """
        self.write(text)
        self.flush()

    def read_line(self):
        """
        Read one raw line, trailing newline included; "" means end of input.
        """
        try:
            return self._reader.readline()
        except (OSError, UnicodeDecodeError) as error:
            raise StreamFailureError(f"cannot read from the input stream: {error}") from error

    def __repr__(self):
        return f"{type(self).__name__}(reader={self._reader!r}, writer={self._writer!r})"


__all__ = (
    "MenuStream",
)
