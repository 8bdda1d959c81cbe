"""Console output for results, warnings and fatal errors."""

from __future__ import annotations

import sys


class FatalError(Exception):
    """An error that ends the command."""

    exit_code = 1


class ConsoleOutput:
    """Writes results to stdout and warnings and errors to stderr.

    The streams default to the current sys.stdout and sys.stderr.
    """

    def __init__(self, out=None, err=None) -> None:
        self._out = out
        self._err = err

    @property
    def out(self):
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self):
        return self._err if self._err is not None else sys.stderr

    def write(self, text: str) -> int:
        """Write raw text to the output stream."""
        return self.out.write(text)

    def fatal(self, message: str) -> None:
        """Report an error on stderr and raise FatalError."""
        line = message if message.endswith("\n") else message + "\n"
        self.err.write(line)
        self.err.flush()
        raise FatalError(message.rstrip("\n"))

    def print(self, message: str) -> None:
        """Write a message to the output stream as is."""
        self.out.write(message)

    def warn(self, message: str) -> None:
        """Write a warning to stderr as is."""
        self.err.write(message)