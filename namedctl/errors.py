"""Exceptions raised by the zone-block and rndc.conf parsers and the rndc transport."""

from __future__ import annotations


class ParseError(Exception):
    """Generic syntax failure.

    Base class of every parser error so callers can catch one type.
    ``expected`` names the production that failed and ``remaining`` holds
    the start of the unparsed input, for diagnostics.
    """

    def __init__(self, message: str, expected: str | None = None, remaining: str | None = None):
        super().__init__(message)
        self.message = message
        self.expected = expected
        self.remaining = remaining

    def __str__(self) -> str:
        if self.remaining is None:
            return self.message
        return f"{self.message} (at {self.remaining!r})"


# ---------- zone-block grammar ----------

class InvalidZoneType(ParseError):
    """The ``type`` statement names an unknown zone type."""


class InvalidDnsClass(ParseError):
    """The zone header carries a class other than IN, CH or HS."""


class InvalidIpAddress(ParseError):
    """An address literal could not be parsed (also raised by rndc.conf)."""


class MissingField(ParseError):
    """A mandatory field is absent (also raised by rndc.conf)."""


class Incomplete(ParseError):
    """Input ended in the middle of a statement (also raised by rndc.conf)."""


# ---------- rndc.conf grammar ----------

class InvalidServerAddress(ParseError):
    """A ``server`` statement names something that is neither a host nor an address."""


class CircularInclude(ParseError):
    """A file includes itself, directly or through other files."""


class FileNotFound(ParseError):
    """An included (or root) file does not exist."""


class IoError(ParseError):
    """A file exists but could not be read."""


# ---------- transport ----------

class RndcError(Exception):
    """An rndc command failed or could not be run."""

    def __init__(self, command: str, output: str):
        super().__init__(f"rndc {command} failed: {output}")
        self.command = command
        self.output = output

    @property
    def not_found(self) -> bool:
        return "not found" in self.output.lower()
