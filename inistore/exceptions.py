# inistore/exceptions.py
"""
inistore.exceptions
-------------------

Custom exceptions for inistore.

Lookup failures are all raised as ``GetError``; callers branch on its
``kind`` attribute rather than on exception subclasses.
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure kinds a value lookup can end in."""

    SECTION_NOT_FOUND = "section not found"
    OPTION_NOT_FOUND = "option not found"
    MAX_DEPTH_REACHED = "max depth reached"
    COULD_NOT_PARSE = "could not parse"


class GetError(Exception):
    """
    Raised by the lookup accessors.

    Every instance carries the same five fields so callers get a uniform
    diagnostic shape:

    Attributes:
        kind: The ``ErrorKind``.
        type_hint: ``"int"``, ``"float"`` or ``"bool"`` for parse failures, else ``""``.
        value: The offending string for parse failures, else ``""``.
        section: Normalized section name.
        option: Normalized option name.
    """

    def __init__(self, kind: ErrorKind, type_hint: str = "", value: str = "",
                 section: str = "", option: str = ""):
        self.kind = kind
        self.type_hint = type_hint
        self.value = value
        self.section = section
        self.option = option
        super().__init__(self._format())

    def _format(self) -> str:
        if self.kind is ErrorKind.SECTION_NOT_FOUND:
            return f"section not found: {self.section}"
        if self.kind is ErrorKind.OPTION_NOT_FOUND:
            return f"option not found: {self.option} (section {self.section!r})"
        if self.kind is ErrorKind.MAX_DEPTH_REACHED:
            return f"possible cycle while unfolding variables: max depth reached for {self.section}.{self.option}"
        return f"could not parse {self.type_hint} value {self.value!r} for {self.section}.{self.option}"


class ParseError(ValueError):
    """
    Raised when INI text contains a line that is neither a comment, a
    section header, an option nor a continuation.
    """

    def __init__(self, message: str, line_no: int = 0, line: str = ""):
        super().__init__(f"line {line_no}: {message}: {line!r}" if line_no else message)
        self.line_no = line_no
        self.line = line


class MissingMandatoryConfig(Exception):
    """
    Raised when one or more mandatory ``section.option`` keys are missing.
    """

    def __init__(self, keys):
        super().__init__(f"Missing mandatory configuration keys: {', '.join(keys)}")
        self.missing_keys = keys
