# inistore/parser.py
"""
inistore.parser
---------------

Read INI-style text into a store.

Accepted syntax::

    ; comment            # also a comment
    global = applies everywhere      (before any header: default section)

    [Section]
    key = value          ; inline comments need leading whitespace
    other: value
    multi = first line
        continued line   (leading whitespace continues the previous value)

Section and option names are case-insensitive. A ``[default]`` header
addresses the default section.
"""

import logging
from typing import Iterable, Optional, Type

from .exceptions import ParseError
from .resolver import Resolver
from .store import Store
from .utils import DEFAULT_SECTION, expand_path

log = logging.getLogger(__name__)

COMMENT_CHARS = (";", "#")

# An inline comment must be separated from the value by whitespace so that
# values like "http://host/#anchor" survive.
INLINE_COMMENT_MARKERS = (" ;", "\t;", " #", "\t#")


def strip_comment(text: str) -> str:
    """Cut ``text`` at the first whitespace-prefixed ``;`` or ``#``."""
    cut = len(text)
    for marker in INLINE_COMMENT_MARKERS:
        i = text.find(marker)
        if i != -1 and i < cut:
            cut = i
    return text[:cut]


def parse_lines(lines: Iterable[str], store: Optional[Store] = None,
                store_cls: Type[Store] = Resolver) -> Store:
    """
    Parse INI lines into ``store`` (a new ``store_cls`` if not given).

    Later definitions of the same key overwrite earlier ones.

    Raises:
        ParseError: On a line that cannot be understood.
    """
    if store is None:
        store = store_cls()
    section = DEFAULT_SECTION
    option = None

    for line_no, raw_line in enumerate(lines, start=1):
        raw_line = raw_line.rstrip("\r\n")
        line = raw_line.strip()

        if not line or line.startswith(COMMENT_CHARS):
            continue

        if raw_line[0] in " \t" and option is not None:
            previous = store[section][option]
            value = strip_comment(line).strip()
            store.add_option(section, option, f"{previous}\n{value}")
            continue

        if line.startswith("["):
            if not line.endswith("]") or len(line) < 3:
                raise ParseError("malformed section header", line_no, raw_line)
            section = line[1:-1].strip().lower()
            if not section:
                raise ParseError("empty section name", line_no, raw_line)
            store.add_section(section)
            option = None
            continue

        separators = [i for i in (line.find("="), line.find(":")) if i != -1]
        if not separators or min(separators) == 0:
            raise ParseError("could not parse line", line_no, raw_line)
        i = min(separators)

        option = line[:i].strip().lower()
        value = strip_comment(line[i + 1:]).strip()
        if not store.add_option(section, option, value):
            log.debug(f"DEBUG [inistore.parse_lines]: Line {line_no} overrides earlier value of {section}.{option}.")

    return store


def parse_string(text: str, store: Optional[Store] = None, store_cls: Type[Store] = Resolver) -> Store:
    """Parse INI text. See ``parse_lines``."""
    return parse_lines(text.splitlines(), store, store_cls)


def parse_stream(fp, store: Optional[Store] = None, store_cls: Type[Store] = Resolver) -> Store:
    """Parse an open text stream. See ``parse_lines``."""
    return parse_lines(fp, store, store_cls)


def read_file(path: str, encoding: str = "utf-8", store: Optional[Store] = None,
              store_cls: Type[Store] = Resolver) -> Store:
    """
    Parse the INI file at ``path`` (``~`` and ``$VARS`` are expanded).

    Raises:
        FileNotFoundError: If the file does not exist.
        ParseError: On malformed content.
    """
    path = expand_path(path)
    log.debug(f"DEBUG [inistore.read_file]: Reading INI file {path} ({encoding}).")
    with open(path, mode="r", encoding=encoding) as f:
        return parse_stream(f, store, store_cls)
