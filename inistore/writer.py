# inistore/writer.py
"""
inistore.writer
---------------

Serialize a store back to INI text.

Output layout: optional ``#`` header lines, the default section first,
then the remaining sections in insertion order. Multi-line values are
written with tab-indented continuation lines. Comments and the layout of
the file the store was read from are not preserved.

The INI syntax has no quoting, so some names and values cannot be written
in a form the parser reads back unchanged. ``dumps`` raises ``ValueError``
for those instead of writing something else.
"""

import logging
from typing import Mapping, Optional

from .parser import COMMENT_CHARS, strip_comment
from .utils import DEFAULT_SECTION, expand_path

log = logging.getLogger(__name__)


def _is_single_line(text: str) -> bool:
    # also catches \r and the other separators str.splitlines() breaks on
    return text.splitlines() in ([], [text])


def check_section(section: str) -> None:
    """Raise ``ValueError`` if ``section`` cannot be written as a header."""
    if not section or section != section.strip() or not _is_single_line(section):
        raise ValueError(f"Section name {section!r} cannot be written as INI.")


def check_option(section: str, option: str) -> None:
    """Raise ``ValueError`` if ``option`` cannot be written as a key."""
    if (not option or option != option.strip() or not _is_single_line(option)
            or "=" in option or ":" in option
            or option.startswith(COMMENT_CHARS) or option.startswith("[")):
        raise ValueError(f"Option name {option!r} in section {section!r} cannot be written as INI.")


def check_value(section: str, option: str, value: str) -> None:
    """
    Raise ``ValueError`` if ``value`` would not read back unchanged.

    Each line must be free of surrounding whitespace, must not start with
    a comment character and must not contain an inline comment marker.
    Continuation lines must not be empty.
    """
    for i, line in enumerate(value.split("\n")):
        if (line != line.strip() or not _is_single_line(line)
                or line.startswith(COMMENT_CHARS) or strip_comment(line) != line
                or (i > 0 and not line)):
            raise ValueError(f"Value of {section}.{option} ({value!r}) cannot be written as INI.")


def _format_value(value: str) -> str:
    return "\n\t".join(value.split("\n"))


def dumps(store: Mapping[str, Mapping[str, str]], header: Optional[str] = None) -> str:
    """
    Return ``store`` as INI text.

    Raises:
        ValueError: If a section, option or value cannot be represented.
    """
    chunks = []
    if header:
        chunks.append("".join(f"# {line}\n" for line in header.splitlines()))

    sections = [DEFAULT_SECTION] + [s for s in store if s != DEFAULT_SECTION]
    for section in sections:
        options = store.get(section)
        if options is None:
            continue
        # Skip an empty default section; an empty named section still
        # needs its header to exist after a round trip.
        if section == DEFAULT_SECTION and not options:
            continue
        check_section(section)
        body = [f"[{section}]\n"]
        for option, value in options.items():
            check_option(section, option)
            check_value(section, option, value)
            body.append(f"{option} = {_format_value(value)}\n")
        chunks.append("".join(body))

    return "\n".join(chunks)


def write_file(store: Mapping[str, Mapping[str, str]], path: str, header: Optional[str] = None) -> None:
    """
    Write ``store`` as INI text to ``path`` (UTF-8).

    The text is built before the file is opened, so a ``ValueError`` from
    ``dumps`` leaves an existing file untouched.
    """
    text = dumps(store, header)
    path = expand_path(path)
    with open(path, mode="w", encoding="utf-8") as f:
        f.write(text)
    log.debug(f"DEBUG [inistore.write_file]: Wrote {len(store)} sections to {path}.")
