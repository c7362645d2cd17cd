# inistore/utils.py
"""
inistore.utils
--------------

Small helpers shared by the store, the loader and the CLI: name
normalization, ``section.option`` key handling and path expansion.
"""

import os
from typing import Optional, Tuple

DEFAULT_SECTION = "default"


def normalize(name: str) -> str:
    """Return the stored form of a section or option name.

    Only case is folded; surrounding whitespace is significant, the parser
    strips it before names reach the store.
    """
    return name.lower()


def split_key(key: str) -> Tuple[str, str]:
    """Split a ``section.option`` key into its normalized parts.

    Only the first dot separates the section; option names may contain
    dots themselves. A key without a dot addresses the default section.

    Examples:
        >>> split_key("DB.Host")
        ('db', 'host')
        >>> split_key("timeout")
        ('default', 'timeout')
        >>> split_key("paths.log.dir")
        ('paths', 'log.dir')
    """
    if "." not in key:
        return DEFAULT_SECTION, normalize(key)
    section, option = key.split(".", 1)
    return normalize(section), normalize(option)


def join_key(section: str, option: str) -> str:
    """Inverse of ``split_key`` for display and provenance keys."""
    return f"{section}.{option}"


def expand_path(path: Optional[str]) -> Optional[str]:
    """Expand ~ and environment variables in a path string.

    Returns None if input was None.
    """
    if path is None:
        return None
    return os.path.expandvars(os.path.expanduser(path))

