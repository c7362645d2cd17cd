# inistore/store.py
"""
inistore.store
--------------

In-memory section store.

A ``Store`` is a ``dict`` mapping normalized section names to ``dict``
objects of normalized option names and raw (un-interpolated) string
values. One entry, ``DEFAULT_SECTION``, always exists and acts as the
fallback layer for option existence, option listing and interpolation.

The parser and loader populate a store through the mutators; the read
accessors never modify it.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import ErrorKind, GetError
from .utils import DEFAULT_SECTION, normalize

log = logging.getLogger(__name__)


class Store(dict):
    """
    Mapping of section name -> (option name -> raw string value).

    Keys are lower-cased on the way in, through the mutators and the
    ``dict`` methods alike; item access and ``in`` are case-insensitive.
    ``del``, ``pop`` and ``popitem`` refuse to drop the default section and
    ``clear`` leaves it in place, empty.
    """

    def __init__(self, data: Optional[Mapping[str, Mapping[str, Any]]] = None):
        super().__init__()
        super().__setitem__(DEFAULT_SECTION, {})
        for section, options in (data or {}).items():
            self.add_section(section)
            for option, value in options.items():
                self.add_option(section, option, value)

    # --- Section accessors ---

    def get_sections(self) -> List[str]:
        """Return every section name. The default section is always included."""
        return list(self.keys())

    def has_section(self, section: str) -> bool:
        """Check whether ``section`` exists (case-insensitive)."""
        return super().__contains__(normalize(section))

    def get_options(self, section: str) -> List[str]:
        """
        List the options visible from ``section``.

        The default section's options come first, then the section's own,
        each name listed once even when the section shadows a default.

        Raises:
            GetError: ``SECTION_NOT_FOUND`` if the section does not exist.
        """
        section = normalize(section)
        if not super().__contains__(section):
            raise GetError(ErrorKind.SECTION_NOT_FOUND, section=section)

        options = list(self[DEFAULT_SECTION])
        seen = set(options)
        for option in self[section]:
            if option not in seen:
                options.append(option)
                seen.add(option)
        return options

    def has_option(self, section: str, option: str) -> bool:
        """
        Check whether ``option`` is visible from ``section``.

        False if the section does not exist; otherwise true when the option
        is set in the section itself or in the default section.
        """
        section = normalize(section)
        option = normalize(option)
        if not super().__contains__(section):
            return False
        return option in self[DEFAULT_SECTION] or option in self[section]

    # --- Mutators (used by the parser and loader) ---

    def add_section(self, section: str) -> bool:
        """Create ``section`` if needed. Returns True if it was newly created."""
        section = normalize(section)
        if super().__contains__(section):
            return False
        super().__setitem__(section, {})
        return True

    def remove_section(self, section: str) -> bool:
        """
        Remove ``section`` and all its options.

        Returns False if it does not exist or is the default section, which
        cannot be removed.
        """
        section = normalize(section)
        if section == DEFAULT_SECTION or not super().__contains__(section):
            return False
        super().__delitem__(section)
        log.debug(f"DEBUG [inistore.remove_section]: Removed section '{section}'.")
        return True

    def add_option(self, section: str, option: str, value: Any) -> bool:
        """
        Set ``option`` in ``section`` to ``value`` (stored as ``str``),
        creating the section when needed.

        Returns True if the option was new, False if an existing value was
        replaced.
        """
        self.add_section(section)
        section = normalize(section)
        option = normalize(option)
        options = self[section]
        is_new = option not in options
        options[option] = value if isinstance(value, str) else str(value)
        return is_new

    def remove_option(self, section: str, option: str) -> bool:
        """Remove ``option`` from ``section``. Returns False if either is absent."""
        section = normalize(section)
        option = normalize(option)
        if not super().__contains__(section):
            return False
        options = self[section]
        if option not in options:
            return False
        del options[option]
        return True

    # --- dict protocol, kept consistent with the invariants above ---

    def __getitem__(self, section: str) -> Dict[str, str]:
        return super().__getitem__(normalize(section) if isinstance(section, str) else section)

    def get(self, section: str, default: Any = None) -> Any:
        return super().get(normalize(section) if isinstance(section, str) else section, default)

    def __setitem__(self, section: str, options: Mapping[str, Any]):
        """Replace ``section`` wholesale; names are normalized, values stored as ``str``."""
        super().__setitem__(normalize(section), {})
        for option, value in options.items():
            self.add_option(section, option, value)

    def __delitem__(self, section: str):
        section = normalize(section)
        if section == DEFAULT_SECTION:
            raise ValueError("The default section cannot be removed.")
        super().__delitem__(section)

    def update(self, *args, **kwargs):
        for section, options in dict(*args, **kwargs).items():
            self[section] = options

    def __ior__(self, other):
        self.update(other)
        return self

    def setdefault(self, section: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
        if section not in self:
            self[section] = options or {}
        return self[section]

    def pop(self, section: str, *default):
        section = normalize(section)
        if section == DEFAULT_SECTION:
            raise ValueError("The default section cannot be removed.")
        return super().pop(section, *default)

    def popitem(self):
        """Remove and return the most recently added section other than the default one."""
        for section in reversed(list(self.keys())):
            if section != DEFAULT_SECTION:
                return section, super().pop(section)
        raise KeyError("popitem(): no removable sections")

    def clear(self):
        """Remove every section; the default section stays, emptied."""
        super().clear()
        super().__setitem__(DEFAULT_SECTION, {})

    # --- Utility Methods ---

    def __contains__(self, key: Any) -> bool:
        if isinstance(key, str):
            return super().__contains__(normalize(key))
        return super().__contains__(key)

    def as_dict(self) -> Dict[str, Dict[str, str]]:
        """Return the store as plain nested dictionaries (deep copy)."""
        return {section: copy.deepcopy(options) for section, options in self.items()}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({super().__repr__()})"
