# inistore/resolver.py
"""
inistore.resolver
-----------------

Value lookup on top of a ``Store``: raw fetch, ``%(name)s`` unfolding and
typed accessors.

Unfolding example::

    [default]
    host = example.com

    [web]
    url = http://%(host)s/index.html

``Resolver.get_string("web", "url")`` returns
``"http://example.com/index.html"``. A section-local ``host`` would take
precedence over the default one.

There is no cycle detection as such: unfolding stops after
``DEPTH_VALUES`` passes and the lookup fails with ``MAX_DEPTH_REACHED``.
A very long acyclic chain of references hits the same limit.
"""

import logging
import re

from .exceptions import ErrorKind, GetError
from .store import Store
from .utils import DEFAULT_SECTION, normalize

log = logging.getLogger(__name__)

# Maximum number of substitution passes in get_string().
DEPTH_VALUES = 200

# Strings accepted by get_bool(), matched after lower-casing.
BOOL_STRINGS = {
    "0": False,
    "1": True,
    "f": False,
    "false": False,
    "n": False,
    "no": False,
    "off": False,
    "on": True,
    "t": True,
    "true": True,
    "y": True,
    "yes": True,
}

VAR_REGEXP = re.compile(r"%\(([a-zA-Z0-9_.\-]+)\)s")

# Decimal integers only: optional sign, ASCII digits, no padding or "_".
INT_REGEXP = re.compile(r"[+-]?[0-9]+")


class Resolver(Store):
    """
    A ``Store`` with the lookup API.

    All accessors take section and option names case-insensitively and
    either return a fully resolved value or raise a single ``GetError``.
    """

    def get_raw_string(self, section: str, option: str) -> str:
        """
        Return the stored value of ``option`` in ``section`` without unfolding.

        Unlike ``has_option``, this does not fall back to the default
        section: the option must be set in ``section`` itself.

        Raises:
            GetError: ``SECTION_NOT_FOUND`` if the section is absent,
                ``OPTION_NOT_FOUND`` if the option is not set in it.
        """
        section = normalize(section)
        option = normalize(option)

        if not self.has_section(section):
            raise GetError(ErrorKind.SECTION_NOT_FOUND, section=section, option=option)
        try:
            return self[section][option]
        except KeyError:
            raise GetError(ErrorKind.OPTION_NOT_FOUND, section=section, option=option) from None

    def get_string(self, section: str, option: str) -> str:
        """
        Return the value of ``option`` in ``section`` with ``%(name)s``
        references unfolded.

        One reference is substituted per pass, always the first one left
        in the string. Referenced names are looked up in ``section`` first
        and then in the default section.

        Raises:
            GetError: as ``get_raw_string``; ``OPTION_NOT_FOUND`` for a
                reference that resolves to nothing; ``MAX_DEPTH_REACHED``
                when ``DEPTH_VALUES`` passes did not unfold everything.
        """
        value = self.get_raw_string(section, option)
        section = normalize(section)
        option = normalize(option)

        defaults = self[DEFAULT_SECTION]
        local = self[section]

        for _ in range(DEPTH_VALUES):
            match = VAR_REGEXP.search(value)
            if match is None:
                break

            name = match.group(1).lower()
            replacement = local.get(name, defaults.get(name, ""))
            if not replacement:
                log.debug(f"DEBUG [inistore.get_string]: Reference '%({name})s' in {section}.{option} is unresolved.")
                raise GetError(ErrorKind.OPTION_NOT_FOUND, section=section, option=option)

            value = value[:match.start()] + replacement + value[match.end():]
        else:
            log.debug(f"DEBUG [inistore.get_string]: Gave up unfolding {section}.{option} after {DEPTH_VALUES} passes.")
            raise GetError(ErrorKind.MAX_DEPTH_REACHED, section=section, option=option)

        return value

    def get_int(self, section: str, option: str) -> int:
        """Same as ``get_string`` but parses the result as a base-10 ``int``."""
        value = self.get_string(section, option)
        if INT_REGEXP.fullmatch(value) is None:
            raise GetError(ErrorKind.COULD_NOT_PARSE, "int", value,
                           normalize(section), normalize(option))
        return int(value)

    def get_float(self, section: str, option: str) -> float:
        """Same as ``get_string`` but parses the result as a ``float``."""
        value = self.get_string(section, option)
        try:
            if value != value.strip() or "_" in value:
                raise ValueError(value)
            return float(value)
        except ValueError:
            raise GetError(ErrorKind.COULD_NOT_PARSE, "float", value,
                           normalize(section), normalize(option)) from None

    def get_bool(self, section: str, option: str) -> bool:
        """
        Same as ``get_string`` but converts the result to ``bool``.

        See ``BOOL_STRINGS`` for the accepted spellings.
        """
        value = self.get_string(section, option)
        try:
            return BOOL_STRINGS[value.lower()]
        except KeyError:
            raise GetError(ErrorKind.COULD_NOT_PARSE, "bool", value,
                           normalize(section), normalize(option)) from None
