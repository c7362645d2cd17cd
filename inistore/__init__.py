# inistore/__init__.py
"""
inistore – INI configuration store with case-insensitive, typed lookups.

Sections of key/value pairs with a ``default`` section consulted as a
fallback, and ``%(name)s`` references unfolded on lookup.

Import ``Config`` from ``inistore.loader`` to load from files, environment
and overrides, or build a ``Resolver`` directly with ``inistore.parser``.
Lookup failures raise ``inistore.exceptions.GetError``.
"""

__version__ = "0.1.0"
