# inistore/loader.py
"""
inistore.loader
---------------

Multi-source loader producing a ready-to-query ``Config``.
Supports loading from a defaults mapping, an INI/JSON/TOML file, a .env
file plus environment variables, and an overrides dictionary.
Requires Python 3.10+.
"""

import os
import json
import logging
from typing import Mapping, Any, Dict, List, Optional

# Use tomli for reading TOML (works for Python 3.10+)
try:
    import tomli
except ImportError:
    try: import tomllib as tomli # Python 3.11+
    except ImportError: tomli = None

from dotenv import load_dotenv, find_dotenv

from .exceptions import MissingMandatoryConfig
from .parser import read_file
from .provenance import ProvenanceEntry, ProvenanceStore
from .resolver import Resolver
from .store import Store
from .utils import DEFAULT_SECTION, expand_path, join_key, normalize, split_key

log = logging.getLogger(__name__)

INI_EXTENSIONS = (".ini", ".cfg", ".conf")

# Separates section from option in environment variable names:
# APP_DB__HOST -> [db] host, APP_HOST -> [default] host.
ENV_SECTION_SEPARATOR = "__"

# --- Helper Functions ---

def stringify(value: Any) -> str:
    """
    Convert a value from a structured source (defaults, JSON, TOML) to the
    raw string form the store holds.

    Booleans become ``true``/``false`` so ``get_bool`` reads them back,
    lists and dicts become JSON, ``None`` becomes an empty string.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value)
    return str(value)


def _flatten(d: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into ``{'a.b.c': value}``."""
    items = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else k
        if isinstance(v, Mapping):
            items.update(_flatten(v, key))
        else:
            items[key] = v
    return items


def store_from_mapping(data: Optional[Mapping[str, Any]]) -> Store:
    """
    Build a store from a nested mapping.

    Top-level mappings become sections (deeper tables are flattened into
    dotted option names); top-level scalars go to the default section.
    """
    store = Store()
    for key, value in (data or {}).items():
        if isinstance(value, Mapping):
            store.add_section(key)
            for option, option_value in _flatten(value).items():
                store.add_option(key, option, stringify(option_value))
        else:
            store.add_option(DEFAULT_SECTION, key, stringify(value))
    return store

# --- Config Class ---

class Config(Resolver):
    """
    A ``Resolver`` populated from several sources.

    Loading Precedence (lowest to highest priority):
    1.  **Defaults mapping (`defaults`)**: ``{section: {option: value}}``;
        top-level scalars belong to the default section.
    2.  **Config file (`file_path`)**: ``.ini``/``.cfg``/``.conf`` files are
        parsed as INI text; ``.json`` and ``.toml`` files are converted like
        `defaults`.
    3.  **Environment variables (`prefix`)**: ``PREFIX_SECTION__OPTION``
        sets ``[section] option``; ``PREFIX_OPTION`` sets the option in the
        default section. Includes variables loaded from a ``.env`` file.
    4.  **Overrides dictionary (`overrides_dict`)**: ``section.option`` keys
        (bare ``option`` for the default section).

    Every value ends up as a raw string; interpolation and typing happen on
    lookup (``get_string``, ``get_int``...).
    """

    def __init__(self,
                 # --- Configuration Sources ---
                 defaults: Optional[Mapping[str, Any]] = None,
                 file_path: Optional[str] = None,
                 prefix: Optional[str] = None, # Prefix for environment variables
                 overrides_dict: Optional[Mapping[str, Any]] = None, # section.option keys for final overrides
                 # --- Validation ---
                 mandatory: Optional[List[str]] = None, # List of required section.option keys
                 # --- .env File Handling ---
                 load_dotenv_file: bool = True, # Whether to search for and load a .env file
                 dotenv_path: Optional[str] = None, # Explicit path to a .env file
                 # --- Diagnostics ---
                 track_provenance: bool = False,
                 encoding: str = "utf-8"):

        super().__init__()
        self._provenance = ProvenanceStore() if track_provenance else None

        # --- Step 0: Load .env File (Conditional) ---
        # This loads into os.environ, making variables available for Step 3
        if load_dotenv_file:
            self._load_dotenv_file(dotenv_path)

        # --- Step 1: Defaults ---
        self._merge(store_from_mapping(defaults), "defaults")
        log.debug(f"DEBUG [inistore.__init__]: After merging defaults: {self.as_dict()}")

        # --- Step 2: File ---
        if file_path:
            file_data = self._load_single_file(file_path, encoding)
            self._merge(file_data, f"file:{expand_path(file_path)}")
            log.debug(f"DEBUG [inistore.__init__]: After merging file data: {self.as_dict()}")

        # --- Step 3: Environment ---
        for var, section, option, value in self._collect_env_vars(prefix):
            self._set(section, option, value, f"env:{var}")
        log.debug(f"DEBUG [inistore.__init__]: After merging env data: {self.as_dict()}")

        # --- Step 4: Overrides (highest precedence) ---
        for key, value in (overrides_dict or {}).items():
            section, option = split_key(key)
            self._set(section, option, stringify(value), "overrides_dict")
        log.debug(f"DEBUG [inistore.__init__]: After merging overrides data: {self.as_dict()}")

        # --- Step 5: Validate Mandatory Keys ---
        if mandatory:
            self._validate_mandatory(mandatory)
            log.debug("DEBUG [inistore.__init__]: Validated mandatory keys.")

        log.debug("DEBUG [inistore.__init__]: Config initialization complete.")


    def _set(self, section: str, option: str, value: str, source: str):
        self.add_option(section, option, value)
        if self._provenance is not None:
            self._provenance.record(join_key(normalize(section), normalize(option)), value, source)

    def _merge(self, other: Mapping[str, Mapping[str, str]], source: str):
        for section, options in other.items():
            self.add_section(section)
            for option, value in options.items():
                self._set(section, option, value, source)


    @staticmethod
    def _load_dotenv_file(dotenv_path: Optional[str]):
        """Loads a .env file into os.environ without overriding existing variables."""
        try:
            # Use find_dotenv to locate the file if no explicit path is given
            actual_dotenv_path = dotenv_path or find_dotenv(usecwd=True) # find_dotenv searches cwd and parents
            if actual_dotenv_path and os.path.exists(actual_dotenv_path):
                dotenv_was_loaded = load_dotenv(dotenv_path=actual_dotenv_path, override=False)
                if dotenv_was_loaded: log.debug(f"DEBUG [inistore._load_dotenv_file]: Loaded .env file from: {actual_dotenv_path}.")
                else: log.debug(f"DEBUG [inistore._load_dotenv_file]: .env file found at {actual_dotenv_path} but set no variables.")
        except OSError as e:
            log.warning(f"Warning: Failed during .env file loading (path: {dotenv_path or 'auto'}): {e}")


    @staticmethod
    def _load_single_file(file_path: str, encoding: str = "utf-8") -> Store:
        """
        Load one config file into a fresh ``Store``.

        INI files go through the INI parser; JSON and TOML documents are
        converted with ``store_from_mapping``.

        Raises:
            FileNotFoundError: If the file does not exist.
            RuntimeError: On unsupported extensions or unparsable content.
        """
        file_path = expand_path(file_path)
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Config file not found: {file_path}")

        ext = os.path.splitext(file_path)[1].lower()
        try:
            if ext in INI_EXTENSIONS:
                return read_file(file_path, encoding, store_cls=Store)
            if ext == '.toml':
                if not tomli: raise RuntimeError("tomli (or tomllib) is required for TOML support.")
                with open(file_path, mode='rb') as f: file_content = tomli.load(f)
            elif ext == '.json':
                with open(file_path, mode='r', encoding=encoding) as f: file_content = json.load(f)
            else:
                raise ValueError(f"Unsupported config file type: {ext}")
        except Exception as e:
            raise RuntimeError(f"Error loading/parsing file {file_path}: {e}") from e

        if not isinstance(file_content, Mapping):
            raise RuntimeError(f"Error loading/parsing file {file_path}: top level must be an object")
        return store_from_mapping(file_content)


    @staticmethod
    def _collect_env_vars(prefix: Optional[str]) -> List[tuple]:
        """
        Collect environment variables starting with ``prefix`` (matched
        case-insensitively) as ``(var, section, option, value)`` tuples.

        No prefix means no environment lookup at all.
        """
        if not prefix or not prefix.strip():
            return []
        prefix_upper = prefix.strip().rstrip('_').upper() + '_'
        plen = len(prefix_upper)

        collected = []
        for var, raw_value in sorted(os.environ.items()):
            if not var.upper().startswith(prefix_upper):
                continue
            key_part = var[plen:]
            if ENV_SECTION_SEPARATOR in key_part:
                section, option = key_part.split(ENV_SECTION_SEPARATOR, 1)
            else:
                section, option = DEFAULT_SECTION, key_part
            if not section.strip() or not option.strip():
                log.warning(f"Skipping environment variable '{var}': cannot map it to a section and option.")
                continue
            log.debug(f"DEBUG [inistore._collect_env_vars]: Env var '{var}' -> [{section.lower()}] {option.lower()}")
            collected.append((var, section, option, raw_value))
        return collected


    def _validate_mandatory(self, keys: List[str]):
        """Checks ``section.option`` keys with ``has_option``."""
        missing = []
        for k in keys:
            section, option = split_key(k)
            if not self.has_option(section, option):
                log.debug(f"DEBUG [inistore._validate_mandatory]: Mandatory key '{k}' MISSING.")
                missing.append(k)
        if missing: raise MissingMandatoryConfig(missing)

    # --- Provenance ---

    def provenance(self, section: str, option: str) -> Optional[ProvenanceEntry]:
        """Source of the current value of ``section.option``, or None when not tracked."""
        if self._provenance is None:
            return None
        return self._provenance.get(join_key(normalize(section), normalize(option)))

    def provenance_history(self, section: str, option: str) -> List[ProvenanceEntry]:
        """Override chain for ``section.option``, oldest first."""
        if self._provenance is None:
            return []
        return self._provenance.get_history(join_key(normalize(section), normalize(option)))

    def provenance_dump(self) -> str:
        """One line per tracked key, sorted by key."""
        if self._provenance is None:
            return "Provenance tracking is disabled. Use Config(track_provenance=True)."
        entries = self._provenance.all_entries()
        return "\n".join(repr(entries[key]) for key in sorted(entries))
