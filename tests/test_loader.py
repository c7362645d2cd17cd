# tests/test_loader.py
"""
Tests for Config: loading from defaults, files, environment and overrides.

Covers:
    - Config._load_single_file() for INI, JSON and TOML
    - Precedence: defaults < file < env < overrides
    - .env loading
    - Mandatory keys
    - store_from_mapping() / stringify()
"""

import json
import os

import pytest
import toml

from inistore.exceptions import ErrorKind, GetError, MissingMandatoryConfig, ParseError
from inistore.loader import Config, store_from_mapping, stringify
from inistore.store import Store

PREFIX = "INISTORETEST"

INI_TEXT = """\
[default]
host = default.example
timeout = 30

[db]
host = db.example
port = 5432
url = %(host)s/path

[web]
url = %(host)s/path
"""


@pytest.fixture
def ini_cfg(tmp_path):
    path = tmp_path / "app.ini"
    path.write_text(INI_TEXT)
    return str(path)


@pytest.fixture
def json_cfg(tmp_path):
    data = {"name": "app", "db": {"host": "h", "port": 5432, "ssl": True, "pool": {"size": 5}}}
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps(data))
    return str(path)


@pytest.fixture
def toml_cfg(tmp_path):
    data = {"name": "app", "db": {"host": "h", "port": 5432, "ssl": False, "tags": ["a", "b"]}}
    path = tmp_path / "cfg.toml"
    path.write_text(toml.dumps(data))
    return str(path)


@pytest.fixture
def clean_env():
    """Remove variables a .env file put into os.environ during the test."""
    before = set(os.environ)
    yield
    for var in set(os.environ) - before:
        del os.environ[var]


# ---------------------------------------------------------------------------
# Single files
# ---------------------------------------------------------------------------


class TestLoadSingleFile:

    def test_load_ini(self, ini_cfg):
        store = Config._load_single_file(ini_cfg)
        assert type(store) is Store
        assert store["db"]["port"] == "5432"

    def test_load_json(self, json_cfg):
        store = Config._load_single_file(json_cfg)
        assert store.as_dict() == {
            "default": {"name": "app"},
            "db": {"host": "h", "port": "5432", "ssl": "true", "pool.size": "5"},
        }

    def test_load_toml(self, toml_cfg):
        store = Config._load_single_file(toml_cfg)
        assert store["db"] == {"host": "h", "port": "5432", "ssl": "false", "tags": '["a", "b"]'}

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            Config._load_single_file("/nonexistent/path.ini")

    def test_invalid_ini(self, tmp_path):
        """Malformed INI raises RuntimeError chained to the ParseError."""
        f = tmp_path / "bad.ini"
        f.write_text("[section\nkey = value\n")
        with pytest.raises(RuntimeError) as exc_info:
            Config._load_single_file(str(f))
        assert isinstance(exc_info.value.__cause__, ParseError)

    def test_invalid_toml(self, tmp_path):
        f = tmp_path / "bad.toml"
        f.write_text('[section\nkey = "broken')
        with pytest.raises(RuntimeError):
            Config._load_single_file(str(f))

    def test_json_top_level_must_be_object(self, tmp_path):
        f = tmp_path / "list.json"
        f.write_text("[1, 2]")
        with pytest.raises(RuntimeError):
            Config._load_single_file(str(f))

    def test_unsupported_format(self, tmp_path):
        f = tmp_path / "test.yaml"
        f.write_text("key: value")
        with pytest.raises(RuntimeError, match="Unsupported"):
            Config._load_single_file(str(f))

    def test_expands_env_var_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_CONFIG_DIR", str(tmp_path))
        (tmp_path / "app.cfg").write_text("[s]\nk = v\n")
        assert Config._load_single_file("$TEST_CONFIG_DIR/app.cfg")["s"] == {"k": "v"}


# ---------------------------------------------------------------------------
# Sources and precedence
# ---------------------------------------------------------------------------


class TestSources:

    def test_load_ini_and_resolve(self, ini_cfg):
        cfg = Config(file_path=ini_cfg, load_dotenv_file=False)
        assert cfg.get_string("db", "url") == "db.example/path"
        assert cfg.get_string("web", "url") == "default.example/path"
        assert cfg.get_int("DB", "PORT") == 5432

    def test_load_json_typed(self, json_cfg):
        cfg = Config(file_path=json_cfg, load_dotenv_file=False)
        assert cfg.get_bool("db", "ssl") is True
        assert cfg.get_int("db", "pool.size") == 5
        assert cfg.has_option("db", "name")

    def test_defaults_lowest(self, ini_cfg):
        cfg = Config(
            defaults={"db": {"host": "fallback", "user": "admin"}, "retries": 3},
            file_path=ini_cfg,
            load_dotenv_file=False,
        )
        assert cfg.get_string("db", "host") == "db.example"
        assert cfg.get_string("db", "user") == "admin"
        assert cfg.get_int("default", "retries") == 3

    def test_env_overrides_file(self, monkeypatch, ini_cfg):
        monkeypatch.setenv(f"{PREFIX}_DB__HOST", "env.example")
        monkeypatch.setenv(f"{PREFIX}_TIMEOUT", "5")
        cfg = Config(file_path=ini_cfg, prefix=PREFIX, load_dotenv_file=False)
        assert cfg.get_string("db", "url") == "env.example/path"
        assert cfg.get_int("default", "timeout") == 5
        assert cfg.has_option("web", "timeout")

    def test_env_prefix_case_insensitive(self, monkeypatch):
        monkeypatch.setenv(f"{PREFIX.lower()}_cache__ttl", "60")
        cfg = Config(prefix=PREFIX + "_", load_dotenv_file=False)
        assert cfg.get_int("cache", "ttl") == 60

    def test_env_ignored_without_prefix(self, monkeypatch):
        monkeypatch.setenv(f"{PREFIX}_DB__HOST", "env.example")
        cfg = Config(load_dotenv_file=False)
        assert cfg.get_sections() == ["default"]

    def test_env_unmappable_skipped(self, monkeypatch):
        monkeypatch.setenv(f"{PREFIX}___X", "1")
        cfg = Config(prefix=PREFIX, load_dotenv_file=False)
        assert cfg.get_sections() == ["default"]

    def test_overrides_highest(self, monkeypatch, ini_cfg):
        monkeypatch.setenv(f"{PREFIX}_DB__PORT", "1111")
        cfg = Config(
            file_path=ini_cfg,
            prefix=PREFIX,
            overrides_dict={"db.port": 6000, "debug": True},
            load_dotenv_file=False,
        )
        assert cfg.get_int("db", "port") == 6000
        assert cfg.get_bool("default", "debug") is True

    def test_dotenv_file(self, tmp_path, clean_env):
        env_file = tmp_path / ".env"
        env_file.write_text(f"{PREFIX}_DB__USER=bob\n")
        cfg = Config(prefix=PREFIX, dotenv_path=str(env_file))
        assert cfg.get_string("db", "user") == "bob"

    def test_config_is_queryable_store(self, ini_cfg):
        cfg = Config(file_path=ini_cfg, load_dotenv_file=False)
        with pytest.raises(GetError) as exc_info:
            cfg.get_raw_string("web", "timeout")
        assert exc_info.value.kind is ErrorKind.OPTION_NOT_FOUND


# ---------------------------------------------------------------------------
# Mandatory keys
# ---------------------------------------------------------------------------


class TestMandatory:

    def test_missing(self, ini_cfg):
        with pytest.raises(MissingMandatoryConfig) as exc_info:
            Config(file_path=ini_cfg, mandatory=["db.password", "db.port", "api_key"],
                   load_dotenv_file=False)
        assert exc_info.value.missing_keys == ["db.password", "api_key"]

    def test_satisfied_through_default_section(self, ini_cfg):
        cfg = Config(file_path=ini_cfg, mandatory=["db.timeout", "web.host"],
                     load_dotenv_file=False)
        assert cfg.has_option("db", "timeout")

    def test_missing_section(self):
        with pytest.raises(MissingMandatoryConfig):
            Config(defaults={"timeout": 1}, mandatory=["nosuch.timeout"], load_dotenv_file=False)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:

    @pytest.mark.parametrize("value, expected", [
        ("text", "text"),
        (True, "true"),
        (False, "false"),
        (None, ""),
        (42, "42"),
        (1.5, "1.5"),
        ([1, 2], "[1, 2]"),
        ({"a": 1}, '{"a": 1}'),
    ])
    def test_stringify(self, value, expected):
        assert stringify(value) == expected

    def test_store_from_mapping(self):
        store = store_from_mapping({"Top": "1", "S": {"A": {"B": 2}}})
        assert store.as_dict() == {"default": {"top": "1"}, "s": {"a.b": "2"}}
