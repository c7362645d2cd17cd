# tests/test_provenance.py
"""
Tests for provenance tracking.

Covers:
    - ProvenanceEntry and ProvenanceStore standalone behavior
    - Provenance wired through Config.__init__
    - cfg.provenance(), cfg.provenance_history(), cfg.provenance_dump()
    - Opt-in behavior (disabled by default)
"""

import pytest

from inistore.loader import Config
from inistore.provenance import ProvenanceEntry, ProvenanceStore

# ---------------------------------------------------------------------------
# ProvenanceEntry / ProvenanceStore
# ---------------------------------------------------------------------------


class TestProvenanceEntry:

    def test_frozen(self):
        entry = ProvenanceEntry(key="db.port", value="42", source="defaults")
        with pytest.raises(AttributeError):
            entry.value = "99"  # type: ignore[misc]

    def test_repr(self):
        r = repr(ProvenanceEntry(key="db.port", value="42", source="file:app.ini"))
        assert "db.port" in r
        assert "'42'" in r
        assert "file:app.ini" in r


class TestProvenanceStore:

    def test_record_and_get(self):
        store = ProvenanceStore()
        store.record("db.host", "a", "defaults")
        assert store.get("db.host").value == "a"
        assert store.get("missing") is None

    def test_override_moves_to_history(self):
        store = ProvenanceStore()
        store.record("db.host", "a", "defaults")
        store.record("db.host", "b", "env:APP_DB__HOST")
        assert store.get("db.host").source == "env:APP_DB__HOST"
        assert [e.value for e in store.get_history("db.host")] == ["a", "b"]

    def test_history_of_unknown_key(self):
        assert ProvenanceStore().get_history("x.y") == []

    def test_all_entries_is_copy(self):
        store = ProvenanceStore()
        store.record("a.x", "1", "defaults")
        entries = store.all_entries()
        entries.clear()
        assert store.get("a.x") is not None


# ---------------------------------------------------------------------------
# Config integration
# ---------------------------------------------------------------------------


@pytest.fixture
def ini_file(tmp_path):
    path = tmp_path / "app.ini"
    path.write_text("[db]\nhost = file.example\n")
    return path


class TestConfigProvenance:

    def test_disabled_by_default(self, ini_file):
        cfg = Config(file_path=str(ini_file), load_dotenv_file=False)
        assert cfg.provenance("db", "host") is None
        assert cfg.provenance_history("db", "host") == []
        assert "disabled" in cfg.provenance_dump()

    def test_chain_of_sources(self, ini_file, monkeypatch):
        monkeypatch.setenv("PROVTEST_DB__HOST", "env.example")
        cfg = Config(
            defaults={"db": {"host": "default.example", "port": 1}},
            file_path=str(ini_file),
            prefix="PROVTEST",
            overrides_dict={"DB.Host": "override.example"},
            load_dotenv_file=False,
            track_provenance=True,
        )
        sources = [e.source for e in cfg.provenance_history("DB", "HOST")]
        assert sources == [
            "defaults",
            f"file:{ini_file}",
            "env:PROVTEST_DB__HOST",
            "overrides_dict",
        ]
        assert cfg.provenance("db", "host").value == "override.example"
        assert cfg.provenance("db", "port").source == "defaults"

    def test_dump(self, ini_file):
        cfg = Config(file_path=str(ini_file), load_dotenv_file=False, track_provenance=True)
        assert cfg.provenance_dump() == f"db.host = 'file.example'  ← file:{ini_file}"
