# inistore/provenance.py
"""
inistore.provenance
-------------------

Optional provenance tracking for loaded values.

When enabled via ``Config(track_provenance=True)``, every value the
loader stores is recorded together with the source that supplied it, so
"why is db.host X?" can be answered by walking the override chain.

Keys are ``section.option`` strings in normalized form.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProvenanceEntry:
    """Records the origin of a single raw value.

    Attributes:
        key: ``section.option`` (e.g., ``"db.host"``).
        value: The raw string that was stored.
        source: Where it came from, e.g. ``"defaults"``,
            ``"file:/etc/app.ini"``, ``"env:APP_DB__HOST"``, ``"overrides_dict"``.
    """

    key: str
    value: str
    source: str

    def __repr__(self) -> str:
        return f"{self.key} = {self.value!r}  ← {self.source}"


@dataclass
class ProvenanceStore:
    """Current source per key plus the history of overridden ones."""

    _entries: dict[str, ProvenanceEntry] = field(default_factory=dict)
    _history: dict[str, list[ProvenanceEntry]] = field(default_factory=dict)

    def record(self, key: str, value: str, source: str) -> None:
        """Record that ``key`` was set to ``value`` by ``source``.

        An existing entry for the key moves to its history.
        """
        previous = self._entries.get(key)
        if previous is not None:
            self._history.setdefault(key, []).append(previous)
        self._entries[key] = ProvenanceEntry(key=key, value=value, source=source)

    def get(self, key: str) -> ProvenanceEntry | None:
        return self._entries.get(key)

    def get_history(self, key: str) -> list[ProvenanceEntry]:
        """All entries for ``key``, oldest first, ending with the current one."""
        history = list(self._history.get(key, []))
        current = self._entries.get(key)
        if current:
            history.append(current)
        return history

    def all_entries(self) -> dict[str, ProvenanceEntry]:
        return dict(self._entries)

