# SynapSync Manifest
# Persisted registry of installed cognitives and provider sync state

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from synapsync.config.defaults import DEFAULT_VERSION, MANIFEST_FILE_NAME, MANIFEST_VERSION
from synapsync.config.schema import CognitiveType, SyncMethod
from synapsync.errors import ManifestError
from synapsync.utils.paths import atomic_write


def utc_now() -> str:
    """Current time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ManifestEntry:
    """An installed cognitive recorded in the manifest."""

    name: str
    cognitive_type: CognitiveType
    category: str
    version: str = DEFAULT_VERSION
    installed_at: str = field(default_factory=utc_now)
    source: str = "local"
    source_url: Optional[str] = None
    fingerprint: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk JSON shape."""
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.cognitive_type.value,
            "category": self.category,
            "version": self.version,
            "installedAt": self.installed_at,
            "source": self.source,
        }
        if self.source_url is not None:
            data["sourceUrl"] = self.source_url
        if self.fingerprint is not None:
            data["hash"] = self.fingerprint
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManifestEntry":
        """Create from dictionary. Accepts "fingerprint" as an alias of "hash"."""
        return cls(
            name=data["name"],
            cognitive_type=CognitiveType(data["type"]),
            category=data.get("category", "general"),
            version=data.get("version", DEFAULT_VERSION),
            installed_at=data.get("installedAt", ""),
            source=data.get("source", "local"),
            source_url=data.get("sourceUrl"),
            fingerprint=data.get("hash", data.get("fingerprint")),
        )


@dataclass
class ProviderSyncState:
    """Last projection recorded for a provider."""

    last_sync: str
    method: SyncMethod
    items: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk JSON shape."""
        return {
            "lastSync": self.last_sync,
            "method": self.method.value,
            "cognitives": list(self.items),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderSyncState":
        """Create from dictionary. Accepts "items" as an alias of "cognitives"."""
        return cls(
            last_sync=data.get("lastSync", ""),
            method=SyncMethod(data.get("method", SyncMethod.SYMLINK.value)),
            items=list(data.get("cognitives", data.get("items", []))),
        )


@dataclass
class Manifest:
    """Complete manifest document."""

    version: str = MANIFEST_VERSION
    last_updated: str = field(default_factory=utc_now)
    entries: dict[str, ManifestEntry] = field(default_factory=dict)
    syncs: dict[str, ProviderSyncState] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": self.version,
            "lastUpdated": self.last_updated,
            "cognitives": {name: entry.to_dict() for name, entry in self.entries.items()},
            "syncs": {provider: state.to_dict() for provider, state in self.syncs.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Manifest":
        """Create from dictionary."""
        raw_entries = data.get("cognitives") or {}
        if isinstance(raw_entries, list):
            raw_entries = {item["name"]: item for item in raw_entries}

        return cls(
            version=data.get("version", MANIFEST_VERSION),
            last_updated=data.get("lastUpdated", utc_now()),
            entries={name: ManifestEntry.from_dict({"name": name, **item}) for name, item in raw_entries.items()},
            syncs={
                provider: ProviderSyncState.from_dict(state) for provider, state in (data.get("syncs") or {}).items()
            },
        )


class ManifestManager:
    """
    Manages the manifest.json file inside the canonical store.

    The document is loaded on first access and written back in full by
    save(). There is no locking: the last save() wins.
    """

    def __init__(self, store_dir: Path, manifest_path: Optional[Path] = None):
        """
        Initialize manifest manager.

        Args:
            store_dir: Canonical store directory.
            manifest_path: Path to manifest file. Defaults to <store_dir>/manifest.json
        """
        self.store_dir = store_dir
        self.manifest_path = manifest_path or store_dir / MANIFEST_FILE_NAME
        self._manifest: Optional[Manifest] = None

    @property
    def manifest(self) -> Manifest:
        """Get current manifest, loading if necessary."""
        if self._manifest is None:
            self._manifest = self.load()
        return self._manifest

    def load(self) -> Manifest:
        """
        Load manifest from file.

        Returns:
            Parsed manifest, or an empty one if the file doesn't exist.

        Raises:
            ManifestError: If the file exists but is not a valid manifest.
        """
        if not self.manifest_path.exists():
            return Manifest()

        try:
            with open(self.manifest_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ManifestError(f"Cannot read manifest {self.manifest_path}: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(f"Invalid manifest {self.manifest_path}: expected a JSON object")

        try:
            return Manifest.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ManifestError(f"Invalid manifest {self.manifest_path}: {e}") from e

    def reload(self) -> Manifest:
        """Discard in-memory state and load again from disk."""
        self._manifest = None
        return self.manifest

    def save(self) -> None:
        """Write the full in-memory manifest to disk."""
        manifest = self.manifest
        manifest.last_updated = utc_now()
        content = json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False) + "\n"
        atomic_write(self.manifest_path, content)

    def get_entries(self) -> list[ManifestEntry]:
        """Get all entries."""
        return list(self.manifest.entries.values())

    def get_entry(self, name: str) -> Optional[ManifestEntry]:
        """Get an entry by name."""
        return self.manifest.entries.get(name)

    def has_entry(self, name: str) -> bool:
        """Check if an entry exists."""
        return name in self.manifest.entries

    def get_entry_count(self) -> int:
        """Get number of entries."""
        return len(self.manifest.entries)

    def get_entries_by_type(self, cognitive_type: CognitiveType) -> list[ManifestEntry]:
        """Get all entries of a type."""
        return [e for e in self.manifest.entries.values() if e.cognitive_type == cognitive_type]

    def get_entries_by_source(self, source: str) -> list[ManifestEntry]:
        """Get all entries installed from a source."""
        return [e for e in self.manifest.entries.values() if e.source == source]

    def find_entries(
        self,
        types: Optional[list[CognitiveType]] = None,
        categories: Optional[list[str]] = None,
    ) -> list[ManifestEntry]:
        """Get entries matching any of the given types and categories, sorted by type then name."""
        order = list(CognitiveType)
        matches = [
            e
            for e in self.manifest.entries.values()
            if (not types or e.cognitive_type in types) and (not categories or e.category in categories)
        ]
        return sorted(matches, key=lambda e: (order.index(e.cognitive_type), e.name))

    def add_entry(self, entry: ManifestEntry) -> None:
        """Add an entry, replacing any entry with the same name."""
        self.manifest.entries[entry.name] = entry

    def update_entry(self, name: str, **changes: Any) -> ManifestEntry:
        """
        Update fields of an existing entry.

        Args:
            name: Entry name.
            **changes: ManifestEntry fields to replace.

        Returns:
            The updated entry.

        Raises:
            KeyError: If no entry has that name.
        """
        existing = self.manifest.entries.get(name)
        if existing is None:
            raise KeyError(f"Cognitive '{name}' not found in manifest")

        updated = replace(existing, **changes)
        if updated.name != name:
            del self.manifest.entries[name]
        self.manifest.entries[updated.name] = updated
        return updated

    def remove_entry(self, name: str) -> bool:
        """Remove an entry. Returns False if it wasn't present."""
        if name in self.manifest.entries:
            del self.manifest.entries[name]
            return True
        return False

    def get_provider_sync_state(self, provider: str) -> Optional[ProviderSyncState]:
        """Get the last recorded sync state for a provider."""
        return self.manifest.syncs.get(provider)

    def set_provider_sync_state(self, provider: str, state: ProviderSyncState) -> None:
        """Record the sync state for a provider."""
        self.manifest.syncs[provider] = state

    def get_synced_items(self, provider: str) -> list[str]:
        """Get names recorded in a provider's last sync."""
        state = self.manifest.syncs.get(provider)
        return list(state.items) if state else []
