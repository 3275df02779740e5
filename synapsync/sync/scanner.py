# SynapSync Scanner
# Discovers cognitives in the canonical store and diffs them against the manifest

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from synapsync.config.schema import CognitiveType
from synapsync.errors import StoreNotFoundError
from synapsync.sync.frontmatter import extract_name, extract_version, parse_frontmatter
from synapsync.sync.item import ScanError, ScannedCognitive
from synapsync.sync.manifest import ManifestEntry, utc_now
from synapsync.utils.hashing import fingerprint
from synapsync.utils.paths import list_directories


@dataclass
class ScanComparison:
    """Differences between a scan and the known manifest entries."""

    new: list[ScannedCognitive] = field(default_factory=list)
    modified: list[ScannedCognitive] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unchanged: int = 0

    @property
    def has_changes(self) -> bool:
        """Check if anything was added, modified or removed."""
        return bool(self.new or self.modified or self.removed)


class CognitiveScanner:
    """
    Scans the canonical store for cognitives.

    Layout: <store>/<type>s/<category>/<name>/<PrimaryFile>
    """

    def __init__(self, store_dir: Path):
        """
        Initialize scanner.

        Args:
            store_dir: Canonical store directory.
        """
        self.store_dir = store_dir
        self.errors: list[ScanError] = []

    def scan(
        self,
        types: Optional[Iterable[CognitiveType]] = None,
        categories: Optional[Iterable[str]] = None,
    ) -> list[ScannedCognitive]:
        """
        Scan the store for cognitives.

        Per-item read failures are collected in ``self.errors`` (reset on
        every call) and do not stop the scan.

        Args:
            types: Only scan these types (default: all).
            categories: Only scan these categories (default: all).

        Returns:
            List of ScannedCognitives found.

        Raises:
            StoreNotFoundError: If the store directory doesn't exist.
        """
        self.errors = []

        if not self.store_dir.is_dir():
            raise StoreNotFoundError(f"Cognitive store not found: {self.store_dir}")

        types_to_scan = list(types) if types is not None else list(CognitiveType)
        category_filter = set(categories) if categories is not None else None
        cognitives: list[ScannedCognitive] = []

        for cognitive_type in types_to_scan:
            type_dir = self.store_dir / cognitive_type.plural

            for category in list_directories(type_dir):
                if category_filter is not None and category not in category_filter:
                    continue

                category_dir = type_dir / category
                for item_name in list_directories(category_dir):
                    item_dir = category_dir / item_name
                    try:
                        cognitive = self.scan_cognitive(item_dir, cognitive_type, category)
                    except (OSError, UnicodeDecodeError) as e:
                        self.errors.append(ScanError(path=item_dir, error=str(e)))
                        continue
                    if cognitive is not None:
                        cognitives.append(cognitive)

        return cognitives

    def scan_cognitive(
        self,
        item_dir: Path,
        cognitive_type: CognitiveType,
        category: str,
    ) -> Optional[ScannedCognitive]:
        """
        Scan a single cognitive directory.

        Args:
            item_dir: Directory containing the cognitive.
            cognitive_type: Type implied by the store layout.
            category: Category implied by the store layout.

        Returns:
            ScannedCognitive, or None if the primary file is missing.
        """
        file_path = item_dir / cognitive_type.file_name
        if not file_path.is_file():
            return None

        raw = file_path.read_bytes()
        content = raw.decode("utf-8")
        metadata = parse_frontmatter(content)

        name = extract_name(metadata, item_dir.name, content)
        version = extract_version(metadata, content)

        return ScannedCognitive(
            name=name,
            cognitive_type=cognitive_type,
            category=metadata.category or category,
            path=item_dir,
            file_path=file_path,
            fingerprint=fingerprint(raw),
            version=version,
            metadata=metadata,
        )

    def compare(
        self,
        scanned: list[ScannedCognitive],
        known: list[ManifestEntry],
        *,
        rehash_missing: bool = False,
    ) -> ScanComparison:
        """
        Compare scanned cognitives with known manifest entries.

        An entry without a recorded fingerprint counts as unchanged unless
        rehash_missing is set, in which case it is reported as modified.

        Args:
            scanned: Result of scan().
            known: Manifest entries.
            rehash_missing: Treat entries lacking a fingerprint as modified.

        Returns:
            ScanComparison with new, modified, removed and unchanged count.
        """
        result = ScanComparison()

        known_map = {entry.name: entry for entry in known}
        scanned_names = {cognitive.name for cognitive in scanned}

        for cognitive in scanned:
            entry = known_map.get(cognitive.name)

            if entry is None:
                result.new.append(cognitive)
            elif entry.fingerprint is None:
                if rehash_missing:
                    result.modified.append(cognitive)
                else:
                    result.unchanged += 1
            elif entry.fingerprint != cognitive.fingerprint:
                result.modified.append(cognitive)
            else:
                result.unchanged += 1

        for entry in known:
            if entry.name not in scanned_names:
                result.removed.append(entry.name)

        return result

    def to_manifest_entry(self, scanned: ScannedCognitive) -> ManifestEntry:
        """Convert a scanned cognitive to a manifest entry from a local source."""
        return ManifestEntry(
            name=scanned.name,
            cognitive_type=scanned.cognitive_type,
            category=scanned.category,
            version=scanned.version,
            installed_at=utc_now(),
            source="local",
            fingerprint=scanned.fingerprint,
        )

    def detect_type(self, item_dir: Path) -> Optional[CognitiveType]:
        """
        Detect cognitive type from directory contents.

        Returns:
            First type (in priority order) whose canonical file exists, or None.
        """
        for cognitive_type in CognitiveType:
            if (item_dir / cognitive_type.file_name).is_file():
                return cognitive_type
        return None

    @staticmethod
    def count_by_type(cognitives: list[ScannedCognitive]) -> dict[CognitiveType, int]:
        """Count cognitives per type (every type present, zero if none)."""
        counts = {cognitive_type: 0 for cognitive_type in CognitiveType}
        for cognitive in cognitives:
            counts[cognitive.cognitive_type] += 1
        return counts
