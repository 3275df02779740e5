# SynapSync Scanned Item
# Cognitive representation produced by a store scan

from dataclasses import dataclass, field
from pathlib import Path

from synapsync.config.schema import CognitiveType, SyncMode
from synapsync.sync.frontmatter import CognitiveMetadata


@dataclass
class ScannedCognitive:
    """
    A cognitive found in the canonical store.

    Rebuilt on every scan and never persisted directly.
    """

    name: str
    cognitive_type: CognitiveType
    category: str
    path: Path
    file_path: Path
    fingerprint: str
    version: str
    metadata: CognitiveMetadata = field(default_factory=CognitiveMetadata)

    @property
    def sync_mode(self) -> SyncMode:
        """How this cognitive is mirrored into providers."""
        return self.cognitive_type.sync_mode

    @property
    def key(self) -> str:
        """Identity key used to match mirrors: "<type>/<name>"."""
        return f"{self.cognitive_type.value}/{self.name}"

    @property
    def mirror_file_name(self) -> str:
        """File name used when mirrored as a single file: the name plus the primary file's suffix."""
        return f"{self.name}{self.file_path.suffix}"


@dataclass
class ScanError:
    """A per-item failure collected during a scan."""

    path: Path
    error: str
