# SynapSync Sync Module
# Scanner, manifest, provider projector and the engine sequencing them

from synapsync.sync.actions import ActionResult, SyncAction, SyncOperation, build_actions, execute_action
from synapsync.sync.doctor import CheckStatus, DiagnosticCheck, DiagnosticResult, Doctor, FixResult
from synapsync.sync.engine import (
    ProjectStatus,
    ProviderStatus,
    SyncEngine,
    SyncError,
    SyncErrorCode,
    SyncPhase,
    SyncProgress,
    SyncResult,
    UninstallResult,
)
from synapsync.sync.frontmatter import CognitiveMetadata, parse_frontmatter
from synapsync.sync.item import ScanError, ScannedCognitive
from synapsync.sync.manifest import Manifest, ManifestEntry, ManifestManager, ProviderSyncState
from synapsync.sync.projector import (
    MirrorEntry,
    ProviderProjector,
    ProviderSyncResult,
    ProviderVerification,
)
from synapsync.sync.scanner import CognitiveScanner, ScanComparison

__all__ = [
    # Item
    "ScannedCognitive",
    "ScanError",
    "CognitiveMetadata",
    "parse_frontmatter",
    # Scanner
    "CognitiveScanner",
    "ScanComparison",
    # Manifest
    "Manifest",
    "ManifestEntry",
    "ManifestManager",
    "ProviderSyncState",
    # Actions
    "SyncOperation",
    "SyncAction",
    "ActionResult",
    "build_actions",
    "execute_action",
    # Projector
    "ProviderProjector",
    "ProviderSyncResult",
    "ProviderVerification",
    "MirrorEntry",
    # Engine
    "SyncEngine",
    "SyncResult",
    "SyncError",
    "SyncErrorCode",
    "SyncPhase",
    "SyncProgress",
    "ProjectStatus",
    "ProviderStatus",
    "UninstallResult",
    # Doctor
    "Doctor",
    "CheckStatus",
    "DiagnosticCheck",
    "DiagnosticResult",
    "FixResult",
]
