# SynapSync Sync Engine
# Reconciles the canonical store with the manifest, then projects it onto providers

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from synapsync.config.loader import load_project
from synapsync.config.schema import CognitiveType, ProjectConfig, SyncMethod
from synapsync.errors import CognitiveNotFoundError, ManifestError
from synapsync.sync.actions import SyncAction, build_actions, execute_action
from synapsync.sync.item import ScannedCognitive
from synapsync.sync.manifest import ManifestEntry, ManifestManager, ProviderSyncState, utc_now
from synapsync.sync.projector import ProviderProjector, ProviderSyncResult
from synapsync.sync.scanner import CognitiveScanner
from synapsync.utils.paths import remove_path


class SyncPhase(str, Enum):
    """Phase boundaries reported to progress callbacks."""

    SCANNING = "scanning"
    COMPARING = "comparing"
    RECONCILING = "reconciling"
    SAVING = "saving"
    COMPLETE = "complete"


class SyncErrorCode(str, Enum):
    """Classification of errors reported by a sync pass."""

    SCAN_FAILED = "SCAN_FAILED"
    MANIFEST_READ_FAILED = "MANIFEST_READ_FAILED"
    MANIFEST_WRITE_FAILED = "MANIFEST_WRITE_FAILED"
    COGNITIVE_PARSE_FAILED = "COGNITIVE_PARSE_FAILED"
    PROVIDER_SYNC_FAILED = "PROVIDER_SYNC_FAILED"
    UNKNOWN = "UNKNOWN"


@dataclass
class SyncProgress:
    """Progress update passed to the on_progress callback."""

    phase: SyncPhase
    message: str
    current: Optional[str] = None
    total: Optional[int] = None
    processed: Optional[int] = None


ProgressCallback = Callable[[SyncProgress], None]


@dataclass
class SyncError:
    """An error collected during a sync pass."""

    message: str
    code: SyncErrorCode
    cognitive: Optional[str] = None


@dataclass
class SyncResult:
    """Result of a complete sync operation."""

    added: int = 0
    removed: int = 0
    updated: int = 0
    unchanged: int = 0
    total: int = 0
    dry_run: bool = False
    duration: float = 0.0
    actions: list[SyncAction] = field(default_factory=list)
    errors: list[SyncError] = field(default_factory=list)
    provider_results: list[ProviderSyncResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when the pass finished without any error."""
        return not self.errors

    @property
    def has_changes(self) -> bool:
        """Check if the manifest had anything to reconcile."""
        return bool(self.actions)


@dataclass
class ProjectStatus:
    """Agreement between the canonical store and the manifest."""

    manifest: int
    filesystem: int
    new: int = 0
    removed: int = 0
    modified: int = 0

    @property
    def in_sync(self) -> bool:
        return self.new == 0 and self.removed == 0 and self.modified == 0


@dataclass
class ProviderStatus:
    """Mirror health counts for one provider."""

    provider: str
    valid: int = 0
    broken: int = 0
    orphaned: int = 0

    @property
    def healthy(self) -> bool:
        return self.broken == 0 and self.orphaned == 0


@dataclass
class UninstallResult:
    """Result of removing one installed cognitive."""

    name: str
    removed_files: Optional[Path] = None
    removed_mirrors: dict[str, list[str]] = field(default_factory=dict)
    errors: list[SyncError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class SyncEngine:
    """
    Main synchronization engine.

    Phase 1 reconciles the manifest with what is in the canonical store.
    Phase 2 mirrors the store into every enabled provider.
    """

    def __init__(
        self,
        store_dir: Path,
        project_root: Optional[Path] = None,
        config: Optional[ProjectConfig] = None,
        manifest: Optional[ManifestManager] = None,
        scanner: Optional[CognitiveScanner] = None,
        projector: Optional[ProviderProjector] = None,
    ):
        """
        Initialize sync engine.

        Args:
            store_dir: Canonical store directory.
            project_root: Root provider paths are relative to. Defaults to
                          the parent of store_dir.
            config: Project configuration. Without one no provider is
                    enabled and only the manifest is reconciled.
            manifest: Optional manifest manager (creates new one if not provided).
            scanner: Optional scanner (creates new one if not provided).
            projector: Optional projector (creates new one if not provided).
        """
        self.store_dir = store_dir
        self.project_root = project_root or store_dir.parent
        self.config = config
        self.manifest = manifest or ManifestManager(store_dir)
        self.scanner = scanner or CognitiveScanner(store_dir)

        if projector is None:
            provider_paths = config.get_provider_path_table() if config is not None else None
            projector = ProviderProjector(self.project_root, store_dir, provider_paths)
        self.projector = projector

    @classmethod
    def from_project(cls, start_dir: Optional[Path] = None) -> "SyncEngine":
        """
        Build an engine for the project containing start_dir.

        Raises:
            ConfigNotFoundError: If no project configuration is found.
        """
        project_root, config = load_project(start_dir)
        return cls(config.get_store_dir(project_root), project_root=project_root, config=config)

    def get_enabled_providers(self, provider: Optional[str] = None) -> list[str]:
        """
        Get the providers a sync pass projects onto.

        Args:
            provider: Optional single provider to restrict to.

        Returns:
            Enabled provider names, empty when there is no configuration.
        """
        if self.config is None:
            return []

        enabled = self.config.get_enabled_providers()
        if provider is not None:
            return [name for name in enabled if name == provider]
        return enabled

    def sync(
        self,
        *,
        dry_run: bool = False,
        types: Optional[Iterable[CognitiveType]] = None,
        categories: Optional[Iterable[str]] = None,
        provider: Optional[str] = None,
        copy: bool = False,
        force: bool = False,
        manifest_only: bool = False,
        rehash_missing: bool = False,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """
        Synchronize the manifest and providers with the canonical store.

        A failure while scanning or reading the manifest aborts the pass
        with a single error. Later failures are collected and the pass
        carries on.

        Args:
            dry_run: If True, don't modify the manifest or any provider.
            types: Only reconcile these types (default: all).
            categories: Only reconcile these categories (default: all).
            provider: Only project onto this provider.
            copy: Copy instead of symlinking.
            force: Recreate existing mirrors.
            manifest_only: Skip provider projection.
            rehash_missing: Treat manifest entries lacking a fingerprint as modified.
            on_progress: Called synchronously at each phase boundary.

        Returns:
            SyncResult with details of what was done.
        """
        start = time.monotonic()
        result = SyncResult(dry_run=dry_run)
        types = list(types) if types is not None else None
        categories = list(categories) if categories is not None else None

        def report(phase: SyncPhase, message: str, **kwargs) -> None:
            if on_progress is not None:
                on_progress(SyncProgress(phase=phase, message=message, **kwargs))

        try:
            report(SyncPhase.SCANNING, "Scanning store for cognitives...")
            scanned = self.scanner.scan(types=types, categories=categories)
            scan_errors = list(self.scanner.errors)

            # Projection and removal detection always see the full store
            filtered = types is not None or categories is not None
            desired = self.scanner.scan() if filtered else scanned

            report(SyncPhase.SCANNING, f"Found {len(scanned)} cognitives in store", total=len(scanned))

            report(SyncPhase.COMPARING, "Comparing with manifest...")
            known = self._filter_entries(self.manifest.get_entries(), scanned, desired, types, categories)
            comparison = self.scanner.compare(scanned, known, rehash_missing=rehash_missing)
        except ManifestError as e:
            result.errors.append(SyncError(message=str(e), code=SyncErrorCode.MANIFEST_READ_FAILED))
            result.duration = time.monotonic() - start
            return result
        except Exception as e:
            result.errors.append(SyncError(message=str(e), code=SyncErrorCode.SCAN_FAILED))
            result.duration = time.monotonic() - start
            return result

        for scan_error in scan_errors:
            result.errors.append(
                SyncError(
                    message=scan_error.error,
                    code=SyncErrorCode.COGNITIVE_PARSE_FAILED,
                    cognitive=str(scan_error.path),
                )
            )

        result.actions = build_actions(comparison)
        result.added = len(comparison.new)
        result.updated = len(comparison.modified)
        result.removed = len(comparison.removed)
        result.unchanged = comparison.unchanged

        report(SyncPhase.COMPARING, f"Found {len(result.actions)} changes to sync")

        if not dry_run and result.actions:
            total = len(result.actions)
            report(SyncPhase.RECONCILING, "Applying changes to manifest...", total=total, processed=0)

            processed = 0
            for action in result.actions:
                action_result = execute_action(action, self.manifest, self.scanner)
                if not action_result.success:
                    result.errors.append(
                        SyncError(
                            message=action_result.error or "Unknown error",
                            code=SyncErrorCode.UNKNOWN,
                            cognitive=action_result.item_name,
                        )
                    )
                    continue

                processed += 1
                report(
                    SyncPhase.RECONCILING,
                    f"Applied {action.operation.value} for {action.name}",
                    current=action.name,
                    total=total,
                    processed=processed,
                )

            report(SyncPhase.SAVING, "Saving manifest...")
            self._save_manifest(result)

        if not manifest_only:
            result.provider_results = self._sync_providers(
                desired,
                result,
                provider=provider,
                copy=copy,
                force=force,
                dry_run=dry_run,
                report=report,
            )

            if not dry_run:
                self._record_provider_state(result.provider_results, desired)
                report(SyncPhase.SAVING, "Saving provider sync state...")
                self._save_manifest(result)

        result.total = self.manifest.get_entry_count()
        result.duration = time.monotonic() - start
        report(SyncPhase.COMPLETE, "Dry run complete" if dry_run else "Sync complete")

        return result

    def preview(self, **options) -> SyncResult:
        """Report what sync() would do without changing anything."""
        options["dry_run"] = True
        return self.sync(**options)

    def get_status(self) -> ProjectStatus:
        """
        Compare the store with the manifest without modifying either.

        Raises:
            StoreNotFoundError: If the store directory doesn't exist.
            ManifestError: If the manifest cannot be read.
        """
        scanned = self.scanner.scan()
        entries = self.manifest.get_entries()
        comparison = self.scanner.compare(scanned, entries)

        return ProjectStatus(
            manifest=len(entries),
            filesystem=len(scanned),
            new=len(comparison.new),
            removed=len(comparison.removed),
            modified=len(comparison.modified),
        )

    def get_provider_status(self, provider: str) -> ProviderStatus:
        """Count valid, broken and orphaned mirrors of a provider."""
        verification = self.projector.verify_provider(provider)
        return ProviderStatus(
            provider=provider,
            valid=len(verification.valid),
            broken=len(verification.broken),
            orphaned=len(verification.orphaned),
        )

    def uninstall(self, name: str, *, keep_files: bool = False) -> UninstallResult:
        """
        Remove an installed cognitive from the store, manifest and providers.

        With keep_files the store directory and provider mirrors are left
        in place and only the manifest entry is dropped.

        Args:
            name: Manifest name of the cognitive.
            keep_files: Only remove the manifest entry.

        Returns:
            UninstallResult with what was removed.

        Raises:
            CognitiveNotFoundError: If no manifest entry has that name.
            ManifestError: If the manifest cannot be read.
        """
        entry = self.manifest.get_entry(name)
        if entry is None:
            raise CognitiveNotFoundError(f"Cognitive '{name}' is not installed")

        result = UninstallResult(name=name)

        if not keep_files:
            item_dir = self._locate_item_dir(entry)
            if item_dir.is_dir():
                try:
                    remove_path(item_dir)
                except OSError as e:
                    result.errors.append(
                        SyncError(message=str(e), code=SyncErrorCode.UNKNOWN, cognitive=name)
                    )
                    return result
                result.removed_files = item_dir

        self.manifest.remove_entry(name)
        for state in self.manifest.manifest.syncs.values():
            if name in state.items:
                state.items = [item for item in state.items if item != name]
        self._save_manifest(result)

        if keep_files:
            return result

        key = f"{entry.cognitive_type.value}/{name}"
        for provider in self.get_enabled_providers():
            removed = self.projector.remove_mirrors(provider, {key})
            if removed:
                result.removed_mirrors[provider] = removed
            for error in self.projector.clean_errors:
                result.errors.append(
                    SyncError(message=error.message, code=SyncErrorCode.PROVIDER_SYNC_FAILED, cognitive=error.path)
                )

        return result

    def _locate_item_dir(self, entry: ManifestEntry) -> Path:
        """Find the store directory of an entry, preferring what a scan finds."""
        if self.store_dir.is_dir():
            for cognitive in self.scanner.scan(types=[entry.cognitive_type]):
                if cognitive.name == entry.name:
                    return cognitive.path
        return self.store_dir / entry.cognitive_type.plural / entry.category / entry.name

    def _sync_providers(
        self,
        cognitives: list[ScannedCognitive],
        result: SyncResult,
        *,
        provider: Optional[str],
        copy: bool,
        force: bool,
        dry_run: bool,
        report: Callable[..., None],
    ) -> list[ProviderSyncResult]:
        """Project the full desired set onto every enabled provider."""
        providers = self.get_enabled_providers(provider)
        if not providers:
            return []

        if self.config is not None and self.config.sync.method == SyncMethod.COPY:
            copy = True

        report(SyncPhase.RECONCILING, f"Syncing to {len(providers)} provider(s)...")

        provider_results: list[ProviderSyncResult] = []
        for name in providers:
            report(SyncPhase.RECONCILING, f"Syncing to {name}...", current=name)

            try:
                provider_result = self.projector.sync_provider(
                    name, cognitives, copy=copy, force=force, dry_run=dry_run
                )
            except OSError as e:
                result.errors.append(
                    SyncError(message=f"{name}: {e}", code=SyncErrorCode.PROVIDER_SYNC_FAILED, cognitive=name)
                )
                continue

            provider_results.append(provider_result)
            for error in provider_result.errors:
                result.errors.append(
                    SyncError(
                        message=error.message,
                        code=SyncErrorCode.PROVIDER_SYNC_FAILED,
                        cognitive=error.path,
                    )
                )

        return provider_results

    def _record_provider_state(
        self,
        provider_results: list[ProviderSyncResult],
        cognitives: list[ScannedCognitive],
    ) -> None:
        names = [cognitive.name for cognitive in cognitives]
        for provider_result in provider_results:
            self.manifest.set_provider_sync_state(
                provider_result.provider,
                ProviderSyncState(last_sync=utc_now(), method=provider_result.method, items=list(names)),
            )

    def _save_manifest(self, result: Union[SyncResult, UninstallResult]) -> None:
        try:
            self.manifest.save()
        except OSError as e:
            result.errors.append(SyncError(message=str(e), code=SyncErrorCode.MANIFEST_WRITE_FAILED))

    @staticmethod
    def _filter_entries(
        entries: list[ManifestEntry],
        scanned: list[ScannedCognitive],
        desired: list[ScannedCognitive],
        types: Optional[list[CognitiveType]],
        categories: Optional[list[str]],
    ) -> list[ManifestEntry]:
        """
        Narrow manifest entries to the same cognitives as a filtered scan.

        Entries still in the store match by name against the filtered scan,
        because the scan filters on the store directory while an entry
        records its declared category. Entries gone from the store match on
        their recorded type and category.
        """
        if types is None and categories is None:
            return entries

        scanned_names = {cognitive.name for cognitive in scanned}
        store_names = {cognitive.name for cognitive in desired}

        return [
            entry
            for entry in entries
            if entry.name in scanned_names
            or (
                entry.name not in store_names
                and (types is None or entry.cognitive_type in types)
                and (categories is None or entry.category in categories)
            )
        ]
