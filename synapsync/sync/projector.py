# SynapSync Provider Projector
# Mirrors scanned cognitives into provider directories as symlinks or copies

import os
import re
import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from synapsync.config.defaults import PROVIDER_PATHS
from synapsync.config.schema import CognitiveType, SyncMethod, SyncMode
from synapsync.sync.item import ScannedCognitive
from synapsync.utils.paths import (
    copy_path,
    ensure_dir,
    is_within,
    relative_link_target,
    remove_path,
)
from synapsync.utils.platform import symlinks_require_privilege

# Extensions stripped from file mirrors to recover the cognitive name.
# A mirror whose file name uses any other extension keeps it in its name.
MIRROR_EXTENSIONS = re.compile(r"\.(md|yaml|yml)$", re.IGNORECASE)

_TEST_LINK = ".symlink-test"
_TEST_TARGET = ".symlink-test-target"


class MirrorOperation(str, Enum):
    """Filesystem operation a mirror error occurred in."""

    CREATE = "create"
    REMOVE = "remove"
    VERIFY = "verify"


@dataclass
class MirrorMapping:
    """Where one cognitive should be mirrored inside a provider."""

    cognitive_name: str
    cognitive_type: CognitiveType
    source_path: Path
    target_path: Path
    is_file: bool

    @property
    def key(self) -> str:
        return f"{self.cognitive_type.value}/{self.cognitive_name}"


@dataclass
class MirrorEntry:
    """An existing symlink or copy found in a provider directory."""

    path: Path
    target: Path
    is_symlink: bool
    is_valid: bool
    cognitive_name: str
    cognitive_type: CognitiveType

    @property
    def key(self) -> str:
        return f"{self.cognitive_type.value}/{self.cognitive_name}"


@dataclass
class LinkResult:
    """Result of creating a single mirror."""

    success: bool
    source: Path
    target: Path
    method: SyncMethod
    error: Optional[str] = None


@dataclass
class MirrorError:
    """A per-mirror failure during projection."""

    path: str
    operation: MirrorOperation
    message: str


@dataclass
class ProviderSyncResult:
    """Result of projecting cognitives onto one provider."""

    provider: str
    method: SyncMethod
    created: list[LinkResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    errors: list[MirrorError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if every mirror operation succeeded."""
        return not self.errors


@dataclass
class ProviderVerification:
    """Existing mirrors of a provider, classified."""

    valid: list[MirrorEntry] = field(default_factory=list)
    broken: list[MirrorEntry] = field(default_factory=list)
    orphaned: list[MirrorEntry] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        """Check if any mirror is broken or orphaned."""
        return bool(self.broken or self.orphaned)


class ProviderProjector:
    """
    Projects cognitives from the canonical store onto provider directories.

    Folder-mode types (skills) are mirrored as whole directories, the other
    types as single files. Mirrors are symlinks where the platform allows,
    plain copies otherwise.
    """

    def __init__(
        self,
        project_root: Path,
        store_dir: Path,
        provider_paths: Optional[dict[str, dict[CognitiveType, str]]] = None,
    ):
        """
        Initialize projector.

        Args:
            project_root: Directory provider paths are relative to.
            store_dir: Canonical store directory.
            provider_paths: Per-provider table of type -> target directory.
                            Defaults to the built-in provider layout.
        """
        self.project_root = project_root
        self.store_dir = store_dir
        if provider_paths is None:
            provider_paths = {
                provider: {CognitiveType(t): path for t, path in paths.items()}
                for provider, paths in PROVIDER_PATHS.items()
            }
        self.provider_paths = provider_paths
        self._supports_symlinks: Optional[bool] = None
        self.clean_errors: list[MirrorError] = []

    def check_symlink_support(self) -> bool:
        """
        Check whether symlinks can be created, testing once per instance.

        Only platforms that restrict symlink creation are tested, by
        creating and removing a throwaway link inside the store.
        """
        if self._supports_symlinks is not None:
            return self._supports_symlinks

        if not symlinks_require_privilege():
            self._supports_symlinks = True
            return True

        test_link = self.store_dir / _TEST_LINK
        test_target = self.store_dir / _TEST_TARGET
        try:
            ensure_dir(self.store_dir)
            test_target.write_text("test", encoding="utf-8")
            os.symlink(test_target, test_link)
            self._supports_symlinks = True
        except (OSError, NotImplementedError):
            self._supports_symlinks = False
        finally:
            for path in (test_link, test_target):
                if path.is_symlink() or path.exists():
                    path.unlink()

        return self._supports_symlinks

    def resolve_method(self, copy: bool = False) -> SyncMethod:
        """Decide the mirror method for one projection call."""
        if copy:
            return SyncMethod.COPY
        if not self.check_symlink_support():
            return SyncMethod.COPY
        return SyncMethod.SYMLINK

    def sync_provider(
        self,
        provider: str,
        cognitives: list[ScannedCognitive],
        *,
        copy: bool = False,
        force: bool = False,
        dry_run: bool = False,
    ) -> ProviderSyncResult:
        """
        Mirror cognitives into a provider's directories.

        Removes mirrors whose cognitive is no longer wanted, skips valid
        existing mirrors, and creates the missing ones. Per-mirror failures
        are collected and never stop the pass.

        Args:
            provider: Provider name.
            cognitives: Full desired set of cognitives.
            copy: Copy instead of symlinking.
            force: Replace existing mirrors.
            dry_run: Report without touching the filesystem.

        Returns:
            ProviderSyncResult with details of what was done.
        """
        if provider not in self.provider_paths:
            result = ProviderSyncResult(
                provider=provider,
                method=SyncMethod.COPY if copy else SyncMethod.SYMLINK,
            )
            result.errors.append(
                MirrorError(path=provider, operation=MirrorOperation.CREATE, message=f"Unknown provider: {provider}")
            )
            return result

        result = ProviderSyncResult(provider=provider, method=self.resolve_method(copy))

        mappings = self.get_mappings(provider, cognitives)
        existing_mirrors = self.get_existing_mirrors(provider)
        wanted_keys = {mapping.key for mapping in mappings}

        # Orphans: mirrors whose cognitive is gone
        existing_map: dict[str, MirrorEntry] = {}
        for mirror in existing_mirrors:
            if mirror.key in wanted_keys:
                existing_map[mirror.key] = mirror
                continue

            if dry_run:
                result.removed.append(mirror.cognitive_name)
                continue

            try:
                remove_path(mirror.path)
            except OSError as e:
                result.errors.append(
                    MirrorError(path=str(mirror.path), operation=MirrorOperation.REMOVE, message=str(e))
                )
            else:
                result.removed.append(mirror.cognitive_name)

        for mapping in mappings:
            existing = existing_map.get(mapping.key)

            if existing is not None and existing.is_valid and not force:
                result.skipped.append(mapping.cognitive_name)
                continue

            if dry_run:
                result.created.append(
                    LinkResult(
                        success=True,
                        source=mapping.source_path,
                        target=mapping.target_path,
                        method=result.method,
                    )
                )
                continue

            # Broken mirror of a wanted cognitive: replace it
            if existing is not None and not existing.is_valid:
                try:
                    remove_path(existing.path)
                except OSError as e:
                    result.errors.append(
                        MirrorError(path=str(existing.path), operation=MirrorOperation.REMOVE, message=str(e))
                    )
                    continue

            link_result = self._create_mirror(mapping, result.method, force=force)
            result.created.append(link_result)

            # A fallback copy switches the rest of the call to copying
            if link_result.success and link_result.method != result.method:
                result.method = link_result.method

            if not link_result.success:
                result.errors.append(
                    MirrorError(
                        path=str(mapping.target_path),
                        operation=MirrorOperation.CREATE,
                        message=link_result.error or "Unknown error",
                    )
                )

        return result

    def get_mappings(self, provider: str, cognitives: list[ScannedCognitive]) -> list[MirrorMapping]:
        """
        Compute where each cognitive should be mirrored for a provider.

        Folder-mode cognitives map to <root>/<typeDir>/<name>/, file-mode
        cognitives to <root>/<typeDir>/<name><ext>.
        """
        paths = self.provider_paths.get(provider, {})
        mappings: list[MirrorMapping] = []

        for cognitive in cognitives:
            type_dir = paths.get(cognitive.cognitive_type)
            if type_dir is None:
                continue

            base = self.project_root / type_dir
            if cognitive.sync_mode == SyncMode.FOLDER:
                mappings.append(
                    MirrorMapping(
                        cognitive_name=cognitive.name,
                        cognitive_type=cognitive.cognitive_type,
                        source_path=cognitive.path,
                        target_path=base / cognitive.name,
                        is_file=False,
                    )
                )
            else:
                mappings.append(
                    MirrorMapping(
                        cognitive_name=cognitive.name,
                        cognitive_type=cognitive.cognitive_type,
                        source_path=cognitive.file_path,
                        target_path=base / cognitive.mirror_file_name,
                        is_file=True,
                    )
                )

        return mappings

    def get_existing_mirrors(self, provider: str) -> list[MirrorEntry]:
        """
        List existing mirrors in a provider's type directories.

        Files, directories and symlinks are all included (directories and
        plain files are copy-mode or legacy mirrors). Dotfiles are skipped.
        Unknown providers have no mirrors.
        """
        paths = self.provider_paths.get(provider)
        if paths is None:
            return []

        mirrors: list[MirrorEntry] = []

        for cognitive_type in CognitiveType:
            type_dir = paths.get(cognitive_type)
            if type_dir is None:
                continue

            full_path = self.project_root / type_dir
            if not full_path.is_dir():
                continue

            for entry in sorted(full_path.iterdir()):
                if entry.name.startswith("."):
                    continue
                mirror = self._mirror_info(entry, cognitive_type)
                if mirror is not None:
                    mirrors.append(mirror)

        return mirrors

    def verify_provider(self, provider: str) -> ProviderVerification:
        """
        Classify every existing mirror of a provider.

        Broken: target does not exist. Orphaned: a symlink resolving
        outside the canonical store. Everything else is valid.
        """
        verification = ProviderVerification()

        for mirror in self.get_existing_mirrors(provider):
            if not mirror.is_valid:
                verification.broken.append(mirror)
            elif mirror.is_symlink and not is_within(mirror.target, self.store_dir):
                verification.orphaned.append(mirror)
            else:
                verification.valid.append(mirror)

        return verification

    def clean_provider(self, provider: str, dry_run: bool = False) -> list[str]:
        """
        Remove broken and orphaned mirrors of a provider.

        A mirror that cannot be removed is recorded in ``self.clean_errors``
        (reset on every call) instead of the returned names. The remaining
        mirrors are still processed.

        Args:
            provider: Provider name.
            dry_run: Only list what would be removed.

        Returns:
            Cognitive names of the removed mirrors.
        """
        self.clean_errors = []
        verification = self.verify_provider(provider)
        removed: list[str] = []

        for mirror in [*verification.broken, *verification.orphaned]:
            if not dry_run:
                try:
                    remove_path(mirror.path)
                except OSError as e:
                    self.clean_errors.append(
                        MirrorError(path=str(mirror.path), operation=MirrorOperation.REMOVE, message=str(e))
                    )
                    continue
            removed.append(mirror.cognitive_name)

        return removed

    def remove_mirrors(self, provider: str, keys: set[str]) -> list[str]:
        """
        Remove the mirrors of specific cognitives from a provider.

        Failures are recorded in ``self.clean_errors`` like clean_provider().

        Args:
            provider: Provider name.
            keys: Mirror keys ("<type>/<name>") to remove.

        Returns:
            Paths of the removed mirrors.
        """
        self.clean_errors = []
        removed: list[str] = []

        for mirror in self.get_existing_mirrors(provider):
            if mirror.key not in keys:
                continue
            try:
                remove_path(mirror.path)
            except OSError as e:
                self.clean_errors.append(
                    MirrorError(path=str(mirror.path), operation=MirrorOperation.REMOVE, message=str(e))
                )
                continue
            removed.append(str(mirror.path))

        return removed

    def _mirror_info(self, path: Path, cognitive_type: CognitiveType) -> Optional[MirrorEntry]:
        """Describe an entry of a provider type directory, or None if it vanished."""
        try:
            st = path.lstat()
        except FileNotFoundError:
            return None

        is_symlink = stat.S_ISLNK(st.st_mode)

        if is_symlink:
            # Relative link targets resolve against the link's own directory
            target = Path(os.path.normpath(path.parent / os.readlink(path)))
            is_valid = target.exists()
            if is_valid:
                is_directory = target.is_dir()
            else:
                is_directory = MIRROR_EXTENSIONS.search(path.name) is None
        elif stat.S_ISDIR(st.st_mode):
            target = path
            is_valid = True
            is_directory = True
        elif stat.S_ISREG(st.st_mode):
            target = path
            is_valid = True
            is_directory = False
        else:
            return None

        name = path.name if is_directory else MIRROR_EXTENSIONS.sub("", path.name)

        return MirrorEntry(
            path=path,
            target=target,
            is_symlink=is_symlink,
            is_valid=is_valid,
            cognitive_name=name,
            cognitive_type=cognitive_type,
        )

    def _create_mirror(self, mapping: MirrorMapping, method: SyncMethod, *, force: bool) -> LinkResult:
        """
        Create one mirror, falling back from symlink to copy on failure.

        A copy that fails is final: there is nothing left to fall back to.
        """
        target = mapping.target_path

        try:
            ensure_dir(target.parent)

            if os.path.lexists(target):
                if not force:
                    return LinkResult(
                        success=False,
                        source=mapping.source_path,
                        target=target,
                        method=method,
                        error="Target already exists",
                    )
                remove_path(target)

            if method == SyncMethod.SYMLINK:
                os.symlink(
                    relative_link_target(mapping.source_path, target.parent),
                    target,
                    target_is_directory=not mapping.is_file,
                )
            else:
                copy_path(mapping.source_path, target)

            return LinkResult(success=True, source=mapping.source_path, target=target, method=method)

        except (OSError, NotImplementedError) as e:
            if method == SyncMethod.SYMLINK:
                return self._copy_fallback(mapping)

            return LinkResult(
                success=False,
                source=mapping.source_path,
                target=target,
                method=method,
                error=str(e),
            )

    def _copy_fallback(self, mapping: MirrorMapping) -> LinkResult:
        """Copy a mirror after a failed symlink attempt."""
        try:
            copy_path(mapping.source_path, mapping.target_path)
        except OSError as e:
            return LinkResult(
                success=False,
                source=mapping.source_path,
                target=mapping.target_path,
                method=SyncMethod.COPY,
                error=str(e),
            )

        return LinkResult(
            success=True,
            source=mapping.source_path,
            target=mapping.target_path,
            method=SyncMethod.COPY,
        )
