# SynapSync Doctor
# Project health checks and automatic repairs

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from synapsync.config.defaults import get_default_store_dir
from synapsync.config.loader import find_config, load_config, validate_config_file
from synapsync.config.schema import CognitiveType, ProjectConfig
from synapsync.errors import ManifestError, SynapSyncError
from synapsync.sync.engine import SyncEngine
from synapsync.utils.paths import ensure_dir


class CheckStatus(str, Enum):
    """Outcome of a single diagnostic check."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
    SKIP = "skip"


@dataclass
class DiagnosticCheck:
    """One diagnostic check and what it found."""

    id: str
    name: str
    status: CheckStatus
    message: str
    fixable: bool = False
    details: list[str] = field(default_factory=list)

    @property
    def needs_fix(self) -> bool:
        """Check if fix() would act on this check."""
        return self.fixable and self.status in (CheckStatus.WARN, CheckStatus.FAIL)


@dataclass
class DiagnosticResult:
    """All checks of one diagnose() call."""

    checks: list[DiagnosticCheck] = field(default_factory=list)

    def _count(self, status: CheckStatus) -> int:
        return sum(1 for check in self.checks if check.status == status)

    @property
    def passed(self) -> int:
        return self._count(CheckStatus.PASS)

    @property
    def warnings(self) -> int:
        return self._count(CheckStatus.WARN)

    @property
    def failed(self) -> int:
        return self._count(CheckStatus.FAIL)

    @property
    def skipped(self) -> int:
        return self._count(CheckStatus.SKIP)

    @property
    def healthy(self) -> bool:
        """True when every check passed or was skipped."""
        return self.warnings == 0 and self.failed == 0


@dataclass
class FixResult:
    """Checks repaired (or not) by fix()."""

    fixed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed


class Doctor:
    """
    Diagnoses and repairs a SynapSync project.

    Checks the store directory, the configuration, the manifest and its
    agreement with the store, and the mirrors of every enabled provider.
    """

    def __init__(
        self,
        project_root: Path,
        store_dir: Path,
        config: Optional[ProjectConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize doctor.

        Args:
            project_root: Project root directory.
            store_dir: Canonical store directory.
            config: Loaded configuration, None if missing or invalid.
            config_path: Configuration file that was found, if any.
        """
        self.project_root = project_root
        self.store_dir = store_dir
        self.config = config
        self.config_path = config_path

    @classmethod
    def from_project(cls, start_dir: Optional[Path] = None) -> "Doctor":
        """
        Build a doctor for the project containing start_dir.

        Works without a usable configuration: the project root then falls
        back to start_dir and the store to its default location.
        """
        start = start_dir or Path.cwd()
        config_path = find_config(start)
        project_root = config_path.parent if config_path else start

        config = None
        if config_path is not None and validate_config_file(config_path)[0]:
            config = load_config(config_path)

        if config is not None:
            store_dir = config.get_store_dir(project_root)
        else:
            store_dir = project_root / get_default_store_dir()

        return cls(project_root, store_dir, config=config, config_path=config_path)

    def _engine(self) -> SyncEngine:
        return SyncEngine(self.store_dir, project_root=self.project_root, config=self.config)

    def diagnose(self, checks: Optional[list[str]] = None) -> DiagnosticResult:
        """
        Run every diagnostic check.

        Args:
            checks: Only keep checks with these ids (default: all).

        Returns:
            DiagnosticResult with one entry per check.
        """
        engine = self._engine()
        found = [
            self.check_store_dir(),
            self.check_config(),
            self.check_manifest(engine),
            self.check_manifest_consistency(engine),
            self.check_providers(),
            *self.check_mirrors(engine),
        ]

        if checks:
            found = [check for check in found if check.id in checks]

        return DiagnosticResult(checks=found)

    def check_store_dir(self) -> DiagnosticCheck:
        if self.store_dir.is_dir():
            return DiagnosticCheck(
                id="store-dir",
                name="Store directory",
                status=CheckStatus.PASS,
                message=f"{self.store_dir} exists",
                fixable=True,
            )
        return DiagnosticCheck(
            id="store-dir",
            name="Store directory",
            status=CheckStatus.FAIL,
            message=f"{self.store_dir} not found",
            fixable=True,
        )

    def check_config(self) -> DiagnosticCheck:
        if self.config_path is None:
            return DiagnosticCheck(
                id="config-valid",
                name="Configuration",
                status=CheckStatus.FAIL,
                message="Configuration file not found",
            )

        is_valid, errors = validate_config_file(self.config_path)
        if is_valid:
            return DiagnosticCheck(
                id="config-valid",
                name="Configuration",
                status=CheckStatus.PASS,
                message="Configuration is valid",
            )
        return DiagnosticCheck(
            id="config-valid",
            name="Configuration",
            status=CheckStatus.FAIL,
            message="Configuration file exists but is invalid",
            details=errors,
        )

    def check_manifest(self, engine: SyncEngine) -> DiagnosticCheck:
        manifest_path = engine.manifest.manifest_path
        if not manifest_path.exists():
            return DiagnosticCheck(
                id="manifest",
                name="Manifest",
                status=CheckStatus.WARN,
                message="manifest.json not found (created on first sync)",
                fixable=True,
            )

        try:
            engine.manifest.load()
        except ManifestError as e:
            return DiagnosticCheck(
                id="manifest",
                name="Manifest",
                status=CheckStatus.FAIL,
                message="manifest.json is corrupted",
                fixable=True,
                details=[str(e)],
            )

        return DiagnosticCheck(
            id="manifest",
            name="Manifest",
            status=CheckStatus.PASS,
            message="manifest.json is valid",
            fixable=True,
        )

    def check_manifest_consistency(self, engine: SyncEngine) -> DiagnosticCheck:
        if not self.store_dir.is_dir():
            return DiagnosticCheck(
                id="manifest-consistency",
                name="Manifest consistency",
                status=CheckStatus.SKIP,
                message="Skipped - store directory not found",
                fixable=True,
            )

        try:
            status = engine.get_status()
        except SynapSyncError as e:
            return DiagnosticCheck(
                id="manifest-consistency",
                name="Manifest consistency",
                status=CheckStatus.FAIL,
                message=str(e),
                fixable=True,
            )

        if status.in_sync:
            return DiagnosticCheck(
                id="manifest-consistency",
                name="Manifest consistency",
                status=CheckStatus.PASS,
                message="Manifest matches the store",
                fixable=True,
            )

        details = []
        if status.new:
            details.append(f"{status.new} new cognitive(s) not in manifest")
        if status.removed:
            details.append(f"{status.removed} cognitive(s) in manifest but not in store")
        if status.modified:
            details.append(f"{status.modified} modified cognitive(s)")

        return DiagnosticCheck(
            id="manifest-consistency",
            name="Manifest consistency",
            status=CheckStatus.WARN,
            message="Manifest is out of sync",
            fixable=True,
            details=details,
        )

    def check_providers(self) -> DiagnosticCheck:
        if self.config is None:
            return DiagnosticCheck(
                id="providers",
                name="Providers",
                status=CheckStatus.SKIP,
                message="Skipped - no configuration",
            )

        enabled = self.config.get_enabled_providers()
        if not enabled:
            return DiagnosticCheck(
                id="providers",
                name="Providers",
                status=CheckStatus.WARN,
                message="No providers are enabled",
            )

        return DiagnosticCheck(
            id="providers",
            name="Providers",
            status=CheckStatus.PASS,
            message=f"{len(enabled)} provider(s) enabled: {', '.join(enabled)}",
        )

    def check_mirrors(self, engine: SyncEngine) -> list[DiagnosticCheck]:
        checks: list[DiagnosticCheck] = []

        for provider in engine.get_enabled_providers():
            verification = engine.projector.verify_provider(provider)
            check_id = f"mirrors-{provider}"
            name = f"{provider} mirrors"

            if not verification.has_issues:
                valid = len(verification.valid)
                checks.append(
                    DiagnosticCheck(
                        id=check_id,
                        name=name,
                        status=CheckStatus.PASS,
                        message=f"{valid} valid mirror(s)" if valid else "No mirrors yet",
                        fixable=True,
                    )
                )
                continue

            summary = [f"{len(verification.valid)} valid"]
            if verification.broken:
                summary.append(f"{len(verification.broken)} broken")
            if verification.orphaned:
                summary.append(f"{len(verification.orphaned)} orphaned")

            checks.append(
                DiagnosticCheck(
                    id=check_id,
                    name=name,
                    status=CheckStatus.WARN,
                    message=", ".join(summary),
                    fixable=True,
                    details=[
                        *(f"Broken: {m.key}" for m in verification.broken),
                        *(f"Orphaned: {m.key}" for m in verification.orphaned),
                    ],
                )
            )

        return checks

    def fix(self, checks: Optional[list[str]] = None) -> FixResult:
        """
        Repair every fixable check that did not pass.

        Args:
            checks: Only consider checks with these ids (default: all).

        Returns:
            FixResult naming the repaired and failed check ids.
        """
        result = FixResult()

        for check in self.diagnose(checks).checks:
            if not check.needs_fix:
                continue
            try:
                self._fix_check(check)
            except (OSError, SynapSyncError) as e:
                result.failed[check.id] = str(e)
            else:
                result.fixed.append(check.id)

        return result

    def _fix_check(self, check: DiagnosticCheck) -> None:
        if check.id == "store-dir":
            self._fix_store_dir()
        elif check.id in ("manifest", "manifest-consistency"):
            self._fix_manifest()
        elif check.id.startswith("mirrors-"):
            self._fix_mirrors(check.id.removeprefix("mirrors-"))

    def _fix_store_dir(self) -> None:
        ensure_dir(self.store_dir)
        for cognitive_type in CognitiveType:
            ensure_dir(self.store_dir / cognitive_type.plural)

    def _fix_manifest(self) -> None:
        """Rebuild the manifest from the store, setting a corrupted file aside."""
        self._fix_store_dir()
        engine = self._engine()

        try:
            engine.manifest.load()
        except ManifestError:
            backup = engine.manifest.manifest_path.with_name(engine.manifest.manifest_path.name + ".bak")
            os.replace(engine.manifest.manifest_path, backup)
            engine.manifest.reload()

        result = engine.sync(manifest_only=True)
        if not result.success:
            raise SynapSyncError("; ".join(error.message for error in result.errors))
        engine.manifest.save()

    def _fix_mirrors(self, provider: str) -> None:
        engine = self._engine()
        engine.projector.clean_provider(provider)
        if engine.projector.clean_errors:
            raise SynapSyncError("; ".join(error.message for error in engine.projector.clean_errors))
