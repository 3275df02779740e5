# Tests for synapsync.sync.engine
# Two-phase sync: manifest reconciliation, then provider projection

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from synapsync.config.schema import (
    CognitiveType,
    ProjectConfig,
    ProviderSyncConfig,
    SyncConfig,
    SyncMethod,
)
from synapsync.errors import CognitiveNotFoundError, ConfigNotFoundError
from synapsync.sync.actions import SyncOperation
from synapsync.sync.engine import SyncEngine, SyncErrorCode, SyncPhase


def _config(method: SyncMethod = SyncMethod.SYMLINK, **providers: bool) -> ProjectConfig:
    providers = providers or {"claude": True}
    return ProjectConfig(
        name="test-project",
        sync=SyncConfig(
            method=method,
            providers={name: ProviderSyncConfig(enabled=enabled) for name, enabled in providers.items()},
        ),
    )


@pytest.fixture
def engine(project_root: Path, store_dir: Path) -> SyncEngine:
    return SyncEngine(store_dir, project_root=project_root, config=_config())


def _manifest(store_dir: Path) -> dict:
    return json.loads((store_dir / "manifest.json").read_text(encoding="utf-8"))


class TestSync:
    """Tests for SyncEngine.sync."""

    def test_first_sync(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("demo-skill")
        make_cognitive("demo-agent", CognitiveType.AGENT)

        result = engine.sync()

        assert result.success
        assert result.added == 2
        assert result.total == 2
        assert [a.operation for a in result.actions] == [SyncOperation.ADD, SyncOperation.ADD]
        assert (project_root / ".claude" / "skills" / "demo-skill").is_symlink()
        assert (project_root / ".claude" / "agents" / "demo-agent.md").is_symlink()

        data = _manifest(store_dir)
        assert set(data["cognitives"]) == {"demo-skill", "demo-agent"}
        assert data["syncs"]["claude"]["method"] == "symlink"
        assert sorted(data["syncs"]["claude"]["cognitives"]) == ["demo-agent", "demo-skill"]

    def test_second_sync_is_noop(self, engine, store_dir, make_cognitive):
        make_cognitive("demo")
        engine.sync()

        result = engine.sync()

        assert result.success
        assert result.actions == []
        assert result.unchanged == 1
        assert result.provider_results[0].created == []
        assert result.provider_results[0].skipped == ["demo"]

    def test_deleted_cognitive_converges(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("keep")
        doomed = make_cognitive("doomed")
        engine.sync()

        for path in doomed.parent.iterdir():
            path.unlink()
        doomed.parent.rmdir()
        result = engine.sync()

        assert result.removed == 1
        assert result.provider_results[0].removed == ["doomed"]
        assert "doomed" not in _manifest(store_dir)["cognitives"]
        assert not os.path.lexists(project_root / ".claude" / "skills" / "doomed")

    def test_modified_cognitive_keeps_install_time(self, engine, store_dir, make_cognitive):
        file_path = make_cognitive("demo")
        engine.sync()
        installed_at = _manifest(store_dir)["cognitives"]["demo"]["installedAt"]

        file_path.write_text("---\nname: demo\nversion: 2.0.0\n---\n# Changed\n", encoding="utf-8")
        result = engine.sync()

        assert result.updated == 1
        entry = _manifest(store_dir)["cognitives"]["demo"]
        assert entry["version"] == "2.0.0"
        assert entry["installedAt"] == installed_at

    def test_dry_run_is_pure(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("demo")

        result = engine.sync(dry_run=True)

        assert result.success
        assert result.dry_run
        assert result.added == 1
        assert len(result.provider_results[0].created) == 1
        assert not (store_dir / "manifest.json").exists()
        assert not (project_root / ".claude").exists()

    def test_preview(self, engine, store_dir, make_cognitive):
        make_cognitive("demo")
        result = engine.preview(manifest_only=True)
        assert result.dry_run
        assert result.added == 1
        assert not (store_dir / "manifest.json").exists()

    def test_manifest_only(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("demo")

        result = engine.sync(manifest_only=True)

        assert result.provider_results == []
        assert not (project_root / ".claude").exists()
        assert _manifest(store_dir)["syncs"] == {}

    def test_no_config_means_no_providers(self, project_root, store_dir, make_cognitive):
        make_cognitive("demo")
        engine = SyncEngine(store_dir)

        result = engine.sync()

        assert engine.project_root == project_root
        assert result.success
        assert result.provider_results == []
        assert not (project_root / ".claude").exists()
        assert "demo" in _manifest(store_dir)["cognitives"]

    def test_provider_filter(self, project_root, store_dir, make_cognitive):
        make_cognitive("demo")
        engine = SyncEngine(store_dir, project_root=project_root, config=_config(claude=True, cursor=True))

        result = engine.sync(provider="cursor")

        assert [r.provider for r in result.provider_results] == ["cursor"]
        assert (project_root / ".cursor" / "skills" / "demo").is_symlink()
        assert not (project_root / ".claude").exists()

    def test_disabled_provider_filter(self, engine, make_cognitive):
        make_cognitive("demo")
        assert engine.sync(provider="cursor").provider_results == []

    def test_config_method_copy(self, project_root, store_dir, make_cognitive):
        make_cognitive("demo")
        engine = SyncEngine(store_dir, project_root=project_root, config=_config(SyncMethod.COPY))

        result = engine.sync()

        assert result.provider_results[0].method == SyncMethod.COPY
        mirror = project_root / ".claude" / "skills" / "demo"
        assert mirror.is_dir() and not mirror.is_symlink()
        assert _manifest(store_dir)["syncs"]["claude"]["method"] == "copy"

    def test_type_filter_leaves_other_types(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("demo")
        make_cognitive("helper", CognitiveType.AGENT)
        engine.sync()

        result = engine.sync(types=[CognitiveType.AGENT])

        assert result.actions == []
        assert result.total == 2
        assert result.provider_results[0].removed == []
        assert (project_root / ".claude" / "skills" / "demo").is_symlink()

    def test_category_filter_uses_store_directory(self, engine, store_dir, make_cognitive):
        make_cognitive("demo", category="general", content="---\nname: demo\ncategory: frontend\n---\n# Demo\n")
        engine.sync()

        declared = engine.sync(categories=["frontend"])
        assert declared.removed == 0
        assert "demo" in _manifest(store_dir)["cognitives"]

        for _ in range(2):
            by_directory = engine.sync(categories=["general"])
            assert by_directory.actions == []
            assert by_directory.unchanged == 1

    def test_category_filter_removes_deleted_entries(self, engine, store_dir, make_cognitive):
        make_cognitive("keep", category="general")
        gone = make_cognitive("gone", category="general")
        engine.sync()

        gone.unlink()
        gone.parent.rmdir()
        result = engine.sync(categories=["general"])

        assert result.removed == 1
        assert list(_manifest(store_dir)["cognitives"]) == ["keep"]

    def test_fallback_copy_recorded_in_manifest(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("demo")

        with patch("synapsync.sync.projector.os.symlink", side_effect=OSError("not permitted")):
            result = engine.sync()

        assert result.success
        assert result.provider_results[0].method == SyncMethod.COPY
        assert not (project_root / ".claude" / "skills" / "demo").is_symlink()
        assert _manifest(store_dir)["syncs"]["claude"]["method"] == "copy"

    def test_rehash_missing(self, engine, store_dir, make_cognitive):
        make_cognitive("legacy")
        engine.sync()
        engine.manifest.update_entry("legacy", fingerprint=None)
        engine.manifest.save()

        assert engine.sync().updated == 0
        engine.manifest.update_entry("legacy", fingerprint=None)
        assert engine.sync(rehash_missing=True).updated == 1

    def test_progress_phases(self, engine, make_cognitive):
        make_cognitive("demo")
        updates = []

        engine.sync(on_progress=updates.append)

        phases = [u.phase for u in updates]
        assert phases[0] == SyncPhase.SCANNING
        assert phases[-1] == SyncPhase.COMPLETE
        assert SyncPhase.COMPARING in phases
        assert SyncPhase.RECONCILING in phases
        assert SyncPhase.SAVING in phases
        assert phases.index(SyncPhase.COMPARING) < phases.index(SyncPhase.RECONCILING)
        assert updates[-1].message == "Sync complete"


class TestSyncErrors:
    """Tests for error reporting of SyncEngine.sync."""

    def test_missing_store_aborts(self, project_root):
        engine = SyncEngine(project_root / ".synapsync", config=_config())

        result = engine.sync()

        assert not result.success
        assert len(result.errors) == 1
        assert result.errors[0].code == SyncErrorCode.SCAN_FAILED
        assert result.provider_results == []
        assert not (project_root / ".synapsync").exists()

    def test_invalid_manifest_aborts(self, engine, store_dir, make_cognitive):
        make_cognitive("demo")
        (store_dir / "manifest.json").write_text("{broken", encoding="utf-8")

        result = engine.sync()

        assert [e.code for e in result.errors] == [SyncErrorCode.MANIFEST_READ_FAILED]
        assert (store_dir / "manifest.json").read_text(encoding="utf-8") == "{broken"

    def test_unreadable_cognitive_reported(self, engine, project_root, make_cognitive):
        make_cognitive("bad").write_bytes(b"\xff\xfe")
        make_cognitive("good")

        result = engine.sync()

        assert not result.success
        assert [e.code for e in result.errors] == [SyncErrorCode.COGNITIVE_PARSE_FAILED]
        assert result.added == 1
        assert (project_root / ".claude" / "skills" / "good").is_symlink()

    def test_manifest_write_failure(self, engine, make_cognitive):
        make_cognitive("demo")

        with patch.object(engine.manifest, "save", side_effect=PermissionError("read-only")):
            result = engine.sync()

        assert {e.code for e in result.errors} == {SyncErrorCode.MANIFEST_WRITE_FAILED}
        assert len(result.provider_results) == 1

    def test_provider_errors_accumulated(self, engine, make_cognitive):
        make_cognitive("dup", CognitiveType.AGENT, "frontend")
        make_cognitive("dup", CognitiveType.AGENT, "backend")

        result = engine.sync()

        assert [e.code for e in result.errors] == [SyncErrorCode.PROVIDER_SYNC_FAILED]
        assert "Target already exists" in result.errors[0].message

    def test_provider_exception_does_not_abort(self, engine, make_cognitive):
        make_cognitive("demo")

        with patch.object(engine.projector, "sync_provider", side_effect=OSError("boom")):
            result = engine.sync()

        assert result.errors[0].code == SyncErrorCode.PROVIDER_SYNC_FAILED
        assert result.added == 1
        assert result.total == 1


class TestStatus:
    """Tests for get_status, get_provider_status and get_enabled_providers."""

    def test_status_out_of_sync(self, engine, make_cognitive):
        make_cognitive("demo")
        status = engine.get_status()
        assert status.filesystem == 1
        assert status.manifest == 0
        assert status.new == 1
        assert not status.in_sync

    def test_status_in_sync(self, engine, store_dir, make_cognitive):
        make_cognitive("demo")
        engine.sync()

        status = engine.get_status()

        assert status.in_sync
        assert status.manifest == status.filesystem == 1

    def test_provider_status(self, engine, project_root, make_cognitive):
        make_cognitive("demo")
        engine.sync()
        os.symlink("missing", project_root / ".claude" / "skills" / "gone")

        status = engine.get_provider_status("claude")

        assert (status.valid, status.broken, status.orphaned) == (1, 1, 0)
        assert not status.healthy

    def test_enabled_providers(self, project_root, store_dir):
        engine = SyncEngine(store_dir, project_root=project_root, config=_config(claude=True, cursor=False, gemini=True))
        assert engine.get_enabled_providers() == ["claude", "gemini"]
        assert engine.get_enabled_providers("gemini") == ["gemini"]
        assert SyncEngine(store_dir).get_enabled_providers() == []


class TestUninstall:
    """Tests for SyncEngine.uninstall."""

    def test_removes_files_entry_and_mirrors(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("demo")
        make_cognitive("keep")
        engine.sync()

        result = engine.uninstall("demo")

        assert result.success
        assert result.removed_files == store_dir / "skills" / "general" / "demo"
        assert not result.removed_files.exists()
        assert list(result.removed_mirrors) == ["claude"]
        assert not os.path.lexists(project_root / ".claude" / "skills" / "demo")
        assert (project_root / ".claude" / "skills" / "keep").is_symlink()

        manifest = _manifest(store_dir)
        assert list(manifest["cognitives"]) == ["keep"]
        assert manifest["syncs"]["claude"]["cognitives"] == ["keep"]

    def test_next_sync_is_noop(self, engine, make_cognitive):
        make_cognitive("demo")
        engine.sync()
        engine.uninstall("demo")

        result = engine.sync()

        assert result.actions == []
        assert result.total == 0

    def test_directory_named_differently(self, engine, store_dir, make_cognitive):
        make_cognitive("demo", dir_name="demo-skill")
        engine.sync()

        result = engine.uninstall("demo")

        assert result.removed_files == store_dir / "skills" / "general" / "demo-skill"
        assert not result.removed_files.exists()

    def test_keep_files(self, engine, project_root, store_dir, make_cognitive):
        make_cognitive("demo")
        engine.sync()

        result = engine.uninstall("demo", keep_files=True)

        assert result.success
        assert result.removed_files is None
        assert result.removed_mirrors == {}
        assert (store_dir / "skills" / "general" / "demo").is_dir()
        assert (project_root / ".claude" / "skills" / "demo").is_symlink()
        assert "demo" not in _manifest(store_dir)["cognitives"]

    def test_not_installed(self, engine):
        with pytest.raises(CognitiveNotFoundError, match="ghost"):
            engine.uninstall("ghost")

    def test_mirror_removal_failure_reported(self, engine, store_dir, make_cognitive):
        make_cognitive("demo")
        engine.sync()

        with patch("synapsync.sync.projector.remove_path", side_effect=PermissionError("locked")):
            result = engine.uninstall("demo")

        assert not result.success
        assert result.errors[0].code == SyncErrorCode.PROVIDER_SYNC_FAILED
        assert result.errors[0].message == "locked"
        assert "demo" not in _manifest(store_dir)["cognitives"]


class TestFromProject:
    """Tests for SyncEngine.from_project."""

    def test_discovers_config(self, project_root, store_dir, config_file):
        nested = project_root / "src" / "deep"
        nested.mkdir(parents=True)

        engine = SyncEngine.from_project(nested)

        assert engine.project_root == project_root.resolve()
        assert engine.store_dir == project_root.resolve() / ".synapsync"
        assert engine.get_enabled_providers() == ["claude"]

    def test_missing_config(self, temp_dir):
        with pytest.raises(ConfigNotFoundError):
            SyncEngine.from_project(temp_dir)
