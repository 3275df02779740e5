# Tests for synapsync.sync.scanner
# Store discovery and manifest comparison

from unittest.mock import patch

import pytest

from synapsync.config.schema import CognitiveType
from synapsync.errors import StoreNotFoundError
from synapsync.sync.manifest import ManifestEntry
from synapsync.sync.scanner import CognitiveScanner
from synapsync.utils.hashing import fingerprint


def _entry(name: str, fp: str | None, cognitive_type: CognitiveType = CognitiveType.SKILL) -> ManifestEntry:
    return ManifestEntry(name=name, cognitive_type=cognitive_type, category="general", fingerprint=fp)


class TestScan:
    """Tests for CognitiveScanner.scan."""

    def test_missing_store(self, temp_dir):
        with pytest.raises(StoreNotFoundError):
            CognitiveScanner(temp_dir / "missing").scan()

    def test_empty_store(self, store_dir):
        assert CognitiveScanner(store_dir).scan() == []

    def test_finds_all_types(self, store_dir, make_cognitive):
        make_cognitive("demo-skill")
        make_cognitive("demo-agent", CognitiveType.AGENT, "backend")
        make_cognitive("demo-flow", CognitiveType.WORKFLOW, content="name: demo-flow\n")

        found = {c.name: c for c in CognitiveScanner(store_dir).scan()}

        assert set(found) == {"demo-skill", "demo-agent", "demo-flow"}
        assert found["demo-agent"].category == "backend"
        assert found["demo-agent"].mirror_file_name == "demo-agent.md"
        assert found["demo-flow"].mirror_file_name == "demo-flow.yaml"

    def test_item_fields(self, store_dir, make_cognitive):
        file_path = make_cognitive("demo-skill")

        (item,) = CognitiveScanner(store_dir).scan()

        assert item.cognitive_type == CognitiveType.SKILL
        assert item.path == file_path.parent
        assert item.file_path == file_path
        assert item.version == "1.2.0"
        assert item.fingerprint == fingerprint(file_path.read_bytes())
        assert item.metadata.tags == ["testing", "sample"]
        assert item.key == "skill/demo-skill"

    def test_metadata_category_overrides_directory(self, store_dir, make_cognitive):
        make_cognitive("x", content="---\nname: x\ncategory: security\n---\n")
        (item,) = CognitiveScanner(store_dir).scan()
        assert item.category == "security"

    def test_missing_primary_file_skipped(self, store_dir):
        (store_dir / "skills" / "general" / "empty").mkdir(parents=True)
        scanner = CognitiveScanner(store_dir)
        assert scanner.scan() == []
        assert scanner.errors == []

    def test_dot_directories_skipped(self, store_dir, make_cognitive):
        make_cognitive("hidden", dir_name=".hidden")
        make_cognitive("hidden-cat", category=".cache")
        assert CognitiveScanner(store_dir).scan() == []

    def test_name_falls_back_to_directory(self, store_dir, make_cognitive):
        make_cognitive("ignored", content="no front matter, no heading", dir_name="folder-name")
        (item,) = CognitiveScanner(store_dir).scan()
        assert item.name == "folder-name"
        assert item.version == "1.0.0"

    def test_type_and_category_filters(self, store_dir, make_cognitive):
        make_cognitive("a", category="frontend")
        make_cognitive("b", category="backend")
        make_cognitive("c", CognitiveType.AGENT, "frontend")

        scanner = CognitiveScanner(store_dir)

        assert [c.name for c in scanner.scan(types=[CognitiveType.SKILL])] == ["b", "a"]
        assert {c.name for c in scanner.scan(categories=["frontend"])} == {"a", "c"}

    def test_unreadable_item_collected(self, store_dir, make_cognitive):
        bad = make_cognitive("bad")
        bad.write_bytes(b"\xff\xfe invalid utf-8")
        make_cognitive("good")

        scanner = CognitiveScanner(store_dir)
        found = scanner.scan()

        assert [c.name for c in found] == ["good"]
        assert len(scanner.errors) == 1
        assert scanner.errors[0].path == bad.parent

    def test_read_error_collected(self, store_dir, make_cognitive):
        make_cognitive("locked")
        scanner = CognitiveScanner(store_dir)

        with patch("pathlib.Path.read_bytes", side_effect=PermissionError("denied")):
            assert scanner.scan() == []

        assert "denied" in scanner.errors[0].error

    def test_errors_reset_between_scans(self, store_dir, make_cognitive):
        make_cognitive("bad").write_bytes(b"\xff")
        scanner = CognitiveScanner(store_dir)
        scanner.scan()
        (store_dir / "skills" / "general" / "bad" / "SKILL.md").write_text("# Bad", encoding="utf-8")
        scanner.scan()
        assert scanner.errors == []


class TestCompare:
    """Tests for CognitiveScanner.compare."""

    def test_buckets(self, store_dir, make_cognitive):
        make_cognitive("same")
        make_cognitive("changed")
        make_cognitive("fresh")
        scanner = CognitiveScanner(store_dir)
        scanned = scanner.scan()
        fps = {c.name: c.fingerprint for c in scanned}

        known = [
            _entry("same", fps["same"]),
            _entry("changed", "0000000000000000"),
            _entry("gone", "1111111111111111"),
        ]
        result = scanner.compare(scanned, known)

        assert [c.name for c in result.new] == ["fresh"]
        assert [c.name for c in result.modified] == ["changed"]
        assert result.removed == ["gone"]
        assert result.unchanged == 1
        assert result.has_changes

    def test_missing_fingerprint_is_unchanged(self, store_dir, make_cognitive):
        make_cognitive("legacy")
        scanner = CognitiveScanner(store_dir)
        result = scanner.compare(scanner.scan(), [_entry("legacy", None)])
        assert result.modified == []
        assert result.unchanged == 1
        assert not result.has_changes

    def test_missing_fingerprint_rehash(self, store_dir, make_cognitive):
        make_cognitive("legacy")
        scanner = CognitiveScanner(store_dir)
        result = scanner.compare(scanner.scan(), [_entry("legacy", None)], rehash_missing=True)
        assert [c.name for c in result.modified] == ["legacy"]


class TestHelpers:
    """Tests for detect_type, to_manifest_entry and count_by_type."""

    def test_detect_type_priority(self, temp_dir):
        (temp_dir / "AGENT.md").write_text("a", encoding="utf-8")
        (temp_dir / "SKILL.md").write_text("s", encoding="utf-8")
        assert CognitiveScanner(temp_dir).detect_type(temp_dir) == CognitiveType.SKILL

    def test_detect_type_none(self, temp_dir):
        assert CognitiveScanner(temp_dir).detect_type(temp_dir) is None

    def test_detect_workflow(self, temp_dir):
        (temp_dir / "WORKFLOW.yaml").write_text("steps: []", encoding="utf-8")
        assert CognitiveScanner(temp_dir).detect_type(temp_dir) == CognitiveType.WORKFLOW

    def test_to_manifest_entry(self, store_dir, make_cognitive):
        make_cognitive("demo")
        scanner = CognitiveScanner(store_dir)
        (item,) = scanner.scan()

        entry = scanner.to_manifest_entry(item)

        assert entry.name == "demo"
        assert entry.source == "local"
        assert entry.fingerprint == item.fingerprint
        assert entry.version == "1.2.0"
        assert entry.installed_at

    def test_count_by_type(self, store_dir, make_cognitive):
        make_cognitive("a")
        make_cognitive("b", CognitiveType.AGENT)
        counts = CognitiveScanner.count_by_type(CognitiveScanner(store_dir).scan())
        assert counts[CognitiveType.SKILL] == 1
        assert counts[CognitiveType.AGENT] == 1
        assert counts[CognitiveType.TOOL] == 0
