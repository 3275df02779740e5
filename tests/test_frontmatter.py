# Tests for synapsync.sync.frontmatter
# Front-matter parsing and name/version fallbacks

from synapsync.sync.frontmatter import (
    CognitiveMetadata,
    extract_name,
    extract_version,
    parse_frontmatter,
)


class TestParseFrontmatter:
    """Tests for parse_frontmatter."""

    def test_yaml_block(self):
        content = """---
name: code-reviewer
version: 2.0.0
description: Reviews code
category: backend
tags:
  - review
  - quality
owner: team-a
---

# Body
"""
        meta = parse_frontmatter(content)
        assert meta.name == "code-reviewer"
        assert meta.version == "2.0.0"
        assert meta.category == "backend"
        assert meta.tags == ["review", "quality"]
        assert meta.extra == {"owner": "team-a"}

    def test_no_header(self):
        assert parse_frontmatter("# Just a heading\n") == CognitiveMetadata()

    def test_header_not_at_start(self):
        assert parse_frontmatter("\n---\nname: x\n---\n").name is None

    def test_crlf_line_endings(self):
        meta = parse_frontmatter("---\r\nname: windows\r\n---\r\nbody")
        assert meta.name == "windows"

    def test_numeric_version_is_text(self):
        meta = parse_frontmatter("---\nversion: 2.1\n---\n")
        assert meta.version == "2.1"

    def test_scalars_keep_written_text(self):
        meta = parse_frontmatter("---\nname: no\nversion: 1.10\nlicense: 0123\n---\n")
        assert meta.name == "no"
        assert meta.version == "1.10"
        assert meta.license == "0123"

    def test_empty_values_are_unset(self):
        meta = parse_frontmatter("---\nname:\ntags:\n---\n")
        assert meta.name is None
        assert meta.tags == []

    def test_invalid_yaml_falls_back(self):
        content = """---
name: fallback: skill
description: "quoted: value"
tags: [one, two]
providers:
  - claude
  - cursor
---
"""
        meta = parse_frontmatter(content)
        assert meta.name == "fallback: skill"
        assert meta.description == "quoted: value"
        assert meta.tags == ["one", "two"]
        assert meta.providers == ["claude", "cursor"]

    def test_non_mapping_header(self):
        assert parse_frontmatter("---\n- just\n- a list\n---\n") == CognitiveMetadata()

    def test_to_dict_drops_empty(self):
        meta = CognitiveMetadata(name="x", tags=[], extra={"k": "v"})
        assert meta.to_dict() == {"k": "v", "name": "x"}


class TestExtractName:
    """Tests for extract_name fallbacks."""

    def test_metadata_wins(self):
        meta = CognitiveMetadata(name="from-meta")
        assert extract_name(meta, "dir-name", "# Some Title") == "from-meta"

    def test_heading_kebab_cased(self):
        assert extract_name(CognitiveMetadata(), "dir-name", "intro\n# My Great Skill!\n") == "my-great-skill"

    def test_directory_name(self):
        assert extract_name(CognitiveMetadata(), "dir-name", "no heading here") == "dir-name"


class TestExtractVersion:
    """Tests for extract_version fallbacks."""

    def test_metadata_wins(self):
        assert extract_version(CognitiveMetadata(version="3.0.0"), "version: 1.1.1") == "3.0.0"

    def test_pattern_in_text(self):
        assert extract_version(CognitiveMetadata(), "Some text\nVersion: '1.4.2'\n") == "1.4.2"

    def test_default(self):
        assert extract_version(CognitiveMetadata(), "nothing") == "1.0.0"
