# SynapSync Test Fixtures
# Pytest fixtures for SynapSync tests

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml

from synapsync.config.schema import CognitiveType

SKILL_CONTENT = """---
name: {name}
version: 1.2.0
description: A test skill
category: {category}
tags: [testing, sample]
---

# Test Skill

This is a test skill.
"""

AGENT_CONTENT = """---
name: {name}
description: A test agent
---

# Test Agent
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of the tests."""
    monkeypatch.delenv("SYNAPSYNC_DIR", raising=False)
    monkeypatch.delenv("SYNAPSYNC_CONFIG", raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_root(temp_dir: Path) -> Path:
    """Create an empty project directory."""
    root = temp_dir / "project"
    root.mkdir()
    return root


@pytest.fixture
def store_dir(project_root: Path) -> Path:
    """Create an empty canonical store inside the project."""
    store = project_root / ".synapsync"
    store.mkdir()
    return store


@pytest.fixture
def make_cognitive(store_dir: Path) -> Callable[..., Path]:
    """
    Factory writing a cognitive into the store.

    Returns the path of the primary file.
    """

    def _make(
        name: str,
        cognitive_type: CognitiveType = CognitiveType.SKILL,
        category: str = "general",
        content: str | None = None,
        dir_name: str | None = None,
    ) -> Path:
        item_dir = store_dir / cognitive_type.plural / category / (dir_name or name)
        item_dir.mkdir(parents=True, exist_ok=True)

        if content is None:
            template = SKILL_CONTENT if cognitive_type == CognitiveType.SKILL else AGENT_CONTENT
            content = template.format(name=name, category=category)

        file_path = item_dir / cognitive_type.file_name
        file_path.write_text(content, encoding="utf-8")
        return file_path

    return _make


@pytest.fixture
def config_file(project_root: Path) -> Path:
    """Write a project config with only the claude provider enabled and plain output."""
    config = {
        "name": "test-project",
        "cli": {"color": False},
        "storage": {"dir": ".synapsync"},
        "sync": {
            "method": "symlink",
            "providers": {
                "claude": {"enabled": True},
                "cursor": {"enabled": False},
            },
        },
    }
    path = project_root / "synapsync.config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path
