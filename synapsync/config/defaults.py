# SynapSync Default Configuration
# Constants, provider path table and default project configuration

import copy
import os
from typing import Any

import yaml

# Cognitive types in detection priority order
COGNITIVE_TYPES: tuple[str, ...] = ("skill", "agent", "prompt", "workflow", "tool")

# Canonical primary file per cognitive type
COGNITIVE_FILE_NAMES: dict[str, str] = {
    "skill": "SKILL.md",
    "agent": "AGENT.md",
    "prompt": "PROMPT.md",
    "workflow": "WORKFLOW.yaml",
    "tool": "TOOL.md",
}

# Skills are mirrored as whole folders (SKILL.md + assets/), the rest as single files
COGNITIVE_SYNC_MODES: dict[str, str] = {
    "skill": "folder",
    "agent": "file",
    "prompt": "file",
    "workflow": "file",
    "tool": "file",
}

CATEGORIES: tuple[str, ...] = (
    "frontend",
    "backend",
    "database",
    "devops",
    "security",
    "testing",
    "analytics",
    "automation",
    "general",
)

DEFAULT_CATEGORY = "general"
DEFAULT_VERSION = "1.0.0"

SUPPORTED_PROVIDERS: tuple[str, ...] = ("claude", "openai", "gemini", "cursor", "windsurf", "copilot")

# Provider root directory (relative to project root) per provider
_PROVIDER_ROOTS: dict[str, str] = {
    "claude": ".claude",
    "openai": ".openai",
    "gemini": ".gemini",
    "cursor": ".cursor",
    "windsurf": ".windsurf",
    "copilot": ".github",
}

# Per-type target directory for every supported provider, e.g. ".claude/skills"
PROVIDER_PATHS: dict[str, dict[str, str]] = {
    provider: {cognitive_type: f"{root}/{cognitive_type}s" for cognitive_type in COGNITIVE_TYPES}
    for provider, root in _PROVIDER_ROOTS.items()
}

CONFIG_FILE_NAME = "synapsync.config.yaml"
MANIFEST_FILE_NAME = "manifest.json"
MANIFEST_VERSION = "1.0.0"

_DEFAULT_STORE_DIR = ".synapsync"


def get_default_store_dir() -> str:
    """Get the store directory name, honouring the SYNAPSYNC_DIR override."""
    return os.environ.get("SYNAPSYNC_DIR") or _DEFAULT_STORE_DIR


DEFAULT_CONFIG: dict[str, Any] = {
    "name": "synapsync-project",
    "version": "1.0.0",
    "cli": {
        "theme": "auto",
        "color": True,
        "verbose": False,
    },
    "storage": {
        "dir": _DEFAULT_STORE_DIR,
    },
    "sync": {
        "method": "symlink",
        "providers": {
            "claude": {"enabled": True},
            "openai": {"enabled": False},
            "cursor": {"enabled": False},
        },
    },
}


def get_default_config(name: str | None = None, description: str | None = None) -> dict[str, Any]:
    """
    Get a fresh copy of the default configuration.

    Args:
        name: Optional project name.
        description: Optional project description.

    Returns:
        Configuration dict safe to modify.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["storage"]["dir"] = get_default_store_dir()
    if name:
        config["name"] = name
    if description:
        config["description"] = description
    return config


def generate_default_config(name: str | None = None) -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# SynapSync Project Configuration
#
# storage.dir is the canonical store holding all cognitives:
#   <dir>/<type>s/<category>/<name>/<FILE>
#
# sync.method:
#   - symlink: Mirror cognitives into provider directories as symlinks
#   - copy: Mirror cognitives as plain file copies
#
# sync.providers.<name>.paths optionally overrides the per-type target
# directories (skill, agent, prompt, workflow, tool) for that provider.

"""
    return header + yaml.dump(get_default_config(name), default_flow_style=False, sort_keys=False, allow_unicode=True)
