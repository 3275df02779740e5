# SynapSync Configuration Schema
# Pydantic models for project configuration and core enums

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from synapsync.config.defaults import (
    COGNITIVE_FILE_NAMES,
    COGNITIVE_SYNC_MODES,
    PROVIDER_PATHS,
    SUPPORTED_PROVIDERS,
    get_default_store_dir,
)


class SyncMode(str, Enum):
    """How a cognitive type is mirrored into provider directories."""

    FOLDER = "folder"
    FILE = "file"


class CognitiveType(str, Enum):
    """Type of a cognitive, in detection priority order."""

    SKILL = "skill"
    AGENT = "agent"
    PROMPT = "prompt"
    WORKFLOW = "workflow"
    TOOL = "tool"

    @property
    def plural(self) -> str:
        """Directory name used in the canonical store (e.g. "skills")."""
        return f"{self.value}s"

    @property
    def file_name(self) -> str:
        """Canonical primary file name (e.g. "SKILL.md")."""
        return COGNITIVE_FILE_NAMES[self.value]

    @property
    def sync_mode(self) -> SyncMode:
        """Whether the type is mirrored as a folder or a single file."""
        return SyncMode(COGNITIVE_SYNC_MODES[self.value])


class SyncMethod(str, Enum):
    """Mirror creation strategy."""

    SYMLINK = "symlink"
    COPY = "copy"


class Theme(str, Enum):
    """CLI color theme."""

    AUTO = "auto"
    LIGHT = "light"
    DARK = "dark"


class CLIConfig(BaseModel):
    """Command-line output settings."""

    theme: Theme = Field(default=Theme.AUTO, description="Color theme")
    color: bool = Field(default=True, description="Enable colored output")
    verbose: bool = Field(default=False, description="Enable verbose output")


class StorageConfig(BaseModel):
    """Canonical store location."""

    dir: str = Field(default_factory=get_default_store_dir, description="Store directory, relative to project root")


class ProviderSyncConfig(BaseModel):
    """Sync settings for a single provider."""

    enabled: bool = Field(default=False, description="Whether cognitives are mirrored to this provider")
    paths: Optional[dict[CognitiveType, str]] = Field(
        default=None, description="Per-type target directories overriding the defaults"
    )


class SyncConfig(BaseModel):
    """Provider sync settings."""

    method: SyncMethod = Field(default=SyncMethod.SYMLINK, description="Preferred mirror method")
    providers: dict[str, ProviderSyncConfig] = Field(default_factory=dict, description="Provider settings")

    @field_validator("providers")
    @classmethod
    def check_known_providers(cls, v: dict[str, ProviderSyncConfig]) -> dict[str, ProviderSyncConfig]:
        """Reject provider names that have no directory layout."""
        unknown = [name for name in v if name not in SUPPORTED_PROVIDERS]
        if unknown:
            raise ValueError(
                f"Unknown provider: {', '.join(unknown)}. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
            )
        return v


class ProjectConfig(BaseModel):
    """Root configuration model for a SynapSync project."""

    name: str = Field(description="Project name")
    description: Optional[str] = Field(default=None, description="Project description")
    version: str = Field(default="1.0.0", description="Project version")
    cli: CLIConfig = Field(default_factory=CLIConfig, description="CLI settings")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage settings")
    sync: SyncConfig = Field(default_factory=SyncConfig, description="Sync settings")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Require a non-blank project name."""
        if not v.strip():
            raise ValueError("Project name is required")
        return v

    def get_enabled_providers(self) -> list[str]:
        """Return names of enabled providers, in configuration order."""
        return [name for name, provider in self.sync.providers.items() if provider.enabled]

    def get_provider_paths(self, provider: str) -> dict[CognitiveType, str] | None:
        """
        Get the per-type target directories for a provider.

        Configured paths override the built-in table type by type.

        Args:
            provider: Provider name.

        Returns:
            Mapping of type to directory, or None for an unknown provider.
        """
        defaults = PROVIDER_PATHS.get(provider)
        if defaults is None:
            return None

        paths = {CognitiveType(type_name): path for type_name, path in defaults.items()}
        provider_config = self.sync.providers.get(provider)
        if provider_config and provider_config.paths:
            paths.update(provider_config.paths)
        return paths

    def get_provider_path_table(self) -> dict[str, dict[CognitiveType, str]]:
        """Get resolved target directories for every supported provider."""
        return {name: self.get_provider_paths(name) for name in PROVIDER_PATHS}

    def get_store_dir(self, project_root: Path) -> Path:
        """Resolve the canonical store directory against the project root."""
        store = Path(self.storage.dir).expanduser()
        return store if store.is_absolute() else project_root / store
