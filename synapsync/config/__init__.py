# SynapSync Configuration Module
# Handles YAML-based project configuration, validation, and defaults

from synapsync.config.defaults import (
    CATEGORIES,
    COGNITIVE_FILE_NAMES,
    COGNITIVE_TYPES,
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG,
    MANIFEST_FILE_NAME,
    PROVIDER_PATHS,
    SUPPORTED_PROVIDERS,
    generate_default_config,
    get_default_store_dir,
)
from synapsync.config.loader import (
    find_config,
    find_project_root,
    load_config,
    load_project,
    save_config,
    validate_config_file,
)
from synapsync.config.schema import (
    CLIConfig,
    CognitiveType,
    ProjectConfig,
    ProviderSyncConfig,
    StorageConfig,
    SyncConfig,
    SyncMethod,
    SyncMode,
    Theme,
)

__all__ = [
    # Schema
    "ProjectConfig",
    "CLIConfig",
    "StorageConfig",
    "SyncConfig",
    "ProviderSyncConfig",
    "CognitiveType",
    "SyncMode",
    "SyncMethod",
    "Theme",
    # Loader
    "find_config",
    "find_project_root",
    "load_config",
    "load_project",
    "save_config",
    "validate_config_file",
    # Defaults
    "CATEGORIES",
    "COGNITIVE_TYPES",
    "COGNITIVE_FILE_NAMES",
    "CONFIG_FILE_NAME",
    "MANIFEST_FILE_NAME",
    "PROVIDER_PATHS",
    "SUPPORTED_PROVIDERS",
    "DEFAULT_CONFIG",
    "generate_default_config",
    "get_default_store_dir",
]
