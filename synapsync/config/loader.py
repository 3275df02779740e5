# SynapSync Configuration Loader
# Locate, load, save and validate synapsync.config.yaml

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from synapsync.config.defaults import CONFIG_FILE_NAME, get_default_config
from synapsync.config.schema import ProjectConfig
from synapsync.errors import ConfigNotFoundError


def find_config(start_dir: Optional[Path] = None) -> Path | None:
    """
    Find the nearest configuration file in start_dir or its parents.

    The SYNAPSYNC_CONFIG environment variable, when set, short-circuits
    the search.

    Args:
        start_dir: Directory to start from (default: current directory).

    Returns:
        Path to the config file, or None if none was found.
    """
    env_path = os.environ.get("SYNAPSYNC_CONFIG")
    if env_path:
        path = Path(env_path).expanduser()
        return path if path.exists() else None

    current = (start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def find_project_root(start_dir: Optional[Path] = None) -> Path | None:
    """
    Find the project root (the directory holding the config file).

    Args:
        start_dir: Directory to start from (default: current directory).

    Returns:
        Project root, or None if no configuration was found.
    """
    config_path = find_config(start_dir)
    return config_path.parent if config_path else None


def load_config(config_path: Path) -> ProjectConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file.

    Returns:
        ProjectConfig: Validated configuration object.

    Raises:
        ConfigNotFoundError: If config file doesn't exist.
        ValidationError: If config file is invalid.
    """
    if not config_path.exists():
        raise ConfigNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    merged = _merge_with_defaults(data, default_name=config_path.parent.name)

    return ProjectConfig.model_validate(merged)


def load_project(start_dir: Optional[Path] = None) -> tuple[Path, ProjectConfig]:
    """
    Locate and load the project containing start_dir.

    Args:
        start_dir: Directory to start from (default: current directory).

    Returns:
        Tuple of (project_root, config).

    Raises:
        ConfigNotFoundError: If no configuration file is found.
    """
    config_path = find_config(start_dir)
    if config_path is None:
        where = start_dir or Path.cwd()
        raise ConfigNotFoundError(
            f"No {CONFIG_FILE_NAME} found in {where} or any parent directory.\n"
            "Create one first to mark the project root."
        )
    return config_path.parent, load_config(config_path)


def save_config(config: ProjectConfig, config_path: Path) -> Path:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration object to save.
        config_path: Path to config file.

    Returns:
        Path: Path where config was saved.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Use mode='json' to serialize Enums as their string values
    data = config.model_dump(exclude_none=True, mode="json")

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    return config_path


def validate_config_file(config_path: Path) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without loading it into the system.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    errors: list[str] = []

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    if not isinstance(data, dict):
        return False, ["Configuration must be a mapping"]

    try:
        ProjectConfig.model_validate(data)
    except ValidationError as e:
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return False, errors

    return True, []


def _merge_with_defaults(data: dict, *, default_name: str) -> dict:
    """Merge loaded data with default values for missing keys."""
    result = get_default_config(default_name)

    for key, value in data.items():
        if key in ("cli", "storage") and isinstance(value, dict):
            result[key] = {**result[key], **value}
        elif key == "sync" and isinstance(value, dict):
            sync = {**result["sync"], **value}
            # An explicit provider table replaces the default one
            if "providers" in value:
                sync["providers"] = value["providers"] or {}
            result["sync"] = sync
        else:
            result[key] = value

    return result
