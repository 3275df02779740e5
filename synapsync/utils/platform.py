# SynapSync Platform Detection Utilities
# Platform checks for symlink capability

import platform

# Platform name mapping: system name -> SynapSync platform name
_PLATFORM_MAP: dict[str, str] = {
    "Darwin": "macos",
    "Linux": "linux",
    "Windows": "windows",
}

# Platforms where creating symlinks needs elevated privilege or developer mode
_PRIVILEGED_SYMLINK_PLATFORMS = frozenset({"windows"})


def get_current_platform() -> str:
    """
    Get the current platform identifier.

    Returns:
        Platform string: "macos", "linux", or "windows".
    """
    system = platform.system()
    return _PLATFORM_MAP.get(system, system.lower())


def symlinks_require_privilege() -> bool:
    """
    Check if the current platform restricts symlink creation by default.

    Returns:
        True if symlink creation must be tested before relying on symlinks.
    """
    return get_current_platform() in _PRIVILEGED_SYMLINK_PLATFORMS
