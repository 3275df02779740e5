# SynapSync Utilities Module
# Helper functions for paths, fingerprints and platform checks

from synapsync.utils.hashing import (
    content_hash,
    file_fingerprint,
    fingerprint,
)
from synapsync.utils.paths import (
    atomic_write,
    copy_path,
    ensure_dir,
    expand_path,
    is_within,
    list_directories,
    remove_path,
)
from synapsync.utils.platform import (
    get_current_platform,
    symlinks_require_privilege,
)

__all__ = [
    # Platform
    "get_current_platform",
    "symlinks_require_privilege",
    # Paths
    "expand_path",
    "ensure_dir",
    "atomic_write",
    "list_directories",
    "remove_path",
    "copy_path",
    "is_within",
    # Hashing
    "content_hash",
    "fingerprint",
    "file_fingerprint",
]
