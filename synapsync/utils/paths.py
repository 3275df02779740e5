# SynapSync Path Utilities
# Filesystem helpers for the canonical store and provider mirrors

import os
import shutil
import tempfile
from pathlib import Path


def expand_path(path: str | Path) -> Path:
    """
    Expand ~ and environment variables in path.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded Path object.
    """
    path_str = str(path)
    # Expand ~ first, then environment variables
    path_str = os.path.expanduser(path_str)
    path_str = os.path.expandvars(path_str)
    return Path(path_str).resolve()


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file and atomic rename.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    ensure_dir(path.parent)

    # Create temp file in same directory for atomic rename
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.replace(temp_path, path)
    except Exception:
        # Cleanup on failure
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def list_directories(directory: Path) -> list[str]:
    """
    List visible subdirectory names of a directory.

    Names starting with "." are skipped. A missing directory yields an
    empty list; any other listing failure propagates.

    Args:
        directory: Directory to list.

    Returns:
        Sorted list of subdirectory names.
    """
    if not directory.exists():
        return []

    return sorted(
        entry.name for entry in directory.iterdir() if entry.is_dir() and not entry.name.startswith(".")
    )


def remove_path(path: Path) -> None:
    """
    Remove a symlink, file, or directory tree.

    Symlinks are unlinked, never followed.

    Args:
        path: Path to remove.

    Raises:
        FileNotFoundError: If nothing exists at path.
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    else:
        raise FileNotFoundError(f"Path does not exist: {path}")


def copy_path(source: Path, dest: Path) -> None:
    """
    Copy a file or directory tree.

    Directories are copied recursively, file by file. Symlinks inside the
    source are followed and copied as plain content.

    Args:
        source: Source path.
        dest: Destination path (must not exist).

    Raises:
        FileNotFoundError: If source doesn't exist.
    """
    if not source.exists():
        raise FileNotFoundError(f"Source does not exist: {source}")

    if source.is_dir():
        shutil.copytree(source, dest)
    else:
        shutil.copy2(source, dest)


def relative_link_target(source: Path, link_dir: Path) -> str:
    """Get the path to store in a symlink placed in link_dir pointing at source."""
    return os.path.relpath(source, link_dir)


def is_within(path: Path, base: Path) -> bool:
    """
    Check if path lies inside base (or is base itself).

    Both paths are resolved before comparison.

    Args:
        path: Path to check.
        base: Base directory.

    Returns:
        True if path is base or a descendant of it.
    """
    try:
        path.resolve().relative_to(base.resolve())
    except ValueError:
        return False
    return True
