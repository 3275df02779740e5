# SynapSync Hashing Utilities
# Content fingerprints for change detection

import hashlib
from pathlib import Path

FINGERPRINT_LENGTH = 16


def content_hash(content: str | bytes, *, algorithm: str = "sha256") -> str:
    """
    Calculate hash of content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def fingerprint(content: str | bytes) -> str:
    """
    Calculate the short content fingerprint used for change detection.

    Args:
        content: String or bytes content.

    Returns:
        First 16 hex characters of the SHA-256 digest.
    """
    return content_hash(content)[:FINGERPRINT_LENGTH]


def file_fingerprint(path: Path, *, chunk_size: int = 8192) -> str | None:
    """
    Calculate the fingerprint of a file's raw bytes.

    Args:
        path: Path to file.
        chunk_size: Chunk size for reading large files.

    Returns:
        Fingerprint, or None if file doesn't exist.
    """
    if not path.exists() or not path.is_file():
        return None

    hasher = hashlib.sha256()

    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()[:FINGERPRINT_LENGTH]
