"""Filesystem operations used while moving tracked paths.

Renames are plain ``os.rename`` calls: moves across storage devices fail
with ``EXDEV`` and are surfaced to the caller rather than emulated.
"""

import hashlib
import os
from pathlib import Path

from trackmv.core.constants import FINGERPRINT_CHUNK_SIZE
from trackmv.utils.debug import debug


def rename_path(src: Path, dst: Path) -> None:
    """Rename ``src`` to ``dst``.

    Args:
        src: Existing file or directory
        dst: New location; its parent directory must already exist

    Raises:
        OSError: If the operating system refuses the rename
    """
    os.rename(src, dst)
    debug(f"Direct rename: {src} -> {dst}")


def compute_fingerprint(path: Path) -> str:
    """Compute a SHA-256 fingerprint for a tracked file.

    Symlinks are fingerprinted by their target text, not by what they point
    at.

    Args:
        path: File or symlink to fingerprint

    Returns:
        Hexadecimal string of SHA-256 hash
    """
    sha256_hash = hashlib.sha256()

    if path.is_symlink():
        sha256_hash.update(os.readlink(path).encode())
        return sha256_hash.hexdigest()

    with open(path, "rb") as f:
        # Read file in chunks to handle large files
        for byte_block in iter(lambda: f.read(FINGERPRINT_CHUNK_SIZE), b""):
            sha256_hash.update(byte_block)

    return sha256_hash.hexdigest()
