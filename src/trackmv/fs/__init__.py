"""Filesystem helpers for moving tracked paths.

This module provides path conversion between the command line, the working
tree and the tracked-path index, plus the rename and fingerprint primitives.
"""

from trackmv.fs.fs_ops import compute_fingerprint, rename_path
from trackmv.fs.paths import (
    PathKind,
    is_within,
    join_tracked,
    normalize_path,
    path_kind,
    to_fs_path,
    to_tracked_path,
    tracked_basename,
)

__all__ = [
    "PathKind",
    "compute_fingerprint",
    "is_within",
    "join_tracked",
    "normalize_path",
    "path_kind",
    "rename_path",
    "to_fs_path",
    "to_tracked_path",
    "tracked_basename",
]
