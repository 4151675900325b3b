"""Path utilities for tracked working trees.

This module converts command-line paths into root-relative tracked paths,
maps tracked paths back onto the filesystem and classifies what currently
sits at a location.
"""

import os
import posixpath
import stat
from pathlib import Path
from typing import Literal

from trackmv.core.constants import METADATA_DIR
from trackmv.core.errors import UsageError

PathKind = Literal["missing", "file", "directory", "symlink", "other"]


def normalize_path(path: Path | str, root: Path | None = None) -> Path:
    """Normalize a path for consistent handling.

    Only the parent is resolved, so a symlink named by ``path`` stays a
    symlink instead of being replaced by its target. Names keep their exact
    code points; no Unicode normalization is applied.

    Args:
        path: Path to normalize
        root: Optional base directory for relative paths (defaults to cwd)

    Returns:
        Normalized absolute path
    """
    if not isinstance(path, Path):
        path = Path(path)

    if not path.is_absolute():
        path = (root or Path.cwd()) / path

    path = Path(os.path.normpath(path))
    if path.name:
        path = path.parent.resolve() / path.name
    else:
        path = path.resolve()

    return path


def to_tracked_path(
    path: Path | str,
    root: Path,
    cwd: Path | None = None,
    *,
    allow_root: bool = False,
) -> str:
    """Convert a command-line path into a root-relative tracked path.

    Args:
        path: Path as given by the user
        root: Working tree root
        cwd: Directory relative paths are resolved against
        allow_root: Return "" for the tree root instead of failing

    Returns:
        POSIX-style path relative to ``root``

    Raises:
        UsageError: If the path is outside the tree, is the tree root
            (unless allowed), points into the metadata directory
            or cannot be encoded as UTF-8
    """
    absolute = normalize_path(path, cwd)
    resolved_root = normalize_path(root)

    try:
        relative = absolute.relative_to(resolved_root)
    except ValueError as exc:
        raise UsageError(f"'{path}' is outside the working tree at {root}") from exc

    tracked = relative.as_posix()
    try:
        tracked.encode("utf-8")
    except UnicodeEncodeError as exc:
        # undecodable bytes surface as surrogate escapes
        raise UsageError(f"{tracked!r} is not a valid UTF-8 path") from exc
    if tracked in ("", "."):
        if allow_root:
            return ""
        raise UsageError(f"'{path}' names the working tree root")
    if is_within(tracked, METADATA_DIR):
        raise UsageError(f"'{path}' is inside the {METADATA_DIR} directory")
    return tracked


def to_fs_path(root: Path, tracked: str) -> Path:
    """Return the filesystem location of a tracked path."""
    return root / tracked if tracked else root


def tracked_basename(tracked: str) -> str:
    """Return the final component of a tracked path."""
    return posixpath.basename(tracked.rstrip("/"))


def join_tracked(directory: str, name: str) -> str:
    """Join a tracked directory and a relative name.

    The empty directory stands for the working tree root.
    """
    directory = directory.rstrip("/")
    if not directory:
        return name
    return f"{directory}/{name}"


def is_within(path: str, prefix: str) -> bool:
    """Return True when ``path`` equals ``prefix`` or lies underneath it."""
    return path == prefix or path.startswith(prefix + "/")


def path_kind(path: Path) -> PathKind:
    """Classify what currently sits at ``path`` without following symlinks."""
    try:
        st = os.lstat(path)
    except (FileNotFoundError, NotADirectoryError):
        return "missing"

    if stat.S_ISDIR(st.st_mode):
        return "directory"
    if stat.S_ISREG(st.st_mode):
        return "file"
    if stat.S_ISLNK(st.st_mode):
        return "symlink"
    return "other"
