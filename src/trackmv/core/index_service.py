"""Track paths in the index and list what is tracked."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError as SchemaError

from trackmv.core.constants import METADATA_DIR
from trackmv.core.errors import UsageError
from trackmv.fs.fs_ops import compute_fingerprint
from trackmv.fs.paths import path_kind, to_fs_path, to_tracked_path
from trackmv.index.lock import IndexLock
from trackmv.index.paths import resolve_index_path
from trackmv.index.store import TrackedIndex
from trackmv.schemas import IndexEntry


def add_paths(
    paths: Sequence[str],
    root: Path,
    *,
    cwd: Path | None = None,
    index_path: Path | None = None,
    logger: Any = None,
) -> list[str]:
    """Start tracking files, recursing into directories.

    Returns:
        Tracked paths whose entries were added or updated
    """
    root = root.resolve()
    index_path = resolve_index_path(root, index_path)
    log = logger or structlog.get_logger()
    cwd = cwd or Path.cwd()

    with IndexLock(index_path) as lock:
        index = TrackedIndex.load(index_path)
        touched: list[str] = []

        for raw in paths:
            tracked = to_tracked_path(raw, root, cwd, allow_root=True)
            location = to_fs_path(root, tracked)
            kind = path_kind(location)
            if kind == "missing":
                raise UsageError(f"pathspec '{raw}' did not match any files")
            if kind == "directory":
                files = _walk_files(root, location)
            else:
                files = [tracked]

            for file_path in files:
                fs_path = to_fs_path(root, file_path)
                try:
                    entry = IndexEntry.from_stat(
                        file_path, os.lstat(fs_path), compute_fingerprint(fs_path)
                    )
                except SchemaError as exc:
                    raise UsageError(
                        f"cannot track {file_path!r}: not a valid UTF-8 path"
                    ) from exc
                if index.lookup(file_path) != entry:
                    index.insert(entry)
                    touched.append(file_path)

        if index.is_dirty:
            lock.commit(index.dump())

    log.info("add.summary", index=str(index_path), added=len(touched))
    return touched


def list_paths(
    root: Path, *, prefix: str | None = None, index_path: Path | None = None
) -> list[IndexEntry]:
    """Return tracked entries, optionally only those under ``prefix``."""
    root = root.resolve()
    index = TrackedIndex.load(resolve_index_path(root, index_path))
    if prefix is None:
        return list(index)

    tracked = to_tracked_path(prefix, root, allow_root=True)
    entry = index.lookup(tracked)
    if entry is not None:
        return [entry]
    return index.range_with_prefix(tracked)


def _walk_files(root: Path, directory: Path) -> list[str]:
    """Return tracked-style paths of files below ``directory``.

    Symlinked directories are tracked as links, not walked.
    """
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(directory):
        current = Path(dirpath)
        walked: list[str] = []
        for name in sorted(dirnames):
            if current == root and name == METADATA_DIR:
                continue
            if (current / name).is_symlink():
                filenames.append(name)
            else:
                walked.append(name)
        dirnames[:] = walked
        for name in sorted(filenames):
            files.append((current / name).relative_to(root).as_posix())
    return files
