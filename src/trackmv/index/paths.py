"""Helpers for resolving index store paths."""

from __future__ import annotations

import os
from pathlib import Path

from trackmv.core.constants import INDEX_FILE_NAME, INDEX_PATH_ENV, METADATA_DIR

__all__ = ["resolve_index_path"]


def resolve_index_path(root: Path, index_path: str | Path | None = None) -> Path:
    """Resolve the on-disk path for the tracked-path index.

    Args:
        root: Working tree root.
        index_path: Optional explicit path; relative paths are taken from `root`.

    Returns:
        Absolute path of the index store. When omitted, resolves to
        `TRACKMV_INDEX_PATH` or `<root>/.trackmv/index.json`.
    """

    chosen: str | Path | None = index_path
    env_path = os.getenv(INDEX_PATH_ENV)
    if chosen is None and env_path:
        chosen = env_path
    if chosen is None:
        chosen = Path(METADATA_DIR) / INDEX_FILE_NAME

    resolved = Path(chosen).expanduser()
    if not resolved.is_absolute():
        resolved = root / resolved
    return resolved.absolute()
