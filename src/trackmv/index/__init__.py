"""Tracked-path index: ordered entries, exclusive hold and atomic commit."""

from trackmv.index.lock import IndexLock
from trackmv.index.paths import resolve_index_path
from trackmv.index.store import TrackedIndex

__all__ = ["IndexLock", "TrackedIndex", "resolve_index_path"]
