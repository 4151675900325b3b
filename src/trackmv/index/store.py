"""In-memory tracked-path index backed by a JSON document.

Entries are kept sorted by path, which is also the persisted order, so a
directory's tracked children form one contiguous run that two binary
searches can bracket.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator
from operator import attrgetter
from pathlib import Path

from pydantic import ValidationError as SchemaError

from trackmv.core.errors import InternalInvariant, PersistError
from trackmv.schemas import IndexDocument, IndexEntry
from trackmv.utils.debug import debug

_by_path = attrgetter("path")


class TrackedIndex:
    """Ordered, unique-by-path collection of tracked entries."""

    def __init__(self, entries: Iterable[IndexEntry] = ()) -> None:
        self._entries: list[IndexEntry] = []
        for entry in sorted(entries, key=_by_path):
            if self._entries and self._entries[-1].path == entry.path:
                raise ValueError(f"duplicate index entry: {entry.path}")
            self._entries.append(entry)
        self._dirty = False

    @classmethod
    def load(cls, path: Path) -> TrackedIndex:
        """Load the index stored at ``path``.

        A missing store is an empty index.

        Raises:
            PersistError: If the store cannot be read or parsed
        """
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            debug(f"No index at {path}; starting empty")
            return cls()
        except OSError as exc:
            raise PersistError(path, f"cannot read index: {exc}") from exc

        try:
            document = IndexDocument.model_validate_json(raw)
        except SchemaError as exc:
            raise PersistError(path, f"index file corrupt: {exc}") from exc

        debug(f"Loaded {len(document.entries)} entries from {path}")
        return cls(document.entries)

    def dump(self) -> bytes:
        """Serialize the index to its on-disk representation."""
        document = IndexDocument(entries=list(self._entries))
        return document.model_dump_json(indent=2).encode("utf-8") + b"\n"

    @property
    def is_dirty(self) -> bool:
        """True once any mutation happened since load."""
        return self._dirty

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.position_of(path) >= 0

    def paths(self) -> list[str]:
        return [entry.path for entry in self._entries]

    def position_of(self, path: str) -> int:
        """Return the position of ``path``.

        Returns:
            The index of the entry when present, otherwise
            ``-(insertion_point) - 1``
        """
        pos = bisect_left(self._entries, path, key=_by_path)
        if pos < len(self._entries) and self._entries[pos].path == path:
            return pos
        return -pos - 1

    def lookup(self, path: str) -> IndexEntry | None:
        pos = self.position_of(path)
        return self._entries[pos] if pos >= 0 else None

    def range_with_prefix(self, directory: str) -> list[IndexEntry]:
        """Return the entries under ``directory`` in index order.

        The run starts at ``directory + "/"`` and ends before
        ``directory + "0"``, since "0" is the character after "/".
        """
        directory = directory.rstrip("/")
        if not directory:
            return list(self._entries)
        first = bisect_left(self._entries, directory + "/", key=_by_path)
        last = bisect_left(self._entries, directory + "0", lo=first, key=_by_path)
        return self._entries[first:last]

    def insert(self, entry: IndexEntry) -> None:
        """Add ``entry``, replacing any entry with the same path."""
        pos = self.position_of(entry.path)
        if pos >= 0:
            self._entries[pos] = entry
        else:
            self._entries.insert(-pos - 1, entry)
        self._dirty = True
        debug(f"Index insert: {entry.path}")

    def remove(self, path: str) -> None:
        """Remove the entry for ``path``.

        Raises:
            InternalInvariant: If ``path`` is not tracked
        """
        pos = self.position_of(path)
        if pos < 0:
            raise InternalInvariant(f"cannot remove {path}: not in index")
        del self._entries[pos]
        self._dirty = True
        debug(f"Index remove: {path}")

    def refresh(self, path: str, entry: IndexEntry) -> None:
        """Replace the metadata of an already tracked ``path`` in place.

        Raises:
            InternalInvariant: If ``path`` is not tracked or ``entry`` is
                for another path
        """
        if entry.path != path:
            raise InternalInvariant(f"refresh of {path} given entry for {entry.path}")
        pos = self.position_of(path)
        if pos < 0:
            raise InternalInvariant(f"cache entry for {path} unknown")
        if self._entries[pos] != entry:
            self._entries[pos] = entry
            self._dirty = True
            debug(f"Index refresh: {path}")
