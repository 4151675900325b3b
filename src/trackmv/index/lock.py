"""Exclusive hold on the index store.

A lock file next to the store marks the hold. It is created exclusively, so
a second process fails immediately instead of racing. Committing writes the
new index into the lock file and atomically renames it over the store;
leaving the hold without committing deletes the lock file.
"""

from __future__ import annotations

import os
from pathlib import Path
from types import TracebackType

import structlog

from trackmv.core.constants import LOCK_SUFFIX
from trackmv.core.errors import IndexLocked, PersistError
from trackmv.utils.debug import debug


class IndexLock:
    """Scoped exclusive hold on an index store.

    Usage:
        with IndexLock(index_path) as lock:
            ...
            lock.commit(index.dump())
    """

    def __init__(self, index_path: Path) -> None:
        """Initialize the hold without acquiring it.

        Args:
            index_path: Location of the index store
        """
        self.index_path = index_path
        self.lock_path = index_path.with_name(index_path.name + LOCK_SUFFIX)
        self._fd: int | None = None
        self._held = False
        self._committed = False

    @property
    def held(self) -> bool:
        return self._held

    @property
    def committed(self) -> bool:
        return self._committed

    def acquire(self) -> None:
        """Create the lock file exclusively.

        Raises:
            IndexLocked: If another process holds the lock
            PersistError: If the lock file cannot be created
        """
        if self._held:
            return

        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            self._fd = os.open(
                self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644
            )
        except FileExistsError as exc:
            raise IndexLocked(self.lock_path) from exc
        except OSError as exc:
            raise PersistError(self.lock_path, f"cannot create lock: {exc}") from exc

        self._held = True
        debug(f"Acquired index lock {self.lock_path}")

    def commit(self, data: bytes) -> None:
        """Write ``data`` and atomically replace the index store with it.

        Raises:
            RuntimeError: If the hold is not active
            PersistError: If writing or replacing fails
        """
        if not self._held or self._fd is None:
            raise RuntimeError("commit() called without holding the index lock")

        fd, self._fd = self._fd, None
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(self.lock_path, self.index_path)
        except OSError as exc:
            raise PersistError(
                self.index_path,
                str(exc),
                lock_released=not self.lock_path.exists(),
            ) from exc

        self._held = False
        self._committed = True
        debug(f"Committed index {self.index_path}")

    def discard(self) -> None:
        """Release the hold without touching the index store.

        Raises:
            PersistError: If the lock file cannot be removed
        """
        if not self._held:
            return

        if self._fd is not None:
            os.close(self._fd)
            self._fd = None
        try:
            self.lock_path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistError(
                self.lock_path, f"cannot remove lock: {exc}", lock_released=False
            ) from exc
        finally:
            self._held = False
        debug(f"Discarded index lock {self.lock_path}")

    def __enter__(self) -> IndexLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.discard()
            return

        # keep the error that is already propagating
        try:
            self.discard()
        except PersistError as cleanup_error:
            structlog.get_logger().warning(
                "index.lock_release_failed",
                lock=str(self.lock_path),
                error=str(cleanup_error),
            )
