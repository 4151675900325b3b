"""Custom exceptions for trackmv.

This module defines the typed exceptions raised while resolving, validating,
executing and persisting a move. Every exception carries an ``exit_code`` so
the CLI can translate failures without inspecting message text.
"""

from enum import Enum
from pathlib import Path
from typing import Any


class TrackMvError(Exception):
    """Base exception for all trackmv errors.

    All custom exceptions should inherit from this base class to allow
    for broad exception handling when needed.
    """

    exit_code: int = 1

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        return {"error": "trackmv_error", "message": str(self)}


class RejectReason(str, Enum):
    """Why a candidate (source, destination) pair was rejected.

    Members are declared in check priority order: when several checks fail
    for the same pair, the earliest one is reported.
    """

    BAD_SOURCE = "bad_source"
    CANNOT_MOVE_DIRECTORY_OVER_FILE = "cannot_move_directory_over_file"
    SOURCE_DIRECTORY_EMPTY = "source_directory_empty"
    DESTINATION_EXISTS = "destination_exists"
    CANNOT_OVERWRITE = "cannot_overwrite"
    MOVE_INTO_SELF = "move_into_self"
    NOT_TRACKED = "not_tracked"
    DUPLICATE_DESTINATION = "duplicate_destination"

    @property
    def message(self) -> str:
        """Human-readable wording for this reason."""
        return _REASON_MESSAGES[self]


_REASON_MESSAGES: dict[RejectReason, str] = {
    RejectReason.BAD_SOURCE: "bad source",
    RejectReason.CANNOT_MOVE_DIRECTORY_OVER_FILE: "cannot move directory over file",
    RejectReason.SOURCE_DIRECTORY_EMPTY: "source directory is empty",
    RejectReason.DESTINATION_EXISTS: "destination exists",
    RejectReason.CANNOT_OVERWRITE: "cannot overwrite",
    RejectReason.MOVE_INTO_SELF: "can not move directory into itself",
    RejectReason.NOT_TRACKED: "not under version control",
    RejectReason.DUPLICATE_DESTINATION: "multiple sources for the same target",
}


class UsageError(TrackMvError):
    """Raised for malformed arguments; nothing has been touched yet."""

    exit_code = 2

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": "usage", "message": self.message}


class ValidationError(TrackMvError):
    """Raised when a candidate pair fails one of the validation checks.

    Attributes:
        reason: The first failing check for the pair
        source: Tracked source path
        destination: Tracked destination path
    """

    def __init__(self, reason: RejectReason, source: str, destination: str) -> None:
        """Initialize ValidationError.

        Args:
            reason: Rejection reason
            source: Source path of the rejected pair
            destination: Destination path of the rejected pair
        """
        self.reason = reason
        self.source = source
        self.destination = destination
        super().__init__(
            f"{reason.message}, source={source}, destination={destination}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "validation",
            "reason": self.reason.value,
            "source": self.source,
            "destination": self.destination,
        }

    def __repr__(self) -> str:
        return (
            f"ValidationError(reason={self.reason.value!r}, "
            f"source={self.source!r}, destination={self.destination!r})"
        )


class ExecutionError(TrackMvError):
    """Raised when a filesystem rename fails and errors are not ignored.

    Attributes:
        source: Tracked source path
        destination: Tracked destination path
        reason: Operating system error text
    """

    def __init__(self, source: str, destination: str, reason: str) -> None:
        self.source = source
        self.destination = destination
        self.reason = reason
        super().__init__(
            f"renaming {source} failed: {reason}, source={source}, "
            f"destination={destination}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "execution",
            "source": self.source,
            "destination": self.destination,
            "reason": self.reason,
        }

    def __repr__(self) -> str:
        return (
            f"ExecutionError(source={self.source!r}, "
            f"destination={self.destination!r}, reason={self.reason!r})"
        )


class PersistError(TrackMvError):
    """Raised when the index store cannot be read, written or released.

    On-disk and in-memory state may disagree after this error, so it is
    never downgraded to a warning.

    Attributes:
        path: Index store or lock file involved
        reason: Human-readable reason
        lock_released: False when the lock file may still be on disk
    """

    def __init__(self, path: Path, reason: str, *, lock_released: bool = True) -> None:
        self.path = path
        self.reason = reason
        self.lock_released = lock_released

        message = f"unable to write new index file {path}: {reason}"
        if not lock_released:
            message += " (index lock was not released)"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "persist",
            "path": str(self.path),
            "reason": self.reason,
            "lock_released": self.lock_released,
        }


class IndexLocked(TrackMvError):
    """Raised when another invocation already holds the index lock."""

    def __init__(self, lock_path: Path) -> None:
        self.lock_path = lock_path
        super().__init__(
            f"unable to lock index: {lock_path} already exists; "
            "another trackmv process may be running"
        )

    def to_dict(self) -> dict[str, Any]:
        return {"error": "index_locked", "lock_path": str(self.lock_path)}


class InternalInvariant(TrackMvError):
    """Raised when index state contradicts what validation established.

    This always indicates a logic defect or a tree modified underneath the
    running command; it is never ignored.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"internal error: {detail}")

    def to_dict(self) -> dict[str, Any]:
        return {"error": "internal", "detail": self.detail}
