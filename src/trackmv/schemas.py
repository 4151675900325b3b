"""Pydantic schemas for the persisted index and move reports.

These schemas define the data structures that leave the process:
- IndexEntry: One tracked path and its metadata
- IndexDocument: The on-disk index store
- PairSummary / MoveOutcome: The result of a move, printable as JSON

All schemas use Pydantic v2 for validation and serialization.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from trackmv.core.constants import INDEX_SCHEMA_VERSION


class IndexEntry(BaseModel):
    """A single tracked path.

    The move core only checks entries for existence and carries their
    metadata along; it never interprets the fingerprint.

    Attributes:
        path: Root-relative POSIX path, unique within the index
        fingerprint: Opaque content fingerprint recorded when tracked
        mode: ``st_mode`` bits of the path
        size: Size in bytes
        mtime_ns: Modification time in nanoseconds
    """

    path: str = Field(min_length=1)
    fingerprint: str | None = None
    mode: int = 0
    size: int = Field(default=0, ge=0)
    mtime_ns: int = 0

    model_config = {"frozen": True}

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject absolute, trailing-slash and dot-component paths."""
        if v.startswith("/") or v.endswith("/"):
            raise ValueError(f"tracked path must be relative without trailing '/': {v}")
        if any(part in ("", ".", "..") for part in v.split("/")):
            raise ValueError(f"tracked path has an empty or dot component: {v}")
        return v

    @classmethod
    def from_stat(
        cls, path: str, st: os.stat_result, fingerprint: str | None = None
    ) -> "IndexEntry":
        """Build an entry from filesystem metadata."""
        return cls(
            path=path,
            fingerprint=fingerprint,
            mode=st.st_mode,
            size=st.st_size,
            mtime_ns=st.st_mtime_ns,
        )


class IndexDocument(BaseModel):
    """The persisted tracked-path index.

    Attributes:
        schema_version: Version of this document layout
        entries: Entries in strictly increasing path order
    """

    schema_version: Literal["1.0"] = INDEX_SCHEMA_VERSION
    entries: list[IndexEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_order(self) -> "IndexDocument":
        for previous, current in zip(self.entries, self.entries[1:]):
            if previous.path >= current.path:
                raise ValueError(
                    f"index entries out of order or duplicated at {current.path!r}"
                )
        return self


class PairSummary(BaseModel):
    """A (source, destination) pair as reported to the user."""

    source: str
    destination: str
    mode: Literal["direct", "directory_rename", "pre_moved"]
    reason: str | None = None


class MoveOutcome(BaseModel):
    """Results from running a move.

    Attributes:
        dry_run: True when nothing was mutated
        renamed: Filesystem renames actually performed
        failed: Pairs skipped because their rename failed (ignore-errors)
        rejected: Pairs dropped by validation (ignore-errors)
        changed: Overwritten destinations whose entries were refreshed
        added: Destinations that received new entries
        deleted: Sources whose entries were removed
        index_written: True when the index store was rewritten
    """

    dry_run: bool = False
    renamed: list[PairSummary] = Field(default_factory=list)
    failed: list[PairSummary] = Field(default_factory=list)
    rejected: list[PairSummary] = Field(default_factory=list)
    changed: list[str] = Field(default_factory=list)
    added: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    index_written: bool = False
