"""Validation of candidate (source, destination) pairs.

Validation is a read-only pass over the index and filesystem metadata. It
resolves destinations, applies the per-pair checks in a fixed priority
order and expands directory sources into one pair per tracked child. The
resulting Plan is what the executor carries out.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog

from trackmv.core.errors import (
    InternalInvariant,
    RejectReason,
    UsageError,
    ValidationError,
)
from trackmv.core.models import MoveMode, MovePair, Plan, Rejection
from trackmv.core.report import MoveReporter
from trackmv.fs.paths import (
    is_within,
    join_tracked,
    path_kind,
    to_fs_path,
    tracked_basename,
)
from trackmv.index.store import TrackedIndex
from trackmv.schemas import IndexEntry

USAGE = "trackmv mv [-n] [-f] [-k] [-v] <source>... <destination>"


def resolve_destinations(
    root: Path, sources: Sequence[str], destination: str
) -> list[MovePair]:
    """Pair every source with its destination.

    When ``destination`` is an existing directory each source moves under it
    keeping its base name; otherwise exactly one source is allowed.

    Args:
        root: Working tree root
        sources: Tracked source paths
        destination: Tracked destination path ("" for the tree root)

    Returns:
        Candidate pairs in argument order

    Raises:
        UsageError: If there are no sources, or several sources and the
            destination is not a directory
    """
    if not sources:
        raise UsageError(f"usage: {USAGE}")

    if path_kind(to_fs_path(root, destination)) == "directory":
        return [
            MovePair(source, join_tracked(destination, tracked_basename(source)))
            for source in sources
        ]

    if len(sources) != 1:
        raise UsageError(
            f"destination '{destination}' is not a directory; usage: {USAGE}"
        )
    return [MovePair(sources[0], destination)]


def build_plan(
    candidates: Sequence[MovePair],
    index: TrackedIndex,
    root: Path,
    *,
    force: bool = False,
    ignore_errors: bool = False,
    show_checks: bool = False,
    reporter: MoveReporter | None = None,
    logger: Any = None,
) -> Plan:
    """Validate ``candidates`` and expand directory sources.

    Pairs are checked strictly in order. Children of an accepted directory
    are appended to the working list and checked in the same pass, so the
    duplicate-destination check sees every earlier pair.

    Args:
        candidates: Pairs from resolve_destinations()
        index: Current tracked-path index
        root: Working tree root
        force: Allow replacing an existing plain-file destination
        ignore_errors: Drop rejected pairs instead of aborting
        show_checks: Print a "Checking rename" line per pair
        reporter: Output sink for checks and warnings
        logger: Optional structlog logger

    Returns:
        The validated Plan

    Raises:
        ValidationError: On the first rejection unless ignoring errors
        InternalInvariant: If a directory source is itself an index entry
    """
    reporter = reporter or MoveReporter()
    log = logger or structlog.get_logger()

    plan = Plan()
    pairs = list(candidates)
    targets: set[str] = set()
    # sources of accepted pairs that rename on disk
    claimed: list[str] = []

    i = 0
    while i < len(pairs):
        pair = pairs[i]
        if show_checks:
            reporter.checking(pair)

        children: list[IndexEntry] = []
        overwrite = False
        src_kind = path_kind(to_fs_path(root, pair.source))

        if src_kind == "missing" or (
            pair.mode is not MoveMode.PRE_MOVED
            and any(pair.source.startswith(moved + "/") for moved in claimed)
        ):
            # a source inside an already accepted directory is gone by the
            # time its own rename would run
            reason: RejectReason | None = RejectReason.BAD_SOURCE
        elif src_kind == "directory" and pair.mode is not MoveMode.PRE_MOVED:
            reason, children = _check_directory(pair, index, root)
        else:
            reason, overwrite = _check_file(pair, index, root, force)

        if reason is None and pair.destination in targets:
            reason = RejectReason.DUPLICATE_DESTINATION

        if reason is not None:
            if not ignore_errors:
                raise ValidationError(reason, pair.source, pair.destination)
            reporter.warning(
                f"not moving: {reason.message}, source={pair.source}, "
                f"destination={pair.destination}"
            )
            log.info(
                "mv.plan.rejected",
                source=pair.source,
                destination=pair.destination,
                reason=reason.value,
            )
            plan.rejected.append(Rejection(pair, reason))
            del pairs[i]
            continue

        targets.add(pair.destination)
        if pair.mode is not MoveMode.PRE_MOVED:
            # children already moved by an earlier pair are not expanded again
            children = [
                child
                for child in children
                if not any(is_within(child.path, moved) for moved in claimed)
            ]
            claimed.append(pair.source)

        if overwrite:
            reporter.warning(
                f"destination exists; will overwrite! ({pair.destination})"
            )
            plan.overwritten.add(pair.destination)

        if src_kind == "directory" and pair.mode is not MoveMode.PRE_MOVED:
            pairs[i] = MovePair(
                pair.source, pair.destination, MoveMode.DIRECTORY_RENAME
            )
            prefix_len = len(pair.source) + 1
            pairs.extend(
                MovePair(
                    child.path,
                    join_tracked(pair.destination, child.path[prefix_len:]),
                    MoveMode.PRE_MOVED,
                )
                for child in children
            )

        i += 1

    plan.pairs = pairs
    log.debug(
        "mv.plan",
        pairs=len(plan.pairs),
        rejected=len(plan.rejected),
        overwritten=sorted(plan.overwritten),
    )
    return plan


def _check_directory(
    pair: MovePair, index: TrackedIndex, root: Path
) -> tuple[RejectReason | None, list[IndexEntry]]:
    """Checks for a source that is a directory on disk."""
    if path_kind(to_fs_path(root, pair.destination)) != "missing":
        return RejectReason.CANNOT_MOVE_DIRECTORY_OVER_FILE, []

    if pair.source in index:
        raise InternalInvariant(f"{pair.source}/ is in index as a file")

    children = index.range_with_prefix(pair.source)
    if not children:
        return RejectReason.SOURCE_DIRECTORY_EMPTY, []

    if is_within(pair.destination, pair.source):
        return RejectReason.MOVE_INTO_SELF, []

    return None, children


def _check_file(
    pair: MovePair, index: TrackedIndex, root: Path, force: bool
) -> tuple[RejectReason | None, bool]:
    """Checks for a source that is a file, symlink or other non-directory."""
    overwrite = False
    dst_kind = path_kind(to_fs_path(root, pair.destination))
    if dst_kind != "missing":
        if not force:
            return RejectReason.DESTINATION_EXISTS, False
        # only plain files can overwrite each other
        if dst_kind != "file":
            return RejectReason.CANNOT_OVERWRITE, False
        overwrite = True

    if is_within(pair.destination, pair.source):
        return RejectReason.MOVE_INTO_SELF, False

    if pair.source not in index:
        return RejectReason.NOT_TRACKED, False

    return None, overwrite
