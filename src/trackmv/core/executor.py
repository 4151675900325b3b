"""Execution of a validated move plan.

The executor renames paths on disk, classifies every index-bearing pair as
changed, added or deleted, and finally applies those classifications to the
in-memory index. Dry runs compute the same classification without touching
the filesystem or the index.

Failures are not rolled back. With ignore-errors a failed rename skips its
pair (and the children of a failed directory rename) while earlier pairs
stay applied. Without it the remaining renames are abandoned, but the pairs
already renamed are still applied to the index before the error is raised,
so the index always matches what actually moved on disk.
"""

import os
from pathlib import Path
from typing import Any

import structlog

from trackmv.core.errors import ExecutionError, InternalInvariant
from trackmv.core.models import MoveMode, MovePair, Plan
from trackmv.core.report import MoveReporter
from trackmv.fs.fs_ops import rename_path
from trackmv.fs.paths import is_within, to_fs_path
from trackmv.index.store import TrackedIndex
from trackmv.schemas import IndexEntry, MoveOutcome


def execute_plan(
    plan: Plan,
    index: TrackedIndex,
    root: Path,
    *,
    dry_run: bool = False,
    ignore_errors: bool = False,
    verbose: bool = False,
    reporter: MoveReporter | None = None,
    logger: Any = None,
) -> MoveOutcome:
    """Carry out ``plan`` against the filesystem and ``index``.

    Args:
        plan: Plan produced by build_plan()
        index: Index to update in memory (never persisted here)
        root: Working tree root
        dry_run: Classify only; perform no renames and no index updates
        ignore_errors: Skip pairs whose rename fails instead of aborting
        verbose: Print a line for every rename performed
        reporter: Output sink
        logger: Optional structlog logger

    Returns:
        MoveOutcome describing renames and index classifications

    Raises:
        ExecutionError: If a rename fails and errors are not ignored. The
            pairs renamed before the failure are already applied to
            ``index`` when this is raised
        InternalInvariant: If the index contradicts the plan
    """
    reporter = reporter or MoveReporter()
    log = logger or structlog.get_logger()

    outcome = MoveOutcome(
        dry_run=dry_run,
        rejected=[r.pair.summary(r.reason.value) for r in plan.rejected],
    )
    # destination -> source whose entry it inherits
    changed: dict[str, str] = {}
    added: dict[str, str | None] = {}
    deleted: list[str] = []
    failed_dirs: list[str] = []
    # pair whose rename failed fatally; later renames are skipped
    aborted: tuple[MovePair, OSError] | None = None

    for pair in plan.pairs:
        if pair.mode is MoveMode.PRE_MOVED and any(
            is_within(pair.source, failed) for failed in failed_dirs
        ):
            outcome.failed.append(pair.summary("parent directory was not moved"))
            continue
        if aborted is not None and pair.renames_on_disk:
            # after a fatal failure only children of renamed directories remain
            if pair.mode is MoveMode.DIRECTORY_RENAME:
                failed_dirs.append(pair.source)
            continue

        if dry_run:
            reporter.renaming(pair)
        elif pair.renames_on_disk:
            try:
                rename_path(
                    to_fs_path(root, pair.source), to_fs_path(root, pair.destination)
                )
            except OSError as exc:
                if pair.mode is MoveMode.DIRECTORY_RENAME:
                    failed_dirs.append(pair.source)
                if not ignore_errors:
                    aborted = (pair, exc)
                    continue
                reporter.warning(f"renaming {pair.source} failed: {exc}")
                log.warning(
                    "mv.rename_failed",
                    source=pair.source,
                    destination=pair.destination,
                    error=str(exc),
                )
                outcome.failed.append(pair.summary(str(exc)))
                continue

            if verbose:
                reporter.renaming(pair)
            log.info(
                "mv.rename",
                source=pair.source,
                destination=pair.destination,
                mode=pair.mode.value,
            )
            outcome.renamed.append(pair.summary())

        if not pair.updates_index:
            continue

        if pair.source in index:
            deleted.append(pair.source)
            if pair.destination in plan.overwritten:
                changed[pair.destination] = pair.source
            else:
                added[pair.destination] = pair.source
        else:
            added[pair.destination] = None

    outcome.changed = sorted(changed)
    outcome.added = sorted(added)
    outcome.deleted = sorted(set(deleted))

    if not dry_run:
        _apply_index_updates(index, root, changed, added, deleted)

    if aborted is not None:
        failed_pair, cause = aborted
        raise ExecutionError(
            failed_pair.source, failed_pair.destination, cause.strerror or str(cause)
        ) from cause
    return outcome


def _apply_index_updates(
    index: TrackedIndex,
    root: Path,
    changed: dict[str, str],
    added: dict[str, str | None],
    deleted: list[str],
) -> None:
    """Refresh changed entries, insert added ones, then remove sources."""
    for destination in sorted(changed):
        entry = _moved_entry(index, root, changed[destination], destination)
        if destination in index:
            index.refresh(destination, entry)
        else:
            # an untracked file replaced under --force
            index.insert(entry)

    for destination in sorted(added):
        index.insert(_moved_entry(index, root, added[destination], destination))

    for source in sorted(set(deleted).difference(changed, added)):
        index.remove(source)


def _moved_entry(
    index: TrackedIndex, root: Path, source: str | None, destination: str
) -> IndexEntry:
    """Build the entry for ``destination`` from the source entry and disk state.

    The fingerprint is carried over from the source; stat data comes from
    the destination as it now exists on disk.
    """
    prior = index.lookup(source) if source is not None else None
    if source is not None and prior is None:
        raise InternalInvariant(f"cache entry for {source} disappeared during move")

    try:
        st = os.lstat(to_fs_path(root, destination))
    except OSError as exc:
        raise ExecutionError(
            source or destination, destination, f"cannot stat destination: {exc}"
        ) from exc

    return IndexEntry.from_stat(
        destination, st, prior.fingerprint if prior is not None else None
    )
