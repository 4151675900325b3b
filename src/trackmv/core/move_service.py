"""Run a move under the index lock and commit the result."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from trackmv.core.errors import ExecutionError, UsageError
from trackmv.core.executor import execute_plan
from trackmv.core.planner import build_plan, resolve_destinations
from trackmv.core.report import MoveReporter
from trackmv.fs.paths import to_tracked_path
from trackmv.index.lock import IndexLock
from trackmv.index.paths import resolve_index_path
from trackmv.index.store import TrackedIndex
from trackmv.schemas import MoveOutcome


@dataclass
class MoveRequest:
    """Options for a move.

    Attributes:
        sources: Source paths as given by the user
        destination: Destination path as given by the user
        root: Working tree root
        cwd: Directory the user paths are relative to (defaults to cwd)
        index_path: Explicit index store location
        dry_run: Report what would happen without mutating anything
        force: Allow replacing existing plain-file destinations
        ignore_errors: Skip failing pairs instead of aborting
        verbose: Print each rename as it happens
    """

    sources: Sequence[str]
    destination: str
    root: Path = field(default_factory=Path.cwd)
    cwd: Path | None = None
    index_path: Path | None = None
    dry_run: bool = False
    force: bool = False
    ignore_errors: bool = False
    verbose: bool = False


def move_paths(
    request: MoveRequest,
    *,
    reporter: MoveReporter | None = None,
    logger: Any = None,
) -> MoveOutcome:
    """Move tracked paths on disk and in the index.

    The index lock is taken before the index is read and released on every
    exit path; the index is rewritten only when a real run changed it.

    Raises:
        UsageError: For malformed arguments or when nothing is left to move
        ValidationError: If a pair is rejected and errors are not ignored
        ExecutionError: If a rename fails and errors are not ignored; the
            renames completed before it are committed to the index first
        PersistError: If the index cannot be read or written
        IndexLocked: If another process holds the index lock
    """
    reporter = reporter or MoveReporter()
    root = request.root.resolve()
    index_path = resolve_index_path(root, request.index_path)
    bound_logger = (logger or structlog.get_logger()).bind(
        index=str(index_path),
        dry_run=request.dry_run,
        force=request.force,
        ignore_errors=request.ignore_errors,
    )

    with IndexLock(index_path) as lock:
        index = TrackedIndex.load(index_path)

        cwd = request.cwd or Path.cwd()
        sources = [to_tracked_path(s, root, cwd) for s in request.sources]
        destination = to_tracked_path(request.destination, root, cwd, allow_root=True)

        candidates = resolve_destinations(root, sources, destination)
        plan = build_plan(
            candidates,
            index,
            root,
            force=request.force,
            ignore_errors=request.ignore_errors,
            show_checks=request.dry_run,
            reporter=reporter,
            logger=bound_logger,
        )
        if not plan.pairs:
            raise UsageError("nothing to move: every source was rejected")

        try:
            outcome = execute_plan(
                plan,
                index,
                root,
                dry_run=request.dry_run,
                ignore_errors=request.ignore_errors,
                verbose=request.verbose,
                reporter=reporter,
                logger=bound_logger,
            )
        except ExecutionError as exc:
            # renames that already happened stay on disk; record them
            if index.is_dirty:
                lock.commit(index.dump())
            bound_logger.warning(
                "mv.aborted",
                source=exc.source,
                destination=exc.destination,
                index_written=lock.committed,
            )
            raise

        if request.dry_run:
            reporter.summary(outcome)
        elif index.is_dirty:
            lock.commit(index.dump())
            outcome.index_written = True

    bound_logger.info(
        "mv.summary",
        renamed=len(outcome.renamed),
        failed=len(outcome.failed),
        rejected=len(outcome.rejected),
        index_written=outcome.index_written,
    )
    return outcome

