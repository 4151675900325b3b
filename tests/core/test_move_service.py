"""End-to-end tests for move_paths(): lock, validate, execute, commit."""

import io
import os
import unicodedata
from unittest.mock import patch

import pytest
from rich.console import Console

from tests.conftest import WorkTree
from trackmv.core.errors import (
    ExecutionError,
    IndexLocked,
    PersistError,
    RejectReason,
    UsageError,
    ValidationError,
)
from trackmv.core.move_service import MoveRequest, move_paths
from trackmv.core.report import MoveReporter
from trackmv.fs.fs_ops import rename_path
from trackmv.index.lock import IndexLock


def _move(worktree: WorkTree, *paths: str, **options):
    buffer = io.StringIO()
    console = Console(file=buffer, highlight=False, soft_wrap=True, width=200)
    request = MoveRequest(
        sources=list(paths[:-1]),
        destination=paths[-1],
        root=worktree.root,
        cwd=worktree.root,
        **options,
    )
    outcome = move_paths(request, reporter=MoveReporter(ui=console, err_ui=console))
    return outcome, buffer.getvalue()


def _lock_path(worktree: WorkTree):
    return worktree.index_path.with_name("index.json.lock")


class TestMovePaths:
    def test_single_file_move_is_committed(self, worktree: WorkTree) -> None:
        worktree.add("a", "keep")

        outcome, _ = _move(worktree, "a", "b")

        assert outcome.index_written
        assert worktree.tracked() == ["b", "keep"]
        assert not _lock_path(worktree).exists()

    def test_round_trip_restores_entry(self, worktree: WorkTree) -> None:
        worktree.add("docs/a.md")
        original = worktree.index().lookup("docs/a.md")

        _move(worktree, "docs/a.md", "a.md")
        _move(worktree, "a.md", "docs")

        assert list(worktree.index()) == [original]

    def test_directory_move(self, worktree: WorkTree) -> None:
        worktree.add("a/x", "a/y")

        outcome, _ = _move(worktree, "a", "b")

        assert worktree.tracked() == ["b/x", "b/y"]
        assert len(outcome.renamed) == 1
        assert (worktree.root / "b" / "x").exists()

    def test_several_sources_into_directory(self, worktree: WorkTree) -> None:
        worktree.add("one", "two", "dir/three")
        (worktree.root / "into").mkdir()

        _move(worktree, "one", "two", "dir", "into")

        assert worktree.tracked() == ["into/dir/three", "into/one", "into/two"]

    def test_paths_relative_to_subdirectory(self, worktree: WorkTree) -> None:
        worktree.add("sub/a")
        request = MoveRequest(
            sources=["a"], destination="../b", root=worktree.root, cwd=worktree.root / "sub"
        )

        move_paths(request, reporter=MoveReporter(ui=Console(file=io.StringIO())))

        assert worktree.tracked() == ["b"]

    def test_move_into_tree_root(self, worktree: WorkTree) -> None:
        worktree.add("sub/a")

        _move(worktree, "sub/a", ".")

        assert worktree.tracked() == ["a"]

    def test_decomposed_name_is_moved_by_exact_name(self, worktree: WorkTree) -> None:
        decomposed = unicodedata.normalize("NFD", "caf\u00e9")
        worktree.add(decomposed)

        _move(worktree, decomposed, "moved")

        assert worktree.tracked() == ["moved"]
        assert (worktree.root / "moved").exists()

    def test_nested_source_listed_first_moves_on_its_own(
        self, worktree: WorkTree
    ) -> None:
        worktree.add("d/f", "d/g")
        (worktree.root / "e").mkdir()

        _move(worktree, "d/f", "d", "e")

        assert worktree.tracked() == ["e/d/g", "e/f"]
        assert (worktree.root / "e" / "f").exists()
        assert not (worktree.root / "e" / "d" / "f").exists()


class TestFailurePaths:
    def test_validation_failure_leaves_everything_untouched(
        self, worktree: WorkTree
    ) -> None:
        worktree.add("a")
        worktree.write("loose")
        (worktree.root / "dest").mkdir()
        stored = worktree.index_path.read_bytes()

        with pytest.raises(ValidationError) as excinfo:
            _move(worktree, "a", "loose", "dest")

        assert excinfo.value.reason is RejectReason.NOT_TRACKED
        assert (worktree.root / "a").exists()
        assert worktree.index_path.read_bytes() == stored
        assert not _lock_path(worktree).exists()

    def test_ignore_errors_moves_the_rest(self, worktree: WorkTree) -> None:
        worktree.add("a", "b", "c")
        worktree.write("loose")
        (worktree.root / "dest").mkdir()

        outcome, output = _move(
            worktree, "a", "loose", "b", "c", "dest", ignore_errors=True
        )

        assert worktree.tracked() == ["dest/a", "dest/b", "dest/c"]
        assert (worktree.root / "loose").exists()
        assert [r.source for r in outcome.rejected] == ["loose"]
        assert "not under version control" in output

    def test_nested_source_after_its_directory_is_skipped(
        self, worktree: WorkTree
    ) -> None:
        worktree.add("d/f", "d/g")
        (worktree.root / "e").mkdir()

        outcome, output = _move(worktree, "d", "d/f", "e", ignore_errors=True)

        assert worktree.tracked() == ["e/d/f", "e/d/g"]
        assert [(r.source, r.reason) for r in outcome.rejected] == [
            ("d/f", "bad_source")
        ]
        assert "bad source" in output

    def test_undecodable_destination_is_rejected_before_renaming(
        self, worktree: WorkTree
    ) -> None:
        worktree.add("a")

        with pytest.raises(UsageError, match="UTF-8"):
            _move(worktree, "a", os.fsdecode(b"bad\xff"))

        assert sorted(os.listdir(worktree.root)) == [".trackmv", "a"]
        assert worktree.tracked() == ["a"]
        assert not _lock_path(worktree).exists()

    def test_rename_failure_commits_renames_already_done(
        self, worktree: WorkTree
    ) -> None:
        worktree.add("a", "b")
        (worktree.root / "dest").mkdir()

        def refuse_b(source, destination):
            if source.name == "b":
                raise OSError(13, "Permission denied")
            rename_path(source, destination)

        with patch("trackmv.core.executor.rename_path", side_effect=refuse_b):
            with pytest.raises(ExecutionError, match="Permission denied"):
                _move(worktree, "a", "b", "dest")

        assert (worktree.root / "dest" / "a").exists()
        assert (worktree.root / "b").exists()
        assert worktree.tracked() == ["b", "dest/a"]
        assert not _lock_path(worktree).exists()

    def test_nothing_left_to_move_is_usage_error(self, worktree: WorkTree) -> None:
        worktree.write("loose")

        with pytest.raises(UsageError, match="nothing to move"):
            _move(worktree, "loose", "b", ignore_errors=True)

        assert not _lock_path(worktree).exists()

    def test_rename_failure_releases_lock(self, worktree: WorkTree) -> None:
        worktree.add("a")

        with pytest.raises(ExecutionError):
            _move(worktree, "a", "missing/b")

        assert not _lock_path(worktree).exists()
        assert worktree.tracked() == ["a"]

    def test_concurrent_holder_blocks_move(self, worktree: WorkTree) -> None:
        worktree.add("a")

        with IndexLock(worktree.index_path):
            with pytest.raises(IndexLocked):
                _move(worktree, "a", "b")

        assert (worktree.root / "a").exists()

    def test_commit_failure_is_persist_error(self, worktree: WorkTree) -> None:
        worktree.add("a")

        with patch("trackmv.index.lock.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(PersistError, match="read-only"):
                _move(worktree, "a", "b")

        assert not _lock_path(worktree).exists()

    def test_usage_error_for_multiple_sources_without_directory(
        self, worktree: WorkTree
    ) -> None:
        worktree.add("a", "b")
        with pytest.raises(UsageError):
            _move(worktree, "a", "b", "c")


class TestDryRun:
    def test_dry_run_prints_groups_and_writes_nothing(self, worktree: WorkTree) -> None:
        worktree.add("a", "b", "d/x")
        (worktree.root / "dest").mkdir()
        stored = worktree.index_path.read_bytes()

        outcome, output = _move(worktree, "a", "d", "dest", dry_run=True)

        assert not outcome.index_written
        assert worktree.index_path.read_bytes() == stored
        assert (worktree.root / "a").exists()
        assert "Checking rename of 'a' to 'dest/a'" in output
        assert "Adding   : dest/a, dest/d/x" in output
        assert "Deleting : a, d/x" in output
        assert "Changed" not in output

    def test_dry_run_force_reports_changed(self, worktree: WorkTree) -> None:
        worktree.add("a", "b")

        _, output = _move(worktree, "a", "b", dry_run=True, force=True)

        assert "Changed  : b" in output
        assert "Deleting : a" in output
        assert (worktree.root / "b").read_text() == "content of b"
