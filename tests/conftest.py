"""Pytest configuration and fixtures for trackmv tests."""

from pathlib import Path

import pytest

from trackmv.core.index_service import add_paths
from trackmv.index.store import TrackedIndex
from trackmv.utils.debug import configure_logging


class WorkTree:
    """A temporary working tree with helpers to create and track files."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.index_path = root / ".trackmv" / "index.json"

    def write(self, *paths: str, content: str | None = None) -> None:
        for path in paths:
            target = self.root / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content if content is not None else f"content of {path}")

    def track(self, *paths: str) -> None:
        add_paths(list(paths), self.root, cwd=self.root)

    def add(self, *paths: str) -> None:
        """Create files and track them."""
        self.write(*paths)
        self.track(*paths)

    def index(self) -> TrackedIndex:
        return TrackedIndex.load(self.index_path)

    def tracked(self) -> list[str]:
        return self.index().paths()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep structured logs at WARNING and ignore developer overrides."""
    monkeypatch.delenv("TRACKMV_INDEX_PATH", raising=False)
    monkeypatch.delenv("TRACKMV_DEBUG", raising=False)
    configure_logging(False)


@pytest.fixture
def worktree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> WorkTree:
    root = tmp_path / "tree"
    root.mkdir()
    monkeypatch.chdir(root)
    return WorkTree(root.resolve())
