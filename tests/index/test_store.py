"""Tests for the ordered tracked-path index."""

import json
from pathlib import Path

import pytest

from trackmv.core.errors import InternalInvariant, PersistError
from trackmv.index.store import TrackedIndex
from trackmv.schemas import IndexEntry


def _index(*paths: str) -> TrackedIndex:
    return TrackedIndex(IndexEntry(path=p, fingerprint=f"fp-{p}") for p in paths)


class TestLookup:
    """Point and range lookups."""

    def test_entries_are_sorted_on_construction(self) -> None:
        index = _index("b", "a/x", "a")
        assert index.paths() == ["a", "a/x", "b"]

    def test_duplicate_paths_rejected(self) -> None:
        with pytest.raises(ValueError, match="duplicate"):
            _index("a", "a")

    def test_position_of_found_and_insertion_point(self) -> None:
        index = _index("a", "c", "e")

        assert index.position_of("c") == 1
        assert index.position_of("b") == -2
        assert index.position_of("0") == -1
        assert index.position_of("z") == -4

    def test_lookup_is_case_sensitive(self) -> None:
        index = _index("Readme")

        assert index.lookup("Readme") is not None
        assert index.lookup("readme") is None
        assert "readme" not in index

    def test_range_with_prefix_is_contiguous_children_only(self) -> None:
        index = _index("a", "a-b", "a.txt", "a/x", "a/y/z", "a0", "ab", "b/x")

        children = index.range_with_prefix("a")

        assert [e.path for e in children] == ["a/x", "a/y/z"]

    def test_range_with_prefix_accepts_trailing_slash(self) -> None:
        index = _index("dir/one", "dir/two", "dirt")
        assert [e.path for e in index.range_with_prefix("dir/")] == [
            "dir/one",
            "dir/two",
        ]

    def test_range_with_prefix_empty_for_unknown_directory(self) -> None:
        index = _index("a/x")
        assert index.range_with_prefix("b") == []
        assert index.range_with_prefix("a/x") == []


class TestMutation:
    """Insert, remove and refresh mark the index dirty."""

    def test_fresh_index_is_clean(self) -> None:
        assert not _index("a").is_dirty

    def test_insert_keeps_order(self) -> None:
        index = _index("a", "c")
        index.insert(IndexEntry(path="b"))

        assert index.paths() == ["a", "b", "c"]
        assert index.is_dirty

    def test_insert_replaces_existing_path(self) -> None:
        index = _index("a")
        index.insert(IndexEntry(path="a", fingerprint="new"))

        assert len(index) == 1
        assert index.lookup("a").fingerprint == "new"

    def test_remove(self) -> None:
        index = _index("a", "b")
        index.remove("a")

        assert index.paths() == ["b"]
        assert index.is_dirty

    def test_remove_missing_path_is_internal_error(self) -> None:
        with pytest.raises(InternalInvariant):
            _index("a").remove("b")

    def test_refresh_replaces_metadata_in_place(self) -> None:
        index = _index("a", "b")
        index.refresh("a", IndexEntry(path="a", fingerprint="other", size=3))

        assert index.lookup("a").size == 3
        assert index.paths() == ["a", "b"]
        assert index.is_dirty

    def test_refresh_with_identical_entry_stays_clean(self) -> None:
        index = _index("a")
        index.refresh("a", IndexEntry(path="a", fingerprint="fp-a"))
        assert not index.is_dirty

    def test_refresh_of_untracked_path_is_internal_error(self) -> None:
        with pytest.raises(InternalInvariant, match="unknown"):
            _index("a").refresh("b", IndexEntry(path="b"))


class TestPersistence:
    """Loading and dumping the JSON document."""

    def test_missing_store_loads_empty(self, tmp_path: Path) -> None:
        index = TrackedIndex.load(tmp_path / "index.json")
        assert len(index) == 0
        assert not index.is_dirty

    def test_dump_then_load_preserves_entries(self, tmp_path: Path) -> None:
        store = tmp_path / "index.json"
        original = _index("b", "a/x")
        store.write_bytes(original.dump())

        loaded = TrackedIndex.load(store)

        assert list(loaded) == list(original)

    def test_dump_is_versioned_json(self) -> None:
        document = json.loads(_index("a").dump())

        assert document["schema_version"] == "1.0"
        assert document["entries"][0]["path"] == "a"

    def test_corrupt_store_raises_persist_error(self, tmp_path: Path) -> None:
        store = tmp_path / "index.json"
        store.write_text("{not json")

        with pytest.raises(PersistError, match="corrupt"):
            TrackedIndex.load(store)

    def test_out_of_order_document_is_corrupt(self, tmp_path: Path) -> None:
        store = tmp_path / "index.json"
        store.write_text(
            json.dumps(
                {"schema_version": "1.0", "entries": [{"path": "b"}, {"path": "a"}]}
            )
        )

        with pytest.raises(PersistError):
            TrackedIndex.load(store)

    def test_invalid_entry_path_is_corrupt(self, tmp_path: Path) -> None:
        store = tmp_path / "index.json"
        store.write_text(
            json.dumps({"schema_version": "1.0", "entries": [{"path": "../x"}]})
        )

        with pytest.raises(PersistError):
            TrackedIndex.load(store)
