"""Tests for directory tree comparison."""

from pathlib import Path

import pytest

from assetsync.core.errors import NotFoundError
from assetsync.core.ignore import IgnorePatterns
from assetsync.core.treediff import apply_entry, diff_trees
from assetsync.core.types import ChangeKind, EntryKind, SyncDiffEntry


def write(root: Path, rel: str, content: bytes = b"data") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def trees(tmp_path: Path) -> tuple[Path, Path]:
    source = tmp_path / "source"
    dest = tmp_path / "dest"
    source.mkdir()
    dest.mkdir()
    return source, dest


class TestDiffTrees:
    """Tests for diff_trees()."""

    def test_identical_trees_empty(self, trees: tuple[Path, Path]) -> None:
        """Should report nothing for identical trees."""
        source, dest = trees
        for root in (source, dest):
            write(root, "a.txt", b"one")
            write(root, "sub/b.txt", b"two")

        assert diff_trees(source, dest, compare_content=True) == []

    def test_missing_file_with_parents_first(self, trees: tuple[Path, Path]) -> None:
        """Should report missing directories before the file they contain."""
        source, dest = trees
        write(source, "x/y/scene.blend")

        entries = diff_trees(source, dest)

        assert entries == [
            SyncDiffEntry("x", EntryKind.DIRECTORY, ChangeKind.MISSING),
            SyncDiffEntry("x/y", EntryKind.DIRECTORY, ChangeKind.MISSING),
            SyncDiffEntry("x/y/scene.blend", EntryKind.FILE, ChangeKind.MISSING),
        ]
        assert [e for e in entries if e.relative_path == "x/y/scene.blend"][0].name == "scene.blend"

    def test_content_difference(self, trees: tuple[Path, Path]) -> None:
        """Should report a same-size file whose bytes differ."""
        source, dest = trees
        write(source, "a.txt", b"aaaa")
        write(dest, "a.txt", b"bbbb")

        entries = diff_trees(source, dest, compare_content=True)

        assert entries == [SyncDiffEntry("a.txt", EntryKind.FILE, ChangeKind.DISTINCT)]

    def test_metadata_only_comparison(self, trees: tuple[Path, Path]) -> None:
        """Should compare size and mtime when content comparison is off."""
        import os

        source, dest = trees
        src = write(source, "a.txt", b"aaaa")
        dst = write(dest, "a.txt", b"bbbb")
        os.utime(dst, (src.stat().st_atime, src.stat().st_mtime))

        assert diff_trees(source, dest, compare_content=False) == []

    def test_destination_only_entries_ignored(self, trees: tuple[Path, Path]) -> None:
        """Should not report entries only present in the destination."""
        source, dest = trees
        write(dest, "local-only.txt")
        write(dest, "extra/dir/file.txt")

        assert diff_trees(source, dest) == []

    def test_excluded_entries_skipped_recursively(self, trees: tuple[Path, Path]) -> None:
        """Should skip excluded directories and everything below them."""
        source, dest = trees
        write(source, ".assetsync/state.json")
        write(source, "cache/deep/file.bin")
        write(source, "keep.txt")

        entries = diff_trees(source, dest, exclude=IgnorePatterns(["cache"]))

        assert [e.relative_path for e in entries] == ["keep.txt"]

    def test_directory_before_contents_across_siblings(self, trees: tuple[Path, Path]) -> None:
        """Should emit every directory ahead of its own children."""
        source, dest = trees
        write(source, "b/file.txt")
        write(source, "a/inner/file.txt")
        write(source, "top.txt")

        paths = [e.relative_path for e in diff_trees(source, dest)]

        for i, path in enumerate(paths):
            parent = path.rsplit("/", 1)[0] if "/" in path else None
            if parent:
                assert parent in paths[:i]

    def test_missing_destination(self, tmp_path: Path) -> None:
        """Should report everything when the destination does not exist yet."""
        source = tmp_path / "source"
        write(source, "a.txt")

        entries = diff_trees(source, tmp_path / "nope")

        assert entries == [SyncDiffEntry("a.txt", EntryKind.FILE, ChangeKind.MISSING)]

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        """Should raise NotFoundError when the source does not exist."""
        with pytest.raises(NotFoundError):
            diff_trees(tmp_path / "missing", tmp_path)


class TestApplyEntry:
    """Tests for apply_entry()."""

    def test_apply_all_makes_trees_equal(self, trees: tuple[Path, Path]) -> None:
        """Applying every entry should leave nothing to diff."""
        source, dest = trees
        write(source, "a.txt", b"new")
        write(source, "sub/deeper/b.txt", b"b")
        write(dest, "a.txt", b"old")

        for entry in diff_trees(source, dest):
            apply_entry(entry, source, dest)

        assert diff_trees(source, dest) == []
        assert (dest / "a.txt").read_bytes() == b"new"

    def test_replaces_wrong_kind(self, trees: tuple[Path, Path]) -> None:
        """Should replace a file where a directory belongs and vice versa."""
        source, dest = trees
        write(source, "thing/inside.txt")
        write(source, "other.txt", b"file")
        write(dest, "thing", b"was a file")
        write(dest, "other.txt/nested.txt")

        for entry in diff_trees(source, dest):
            apply_entry(entry, source, dest)

        assert (dest / "thing").is_dir()
        assert (dest / "other.txt").read_bytes() == b"file"
