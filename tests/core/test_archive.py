"""Tests for zip packing and extraction."""

import io
import struct
import zipfile
from pathlib import Path

import pytest

from assetsync.core.archive import pack_directory, unpack_archive
from assetsync.core.errors import CorruptArchiveError, InvalidArchiveError


def make_tree(root: Path) -> dict[str, bytes]:
    files = {
        "scene.blend": b"\x00BLENDER" * 100,
        "textures/wood.png": b"png-bytes",
        "textures/metal/steel.png": b"steel",
        "notes.txt": "café".encode(),
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return files


def read_tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes() for p in root.rglob("*") if p.is_file()
    }


def zip_with(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def pack_to_bytes(source_dir: Path) -> bytes:
    buffer = io.BytesIO()
    pack_directory(source_dir, buffer)
    return buffer.getvalue()


def patch_headers(data: bytes, local_offset: int, central_offset: int, value: int) -> bytes:
    """Overwrite a 16-bit field in the first local and central header."""
    buf = bytearray(data)
    struct.pack_into("<H", buf, buf.index(b"PK\x03\x04") + local_offset, value)
    struct.pack_into("<H", buf, buf.index(b"PK\x01\x02") + central_offset, value)
    return bytes(buf)


class TestPack:
    """Tests for pack_directory()."""

    def test_entries_use_relative_forward_slash_paths(self, tmp_path: Path) -> None:
        """Should store every regular file under its relative path."""
        source = tmp_path / "src"
        files = make_tree(source)

        data = pack_to_bytes(source)

        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert sorted(zf.namelist()) == sorted(files)
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())

    def test_pack_to_file_reports_entries(self, tmp_path: Path) -> None:
        """Should write to a path and report each entry."""
        source = tmp_path / "src"
        files = make_tree(source)
        seen: list[str] = []

        count = pack_directory(source, tmp_path / "out.zip", on_entry=seen.append)

        assert count == len(files)
        assert sorted(seen) == sorted(files)
        assert zipfile.is_zipfile(tmp_path / "out.zip")

    def test_empty_directory(self, tmp_path: Path) -> None:
        """Should produce a valid empty archive."""
        (tmp_path / "empty").mkdir()
        with zipfile.ZipFile(io.BytesIO(pack_to_bytes(tmp_path / "empty"))) as zf:
            assert zf.namelist() == []


class TestUnpack:
    """Tests for unpack_archive()."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """Should reproduce every file with identical bytes."""
        source = tmp_path / "src"
        files = make_tree(source)

        unpack_archive(pack_to_bytes(source), tmp_path / "out")

        assert read_tree(tmp_path / "out") == files

    def test_unpack_twice_is_idempotent(self, tmp_path: Path) -> None:
        """Should yield the same tree when repeated into the same directory."""
        source = tmp_path / "src"
        make_tree(source)
        data = pack_to_bytes(source)
        dest = tmp_path / "out"

        unpack_archive(data, dest)
        first = read_tree(dest)
        unpack_archive(data, dest)

        assert read_tree(dest) == first

    def test_overwrites_and_keeps_unrelated_files(self, tmp_path: Path) -> None:
        """Should overwrite same-path files and leave others alone."""
        dest = tmp_path / "out"
        dest.mkdir()
        (dest / "a.txt").write_bytes(b"old")
        (dest / "mine.txt").write_bytes(b"keep")

        unpack_archive(zip_with({"a.txt": b"new"}), dest)

        assert (dest / "a.txt").read_bytes() == b"new"
        assert (dest / "mine.txt").read_bytes() == b"keep"

    def test_creates_destination(self, tmp_path: Path) -> None:
        """Should create the destination and intermediate directories."""
        dest = tmp_path / "deep" / "er" / "out"
        unpack_archive(zip_with({"x/y/z.txt": b"z"}), dest)
        assert (dest / "x/y/z.txt").read_bytes() == b"z"

    def test_from_stream(self, tmp_path: Path) -> None:
        """Should accept a readable binary stream."""
        unpack_archive(io.BytesIO(zip_with({"a.txt": b"a"})), tmp_path / "out")
        assert (tmp_path / "out/a.txt").read_bytes() == b"a"

    @pytest.mark.parametrize("name", ["../evil.txt", "ok/../../evil.txt", "/abs/evil.txt"])
    def test_rejects_traversal(self, tmp_path: Path, name: str) -> None:
        """Should reject entries escaping the destination and write nothing."""
        dest = tmp_path / "out"
        data = zip_with({"good.txt": b"fine", name: b"evil"})

        with pytest.raises(InvalidArchiveError):
            unpack_archive(data, dest)

        assert not (tmp_path / "evil.txt").exists()
        assert not (dest / "good.txt").exists()

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        """Should raise CorruptArchiveError for a malformed stream."""
        with pytest.raises(CorruptArchiveError):
            unpack_archive(b"this is not a zip", tmp_path / "out")

    def test_truncated_archive(self, tmp_path: Path) -> None:
        """Should raise CorruptArchiveError for a truncated archive."""
        data = zip_with({"a.txt": b"a" * 1000})
        with pytest.raises(CorruptArchiveError):
            unpack_archive(data[: len(data) // 2], tmp_path / "out")

    def test_encrypted_member(self, tmp_path: Path) -> None:
        """Should raise CorruptArchiveError for a password protected entry."""
        data = patch_headers(zip_with({"scene.blend": b"data"}), 6, 8, 0x1)

        with pytest.raises(CorruptArchiveError):
            unpack_archive(data, tmp_path / "out")

        assert not (tmp_path / "out/scene.blend").exists()

    def test_unsupported_compression(self, tmp_path: Path) -> None:
        """Should raise CorruptArchiveError for an unknown compression method."""
        data = patch_headers(zip_with({"scene.blend": b"data"}), 8, 10, 99)

        with pytest.raises(CorruptArchiveError):
            unpack_archive(data, tmp_path / "out")
