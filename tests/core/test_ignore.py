"""Tests for exclude pattern matching."""

from assetsync.core.ignore import DEFAULT_IGNORE_PATTERNS, IgnorePatterns


class TestIgnorePatterns:
    """Tests for IgnorePatterns."""

    def test_defaults_include_marker_directory(self) -> None:
        """Should exclude the assetsync marker directory by default."""
        assert ".assetsync" in DEFAULT_IGNORE_PATTERNS
        assert IgnorePatterns().matches(".assetsync", is_dir=True)
        assert IgnorePatterns().matches("proj/.DS_Store")

    def test_no_defaults(self) -> None:
        """Should allow starting without defaults."""
        assert not IgnorePatterns(defaults=False).matches(".git", is_dir=True)

    def test_name_glob(self) -> None:
        """Should match a slash-less pattern against the entry name."""
        patterns = IgnorePatterns(["*.tmp"])
        assert patterns.matches("a/b/file.tmp")
        assert not patterns.matches("a/b/file.txt")

    def test_path_pattern(self) -> None:
        """Should match a pattern containing a slash against the full path."""
        patterns = IgnorePatterns(["renders/*.exr"])
        assert patterns.matches("renders/frame1.exr")
        assert not patterns.matches("other/frame1.exr")

    def test_directory_only_pattern(self) -> None:
        """Should apply a trailing-slash pattern to directories only."""
        patterns = IgnorePatterns(["cache/"])
        assert patterns.matches("cache", is_dir=True)
        assert not patterns.matches("cache", is_dir=False)
