"""Unit tests for utility functions."""

import pytest

from s3syncd.utils import (
    format_duration,
    format_size,
    is_marker_key,
    listing_prefix,
    marker_key,
    normalize_prefix,
    parse_bool,
    parse_duration,
    remote_key,
)


class TestRemoteKey:
    """Tests for remote key derivation."""

    def test_empty_prefix(self):
        """Without a prefix the key is the relative path."""
        assert remote_key("", "a.txt") == "a.txt"
        assert remote_key("", "sub/b.txt") == "sub/b.txt"

    def test_with_prefix(self):
        """Prefix and relative path are joined with a single slash."""
        assert remote_key("backup", "sub/b.txt") == "backup/sub/b.txt"

    def test_backslashes_normalized(self):
        """Windows separators never reach the store."""
        assert remote_key("backup", "sub\\b.txt") == "backup/sub/b.txt"

    def test_marker_key(self):
        assert marker_key("", "sub", "syncd.txt") == "sub/syncd.txt"
        assert marker_key("p", "a/b", "done") == "p/a/b/done"


class TestNormalizePrefix:
    """Tests for normalize_prefix."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, ""),
            ("", ""),
            ("/", ""),
            ("backup", "backup"),
            ("/backup/", "backup"),
            ("a\\b\\", "a/b"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_prefix(raw) == expected

    def test_listing_prefix(self):
        """A trailing slash keeps sibling prefixes out of listings."""
        assert listing_prefix("") == ""
        assert listing_prefix("data") == "data/"


class TestIsMarkerKey:
    """Tests for is_marker_key."""

    def test_marker_keys(self):
        assert is_marker_key("syncd.txt", "syncd.txt")
        assert is_marker_key("p/sub/syncd.txt", "syncd.txt")

    def test_non_marker_keys(self):
        assert not is_marker_key("p/sub/not-syncd.txt", "syncd.txt")
        assert not is_marker_key("p/sub/b.txt", "syncd.txt")


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        "text,seconds",
        [
            ("0", 0.0),
            ("30s", 30.0),
            ("5m", 300.0),
            ("1h30m", 5400.0),
            ("1.5h", 5400.0),
            ("500ms", 0.5),
            ("2h0m10s", 7210.0),
        ],
    )
    def test_valid(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize("text", ["", "10", "5 minutes", "m", "1h-5m", "abc"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_negative(self):
        assert parse_duration("-5s") == -5.0


class TestFormatting:
    """Tests for format_duration and format_size."""

    def test_format_duration(self):
        assert format_duration(45) == "45s"
        assert format_duration(300) == "5m0s"
        assert format_duration(5400) == "1h30m0s"

    def test_format_size(self):
        assert format_size(256) == "256 B"
        assert format_size(1536) == "1.5 KB"
        assert format_size(5 * 1024 * 1024) == "5.0 MB"


class TestParseBool:
    """Tests for parse_bool."""

    @pytest.mark.parametrize("text", ["true", "TRUE", "yes", "1", "on"])
    def test_true(self, text):
        assert parse_bool(text) is True

    @pytest.mark.parametrize("text", ["false", "no", "0", "off", ""])
    def test_false(self, text):
        assert parse_bool(text) is False

    def test_invalid(self):
        with pytest.raises(ValueError, match="invalid boolean"):
            parse_bool("maybe")
