"""Tests for helpers module."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from local_filesystem.helpers import (
    detect_mime_type,
    expand_braces,
    fileperms_to_octal_value,
    normalize_path,
)

TEST_DIRECTORY_NAME = "test"


class TestNormalizePath:
    """Tests for normalize_path."""

    @pytest.mark.parametrize(
        "source",
        [
            "{base}/{name}",
            "{base}/{name}  ",
            "{base}\\{name}",
            "{base}//{name}",
            "{base}\\\\{name}",
            "  {base}/\\/{name}",
        ],
    )
    def test_separator_variants(self, source: str) -> None:
        """Test every separator style yields one canonical separator."""
        base = str(Path(__file__).parent)
        expected = base.replace("/", os.sep) + os.sep + TEST_DIRECTORY_NAME

        assert normalize_path(source.format(base=base, name=TEST_DIRECTORY_NAME)) == expected

    @pytest.mark.parametrize(
        "path",
        ["/var//www/html/", "a\\\\b//c", "  x/y  ", "", "////", "no-separators"],
    )
    def test_idempotent(self, path: str) -> None:
        """Test normalizing twice changes nothing."""
        once = normalize_path(path)

        assert normalize_path(once) == once

    def test_trailing_separator_kept(self) -> None:
        """Test a trailing separator survives as a single separator."""
        assert normalize_path("/var//www/html//") == os.sep.join(["", "var", "www", "html", ""])


class TestFilepermsToOctalValue:
    """Tests for fileperms_to_octal_value."""

    @pytest.mark.parametrize(
        ("fileperms", "expected"),
        [
            (0o100644, "0644"),
            (0o040755, "0755"),
            (0o100777, "0777"),
            (0o120777, "0777"),
            (0o755, "0755"),
            (0o4755, "4755"),
        ],
    )
    def test_values(self, fileperms: int, expected: str) -> None:
        """Test the permission digits are extracted."""
        assert fileperms_to_octal_value(fileperms) == expected


class TestExpandBraces:
    """Tests for expand_braces."""

    def test_no_braces(self) -> None:
        """Test a pattern without braces is returned as is."""
        assert expand_braces("*.txt") == ["*.txt"]

    def test_simple_group(self) -> None:
        """Test alternatives are expanded in order."""
        assert expand_braces("file.{txt,md}") == ["file.txt", "file.md"]

    def test_multiple_groups(self) -> None:
        """Test every group is expanded."""
        assert expand_braces("{a,b}{1,2}") == ["a1", "a2", "b1", "b2"]

    def test_nested_group(self) -> None:
        """Test nested groups are expanded."""
        assert expand_braces("x{a,{b,c}}") == ["xa", "xb", "xc"]

    def test_empty_alternative(self) -> None:
        """Test an empty alternative is kept."""
        assert expand_braces("a{,b}") == ["a", "ab"]

    def test_unbalanced_brace_is_literal(self) -> None:
        """Test an unclosed brace is left alone."""
        assert expand_braces("{a,b") == ["{a,b"]

    def test_unbalanced_brace_before_group(self) -> None:
        """Test a later balanced group is still expanded."""
        assert expand_braces("{a{b,c}") == ["{ab", "{ac"]


class TestDetectMimeType:
    """Tests for detect_mime_type."""

    def test_by_extension(self, tmp_path: Path) -> None:
        """Test known extensions decide the type."""
        path = tmp_path / "page.html"
        path.write_text("<html></html>")

        assert detect_mime_type(str(path)) == "text/html"

    def test_extension_wins_over_content(self, tmp_path: Path) -> None:
        """Test a known extension is reported even for binary content."""
        path = tmp_path / "image.txt"
        path.write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(range(256)))

        assert detect_mime_type(str(path)) == "text/plain"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises OSError."""
        with pytest.raises(FileNotFoundError):
            detect_mime_type(str(tmp_path / "missing"))
