"""Tests for filename sanitization and the extension blocklist."""

import pytest

from neo_attachments.core.exceptions import ValidationError
from neo_attachments.features.attachments.utils.filenames import (
    extension_of,
    sanitize_file_name,
    validate_extension,
)


TRICKY_NAMES = [
    "report.pdf",
    "../../etc/passwd",
    "..\\..\\windows\\system32",
    "my   holiday\tphoto.JPG",
    "a....b...c.txt",
    "null\x00byte.png",
    "",
    "   ",
    ".",
    "...",
    "ünïcødé файл.docx",
    "x" * 300 + ".pdf",
    "é" * 200 + ".txt",
    "name." + "y" * 300,
    "a" * 254 + "..b",
    "evil.exe.",
    "x" * 300 + ".",
]


class TestSanitizeFileName:

    def test_keeps_simple_names(self):
        assert sanitize_file_name("report.pdf") == "report.pdf"

    def test_replaces_path_separators(self):
        assert sanitize_file_name("dir/sub\\file.txt") == "dir_sub_file.txt"

    def test_collapses_dot_runs(self):
        assert sanitize_file_name("../../etc/passwd") == "____etc_passwd"

    def test_collapses_whitespace(self):
        assert sanitize_file_name("my   holiday\tphoto.jpg") == "my_holiday_photo.jpg"

    def test_drops_nul_bytes(self):
        assert sanitize_file_name("null\x00byte.png") == "nullbyte.png"

    def test_strips_trailing_dot(self):
        assert sanitize_file_name("evil.exe.") == "evil.exe"

    def test_trailing_dot_cannot_hide_blocked_extension(self):
        with pytest.raises(ValidationError):
            validate_extension(sanitize_file_name("evil.exe."))

    @pytest.mark.parametrize("raw", ["", None])
    def test_defaults_when_empty(self, raw):
        assert sanitize_file_name(raw) == "unnamed"

    def test_truncates_to_255_bytes_keeping_extension(self):
        result = sanitize_file_name("x" * 300 + ".pdf")
        assert len(result.encode("utf-8")) == 255
        assert result.endswith(".pdf")

    def test_truncation_respects_multibyte_characters(self):
        result = sanitize_file_name("é" * 200 + ".txt")
        assert len(result.encode("utf-8")) <= 255
        assert result.endswith(".txt")
        result.encode("utf-8").decode("utf-8")

    def test_truncation_never_creates_double_dot(self):
        result = sanitize_file_name("a" * 250 + "." + "b" * 10 + ".txt")
        assert ".." not in result
        assert result.endswith(".txt")

    @pytest.mark.parametrize("raw", TRICKY_NAMES)
    def test_is_idempotent(self, raw):
        once = sanitize_file_name(raw)
        assert sanitize_file_name(once) == once

    @pytest.mark.parametrize("raw", TRICKY_NAMES)
    def test_output_is_safe(self, raw):
        result = sanitize_file_name(raw)
        assert result
        assert ".." not in result
        assert "/" not in result
        assert "\\" not in result
        assert "\x00" not in result
        assert len(result.encode("utf-8")) <= 255


class TestExtensionPolicy:

    def test_extension_is_lowercased(self):
        assert extension_of("Setup.EXE") == ".exe"

    def test_no_extension(self):
        assert extension_of("README") == ""

    @pytest.mark.parametrize("name", [
        "setup.exe", "run.BAT", "x.cmd", "x.com", "pkg.msi",
        "x.scr", "script.ps1", "install.sh", "macro.vbs", "bundle.js", ".sh",
    ])
    def test_blocked_extensions(self, name):
        with pytest.raises(ValidationError) as exc_info:
            validate_extension(name)
        assert exc_info.value.error_code == "BLOCKED_EXTENSION"

    @pytest.mark.parametrize("name", ["report.pdf", "photo.jpeg", "data.json", "archive.tar.gz", "README"])
    def test_allowed_extensions(self, name):
        validate_extension(name)
