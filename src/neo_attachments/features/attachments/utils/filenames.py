"""Filename sanitization and extension policy for uploads."""

import re

from ....config.constants import BLOCKED_EXTENSIONS, DEFAULT_FILENAME, MAX_FILENAME_BYTES
from ....core.exceptions import ValidationError


_SEPARATORS = re.compile(r"[/\\]")
_DOT_RUNS = re.compile(r"\.{2,}")
_WHITESPACE = re.compile(r"\s+")


def extension_of(file_name: str) -> str:
    """Lowercased extension including the dot, or an empty string."""
    index = file_name.rfind(".")
    if index == -1:
        return ""
    return file_name[index:].lower()


def _truncate(name: str, limit: int = MAX_FILENAME_BYTES) -> str:
    encoded = name.encode("utf-8")
    if len(encoded) <= limit:
        return name

    index = name.rfind(".")
    extension = name[index:] if index != -1 else ""
    extension_bytes = extension.encode("utf-8")
    if not extension or len(extension_bytes) >= limit:
        return encoded[:limit].decode("utf-8", errors="ignore")

    base = name[:index].encode("utf-8")[: limit - len(extension_bytes)]
    # A trailing dot on the base would form ".." with the extension
    return base.decode("utf-8", errors="ignore").rstrip(".") + extension


def sanitize_file_name(raw: str) -> str:
    """Make a client-supplied filename safe to embed in a storage key.

    Path separators and whitespace runs become ``_``, NUL bytes are dropped,
    runs of dots collapse to ``_``, the result is cut to 255 UTF-8 bytes
    keeping the extension, and trailing dots are removed. Applying it twice
    gives the same result.
    """
    name = (raw or "").replace("\x00", "")
    name = _SEPARATORS.sub("_", name)
    name = _DOT_RUNS.sub("_", name)
    name = _WHITESPACE.sub("_", name)
    name = _truncate(name).rstrip(".")
    return name or DEFAULT_FILENAME


def validate_extension(file_name: str) -> None:
    """Reject executable and script extensions."""
    extension = extension_of(file_name)
    if extension in BLOCKED_EXTENSIONS:
        raise ValidationError(
            f"File type {extension} is not allowed",
            field="file_name",
            error_code="BLOCKED_EXTENSION",
            details={"extension": extension},
        )
