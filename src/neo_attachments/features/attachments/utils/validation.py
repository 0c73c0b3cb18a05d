"""Validation rules for attachment requests."""

import re
from typing import Optional

from ....config.constants import MAX_RETENTION_DAYS, MIN_RETENTION_DAYS
from ....core.exceptions import ValidationError


PARENT_TYPE_PATTERN = re.compile(r"^[a-z][a-z0-9_]{0,49}$")
CHECKSUM_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class AttachmentValidationRules:
    """Centralized validation rules for attachment operations."""

    @staticmethod
    def validate_size(size_bytes: int, max_bytes: int) -> None:
        if not isinstance(size_bytes, int) or isinstance(size_bytes, bool) or size_bytes <= 0:
            raise ValidationError("File size must be greater than zero", field="size_bytes")
        if size_bytes > max_bytes:
            raise ValidationError(
                f"File size {size_bytes} exceeds maximum of {max_bytes} bytes",
                field="size_bytes",
                error_code="FILE_TOO_LARGE",
                details={"size_bytes": size_bytes, "max_bytes": max_bytes},
            )

    @staticmethod
    def validate_retention_days(retention_days: Optional[int]) -> Optional[int]:
        """Accept ``None`` (unlimited) or an integer within the allowed range."""
        if retention_days is None:
            return None
        if (
            not isinstance(retention_days, int)
            or isinstance(retention_days, bool)
            or not MIN_RETENTION_DAYS <= retention_days <= MAX_RETENTION_DAYS
        ):
            raise ValidationError(
                f"retention_days must be between {MIN_RETENTION_DAYS} and {MAX_RETENTION_DAYS}",
                field="retention_days",
                details={"retention_days": retention_days},
            )
        return retention_days

    @staticmethod
    def normalize_parent_type(parent_type: str) -> str:
        value = (parent_type or "").strip().lower()
        if not PARENT_TYPE_PATTERN.match(value):
            raise ValidationError(f"Invalid parent type: {parent_type!r}", field="parent_type")
        return value

    @staticmethod
    def normalize_parent_id(parent_id: str) -> str:
        value = str(parent_id or "").strip()
        if not value or "/" in value or "\\" in value or ".." in value:
            raise ValidationError(f"Invalid parent id: {parent_id!r}", field="parent_id")
        return value

    @staticmethod
    def normalize_checksum(checksum_sha256: Optional[str]) -> Optional[str]:
        if checksum_sha256 is None:
            return None
        value = checksum_sha256.strip().lower()
        if not CHECKSUM_PATTERN.match(value):
            raise ValidationError("checksum_sha256 must be a hex-encoded SHA-256 digest", field="checksum_sha256")
        return value
