"""Attachment entity.

An attachment is a file uploaded against an arbitrary parent record inside a
workspace. The record moves through ``pending -> uploaded -> deleted`` and is
never physically removed; "expired" is derived from ``expires_at`` at read
time rather than stored.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from ....config.constants import (
    AttachmentStatus,
    DEFAULT_MIME_TYPE,
    MAX_RETENTION_DAYS,
    MIN_RETENTION_DAYS,
    STORAGE_PROVIDER_S3,
)
from ....utils.datetime import ensure_utc, utc_now


@dataclass
class Attachment:
    """Attachment record matching the ``attachments`` table."""

    # Ownership
    organization_id: UUID
    workspace_id: UUID
    uploader_user_id: UUID
    parent_type: str
    parent_id: str

    # File
    file_name: str
    size_bytes: int
    bucket: str
    storage_key: str
    mime_type: str = DEFAULT_MIME_TYPE
    storage_provider: str = STORAGE_PROVIDER_S3
    checksum_sha256: Optional[str] = None

    # Lifecycle
    id: UUID = field(default_factory=uuid4)
    status: AttachmentStatus = AttachmentStatus.PENDING
    uploaded_at: Optional[datetime] = None
    retention_days: Optional[int] = None
    expires_at: Optional[datetime] = None
    last_downloaded_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Post-init validation and normalization."""
        if self.size_bytes is None or self.size_bytes <= 0:
            raise ValueError(f"size_bytes must be positive, got {self.size_bytes}")
        if not self.storage_key:
            raise ValueError("storage_key is required")
        if self.retention_days is not None and not (
            MIN_RETENTION_DAYS <= self.retention_days <= MAX_RETENTION_DAYS
        ):
            raise ValueError(f"retention_days out of range: {self.retention_days}")

        if not isinstance(self.status, AttachmentStatus):
            self.status = AttachmentStatus(self.status)
        self.mime_type = self.mime_type or DEFAULT_MIME_TYPE
        self.parent_type = self.parent_type.strip().lower()

        self.uploaded_at = ensure_utc(self.uploaded_at)
        self.expires_at = ensure_utc(self.expires_at)
        self.last_downloaded_at = ensure_utc(self.last_downloaded_at)
        self.deleted_at = ensure_utc(self.deleted_at)
        self.created_at = ensure_utc(self.created_at)
        self.updated_at = ensure_utc(self.updated_at)

    @property
    def is_pending(self) -> bool:
        return self.status == AttachmentStatus.PENDING

    @property
    def is_uploaded(self) -> bool:
        return self.status == AttachmentStatus.UPLOADED

    @property
    def is_deleted(self) -> bool:
        return self.status == AttachmentStatus.DELETED or self.deleted_at is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """An uploaded attachment whose retention window has passed."""
        if not self.is_uploaded or self.expires_at is None:
            return False
        now = now or utc_now()
        return self.expires_at < now

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        def iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": str(self.id),
            "organization_id": str(self.organization_id),
            "workspace_id": str(self.workspace_id),
            "uploader_user_id": str(self.uploader_user_id),
            "parent_type": self.parent_type,
            "parent_id": self.parent_id,
            "file_name": self.file_name,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "storage_provider": self.storage_provider,
            "bucket": self.bucket,
            "storage_key": self.storage_key,
            "checksum_sha256": self.checksum_sha256,
            "status": self.status.value,
            "uploaded_at": iso(self.uploaded_at),
            "retention_days": self.retention_days,
            "expires_at": iso(self.expires_at),
            "last_downloaded_at": iso(self.last_downloaded_at),
            "deleted_at": iso(self.deleted_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


def compute_expiry(uploaded_at: datetime, retention_days: Optional[int]) -> Optional[datetime]:
    """Expiry is always anchored on the original upload time."""
    if retention_days is None:
        return None
    return uploaded_at + timedelta(days=retention_days)
