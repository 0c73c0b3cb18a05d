"""Constants shared across the attachments feature."""

from enum import Enum
from uuid import UUID


class AttachmentStatus(str, Enum):
    """Lifecycle states of an attachment record."""
    PENDING = "pending"
    UPLOADED = "uploaded"
    DELETED = "deleted"


class AuditAction(str, Enum):
    """Actions reported to the audit sink."""
    PRESIGN_CREATE = "presign_create"
    UPLOAD_COMPLETE = "upload_complete"
    DOWNLOAD_LINK = "download_link"
    UPDATE = "update"
    DELETE = "delete"


class EntitlementKey(str, Enum):
    """Plan entitlement keys consulted by the attachments feature."""
    MAX_STORAGE_BYTES = "max_storage_bytes"
    ATTACHMENT_RETENTION_DAYS = "attachment_retention_days"


# Upload limits
DEFAULT_MAX_BYTES = 52_428_800  # 50 MiB
MAX_FILENAME_BYTES = 255
DEFAULT_FILENAME = "unnamed"
DEFAULT_MIME_TYPE = "application/octet-stream"

BLOCKED_EXTENSIONS = frozenset({
    ".exe", ".bat", ".cmd", ".com", ".msi",
    ".scr", ".ps1", ".sh", ".vbs", ".js",
})

# Retention
MIN_RETENTION_DAYS = 1
MAX_RETENTION_DAYS = 3650

# Signed URL lifetimes (seconds)
PRESIGN_PUT_TTL_SECONDS = 900
PRESIGN_GET_TTL_SECONDS = 60

# Quota
STORAGE_WARNING_THRESHOLD = 0.8
STORAGE_WARNING_HEADER = "X-Storage-Warning"
STORAGE_WARNING_VALUE = "Approaching quota"

# Background jobs
DEFAULT_PURGE_LIMIT = 500
DEFAULT_STALE_PENDING_SECONDS = 86_400

STORAGE_PROVIDER_S3 = "s3"
ENTITY_TYPE_ATTACHMENT = "attachment"

# Actor used by background jobs when auditing
SYSTEM_USER_ID = UUID("00000000-0000-0000-0000-000000000000")
SYSTEM_ACTOR_ROLE = "ADMIN"
SYSTEM_AUDIT_SOURCE = "retention_job"
