"""Protocol interfaces for the attachments feature.

Persistence contracts are implemented by the asyncpg repositories in this
package. Access control, entitlements, auditing and object storage are
external collaborators: hosting services provide implementations that satisfy
these protocols.
"""

from abc import abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable
from uuid import UUID

from ....config.constants import AttachmentStatus
from .attachment import Attachment
from .audit_event import AuditEvent
from .storage_usage import StorageUsage


# Repository Protocols
@runtime_checkable
class AttachmentRepository(Protocol):
    """Persistence of attachment records.

    Every state transition is a conditional update on the expected prior
    status and returns ``None`` when no row matched.
    """

    @abstractmethod
    async def create(self, attachment: Attachment) -> Attachment:
        """Insert a new pending attachment."""
        ...

    @abstractmethod
    async def get_active(
        self, attachment_id: UUID, organization_id: UUID, workspace_id: UUID
    ) -> Optional[Attachment]:
        """Get an attachment scoped to org/workspace, excluding soft-deleted rows."""
        ...

    @abstractmethod
    async def mark_uploaded(
        self,
        attachment_id: UUID,
        uploaded_at: datetime,
        checksum_sha256: Optional[str],
        retention_days: Optional[int],
        expires_at: Optional[datetime],
    ) -> Optional[Attachment]:
        """Transition pending -> uploaded."""
        ...

    @abstractmethod
    async def mark_deleted(
        self,
        attachment_id: UUID,
        expected_status: AttachmentStatus,
        deleted_at: datetime,
        expired_before: Optional[datetime] = None,
    ) -> Optional[Attachment]:
        """Transition expected_status -> deleted.

        With ``expired_before`` the row must also still have expired before that time.
        """
        ...

    @abstractmethod
    async def update_retention(
        self, attachment_id: UUID, retention_days: Optional[int], expires_at: Optional[datetime]
    ) -> Optional[Attachment]:
        """Change the retention window of an uploaded attachment."""
        ...

    @abstractmethod
    async def touch_last_downloaded(self, attachment_id: UUID, downloaded_at: datetime) -> None:
        ...

    @abstractmethod
    async def list_for_parent(
        self, organization_id: UUID, workspace_id: UUID, parent_type: str, parent_id: str
    ) -> List[Attachment]:
        """Uploaded attachments of a parent, newest first."""
        ...

    @abstractmethod
    async def list_expired(self, now: datetime, limit: int) -> List[Attachment]:
        """Uploaded attachments past expiry, soonest-expired first."""
        ...

    @abstractmethod
    async def list_stale_pending(self, created_before: datetime, limit: int) -> List[Attachment]:
        """Pending attachments created before the cutoff, oldest first."""
        ...

    @abstractmethod
    async def sum_bytes_by_workspace(self, organization_id: UUID) -> Dict[UUID, Tuple[int, int]]:
        """Map workspace_id -> (uploaded bytes, pending bytes)."""
        ...


@runtime_checkable
class StorageUsageRepository(Protocol):
    """Atomic per-workspace byte counters.

    The four mutators are the only writes to the ledger; each is a single
    statement and floors counters at zero.
    """

    @abstractmethod
    async def reserve(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        ...

    @abstractmethod
    async def promote(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        ...

    @abstractmethod
    async def release(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        ...

    @abstractmethod
    async def decrement_used(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        ...

    @abstractmethod
    async def effective_usage(self, organization_id: UUID) -> int:
        """Sum of used + reserved bytes across every workspace of the organization."""
        ...

    @abstractmethod
    async def used_bytes(self, organization_id: UUID) -> int:
        ...

    @abstractmethod
    async def get_usage(self, organization_id: UUID, workspace_id: UUID) -> Optional[StorageUsage]:
        ...

    @abstractmethod
    async def list_for_organization(self, organization_id: UUID) -> List[StorageUsage]:
        ...


# External collaborator Protocols
@runtime_checkable
class AccessControlGuard(Protocol):
    """Workspace-level authorization decisions.

    ``require_read`` and ``require_write`` raise ``AuthorizationError`` when
    the user is not allowed. The parent reference is passed as context only.
    """

    @abstractmethod
    async def require_read(
        self, workspace_id: UUID, user_id: UUID,
        *, parent_type: Optional[str] = None, parent_id: Optional[str] = None
    ) -> None:
        ...

    @abstractmethod
    async def require_write(
        self, workspace_id: UUID, user_id: UUID,
        *, parent_type: Optional[str] = None, parent_id: Optional[str] = None
    ) -> None:
        ...

    @abstractmethod
    async def role_of(self, workspace_id: UUID, user_id: UUID) -> Optional[str]:
        ...


@runtime_checkable
class EntitlementLookup(Protocol):
    """Plan limits per organization; ``None`` means unlimited."""

    @abstractmethod
    async def limit_for(self, organization_id: UUID, key: str) -> Optional[int]:
        ...


@runtime_checkable
class AuditSink(Protocol):
    """Receives audit events for attachment operations."""

    @abstractmethod
    async def record(self, event: AuditEvent) -> None:
        ...


@runtime_checkable
class ObjectStorageGateway(Protocol):
    """Signed URL issuance and deletion against the object store."""

    @property
    def bucket(self) -> str:
        ...

    @property
    def provider(self) -> str:
        ...

    @abstractmethod
    async def signed_put_url(self, key: str, mime_type: str, size_bytes: int, ttl_seconds: int) -> str:
        ...

    @abstractmethod
    async def signed_get_url(
        self, key: str, file_name: str, ttl_seconds: int, force_attachment: bool = True
    ) -> str:
        ...

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        ...
