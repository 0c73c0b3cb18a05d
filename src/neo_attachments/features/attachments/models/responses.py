"""Attachment response models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..entities.attachment import Attachment
from ..entities.storage_usage import LedgerDrift, StorageUsage, UsageReport


class AttachmentResponse(BaseModel):
    """Attachment metadata returned to clients. Storage location is not exposed."""

    id: str = Field(..., description="Attachment ID")
    workspace_id: str = Field(..., description="Workspace ID")
    uploader_user_id: str = Field(..., description="User who created the upload")
    parent_type: str = Field(..., description="Type of the owning record")
    parent_id: str = Field(..., description="Identifier of the owning record")
    file_name: str = Field(..., description="Sanitized file name")
    mime_type: str = Field(..., description="Content type")
    size_bytes: int = Field(..., description="File size in bytes")
    checksum_sha256: Optional[str] = Field(None, description="SHA-256 provided at completion")
    status: str = Field(..., description="pending, uploaded or deleted")
    uploaded_at: Optional[datetime] = Field(None, description="Upload completion time")
    retention_days: Optional[int] = Field(None, description="Retention window in days")
    expires_at: Optional[datetime] = Field(None, description="When the file becomes unavailable")
    last_downloaded_at: Optional[datetime] = Field(None, description="Last download link issued")
    created_at: datetime = Field(..., description="Creation timestamp")

    @classmethod
    def from_entity(cls, attachment: Attachment) -> "AttachmentResponse":
        return cls(
            id=str(attachment.id),
            workspace_id=str(attachment.workspace_id),
            uploader_user_id=str(attachment.uploader_user_id),
            parent_type=attachment.parent_type,
            parent_id=attachment.parent_id,
            file_name=attachment.file_name,
            mime_type=attachment.mime_type,
            size_bytes=attachment.size_bytes,
            checksum_sha256=attachment.checksum_sha256,
            status=attachment.status.value,
            uploaded_at=attachment.uploaded_at,
            retention_days=attachment.retention_days,
            expires_at=attachment.expires_at,
            last_downloaded_at=attachment.last_downloaded_at,
            created_at=attachment.created_at,
        )


class PresignUploadResponse(BaseModel):
    attachment: AttachmentResponse = Field(..., description="The pending attachment")
    upload_url: str = Field(..., description="Signed PUT URL")
    expires_in: int = Field(..., description="Seconds until the upload URL expires")
    storage_warning: bool = Field(False, description="Organization is approaching its storage limit")


class DownloadUrlResponse(BaseModel):
    download_url: str = Field(..., description="Signed GET URL")
    expires_in: int = Field(..., description="Seconds until the download URL expires")
    file_name: str = Field(..., description="File name used for the download")


class AttachmentListResponse(BaseModel):
    items: List[AttachmentResponse] = Field(default_factory=list)
    total: int = Field(0, description="Number of attachments returned")

    @classmethod
    def from_entities(cls, attachments: List[Attachment]) -> "AttachmentListResponse":
        items = [AttachmentResponse.from_entity(a) for a in attachments]
        return cls(items=items, total=len(items))


class WorkspaceUsageResponse(BaseModel):
    workspace_id: str
    used_bytes: int
    reserved_bytes: int

    @classmethod
    def from_entity(cls, usage: StorageUsage) -> "WorkspaceUsageResponse":
        return cls(
            workspace_id=str(usage.workspace_id),
            used_bytes=usage.used_bytes,
            reserved_bytes=usage.reserved_bytes,
        )


class StorageUsageResponse(BaseModel):
    """Organization-wide storage figures plus the requested workspace's row."""

    organization_id: str = Field(..., description="Organization ID")
    effective_bytes: int = Field(..., description="Used plus reserved bytes across all workspaces")
    used_bytes: int = Field(..., description="Used bytes across all workspaces")
    limit_bytes: Optional[int] = Field(None, description="Plan limit, null for unlimited")
    workspace: Optional[WorkspaceUsageResponse] = Field(None, description="Ledger row of this workspace")

    @classmethod
    def from_report(cls, report: UsageReport) -> "StorageUsageResponse":
        return cls(
            organization_id=str(report.organization_id),
            effective_bytes=report.effective_bytes,
            used_bytes=report.used_bytes,
            limit_bytes=report.limit_bytes,
            workspace=WorkspaceUsageResponse.from_entity(report.workspace) if report.workspace else None,
        )


class MaintenanceRunResponse(BaseModel):
    """Result of a purge or stale-pending sweep."""

    operation: str
    processed: int


class LedgerDriftResponse(BaseModel):
    workspace_id: str
    ledger_used_bytes: int
    ledger_reserved_bytes: int
    actual_used_bytes: int
    actual_reserved_bytes: int
    used_delta: int
    reserved_delta: int

    @classmethod
    def from_entity(cls, drift: LedgerDrift) -> "LedgerDriftResponse":
        return cls(
            workspace_id=str(drift.workspace_id),
            ledger_used_bytes=drift.ledger_used_bytes,
            ledger_reserved_bytes=drift.ledger_reserved_bytes,
            actual_used_bytes=drift.actual_used_bytes,
            actual_reserved_bytes=drift.actual_reserved_bytes,
            used_delta=drift.used_delta,
            reserved_delta=drift.reserved_delta,
        )


class ReconcileResponse(BaseModel):
    organization_id: str
    drifts: List[LedgerDriftResponse] = Field(default_factory=list)
    in_sync: bool = True
