"""Pydantic models for the attachments API."""

from .requests import CompleteUploadRequest, PresignUploadRequest, UpdateRetentionRequest
from .responses import (
    AttachmentListResponse,
    AttachmentResponse,
    DownloadUrlResponse,
    LedgerDriftResponse,
    MaintenanceRunResponse,
    PresignUploadResponse,
    ReconcileResponse,
    StorageUsageResponse,
    WorkspaceUsageResponse,
)

__all__ = [
    "CompleteUploadRequest",
    "PresignUploadRequest",
    "UpdateRetentionRequest",
    "AttachmentListResponse",
    "AttachmentResponse",
    "DownloadUrlResponse",
    "LedgerDriftResponse",
    "MaintenanceRunResponse",
    "PresignUploadResponse",
    "ReconcileResponse",
    "StorageUsageResponse",
    "WorkspaceUsageResponse",
]
