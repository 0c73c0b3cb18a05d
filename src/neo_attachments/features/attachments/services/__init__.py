"""Attachment services."""

from .attachment_service import (
    AttachmentService,
    AttachmentServiceConfig,
    DownloadLink,
    PresignResult,
    create_attachment_service,
)
from .quota_service import QuotaDecision, QuotaService
from .retention_service import RetentionService

__all__ = [
    "AttachmentService",
    "AttachmentServiceConfig",
    "DownloadLink",
    "PresignResult",
    "create_attachment_service",
    "QuotaDecision",
    "QuotaService",
    "RetentionService",
]
