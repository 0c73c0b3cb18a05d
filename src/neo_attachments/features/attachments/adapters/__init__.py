"""Adapters for external collaborators of the attachments feature."""

from .logging_audit_sink import LoggingAuditSink
from .s3_storage_gateway import S3StorageGateway, content_disposition
from .static_policies import PermissiveAccessGuard, StaticEntitlementLookup

__all__ = [
    "LoggingAuditSink",
    "S3StorageGateway",
    "content_disposition",
    "PermissiveAccessGuard",
    "StaticEntitlementLookup",
]
