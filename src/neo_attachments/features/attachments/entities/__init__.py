"""Attachment domain entities and collaborator protocols."""

from .actor import ActorContext
from .attachment import Attachment, compute_expiry
from .audit_event import AuditEvent
from .storage_usage import LedgerDrift, StorageUsage, UsageReport
from .protocols import (
    AccessControlGuard,
    AttachmentRepository,
    AuditSink,
    EntitlementLookup,
    ObjectStorageGateway,
    StorageUsageRepository,
)

__all__ = [
    "ActorContext",
    "Attachment",
    "compute_expiry",
    "AuditEvent",
    "LedgerDrift",
    "StorageUsage",
    "UsageReport",
    "AccessControlGuard",
    "AttachmentRepository",
    "AuditSink",
    "EntitlementLookup",
    "ObjectStorageGateway",
    "StorageUsageRepository",
]
