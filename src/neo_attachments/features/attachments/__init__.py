"""Attachments feature package.

Attachment storage lifecycle and per-organization quota accounting:
signed-URL uploads and downloads, retention windows, a background purge
engine and an atomic storage usage ledger.
"""

from .entities import (
    AccessControlGuard,
    ActorContext,
    Attachment,
    AttachmentRepository,
    AuditEvent,
    AuditSink,
    EntitlementLookup,
    LedgerDrift,
    ObjectStorageGateway,
    StorageUsage,
    StorageUsageRepository,
    UsageReport,
)
from .repositories import (
    AttachmentDatabaseRepository,
    AttachmentSchemaManager,
    StorageUsageDatabaseRepository,
)
from .services import (
    AttachmentService,
    AttachmentServiceConfig,
    DownloadLink,
    PresignResult,
    QuotaDecision,
    QuotaService,
    RetentionService,
    create_attachment_service,
)
from .adapters import LoggingAuditSink, PermissiveAccessGuard, S3StorageGateway, StaticEntitlementLookup
from .utils import sanitize_file_name, validate_extension
from .routers import (
    attachment_admin_router,
    attachment_router,
    get_attachment_service,
    get_current_actor,
    get_retention_service,
)

__all__ = [
    # Entities
    "AccessControlGuard",
    "ActorContext",
    "Attachment",
    "AttachmentRepository",
    "AuditEvent",
    "AuditSink",
    "EntitlementLookup",
    "LedgerDrift",
    "ObjectStorageGateway",
    "StorageUsage",
    "StorageUsageRepository",
    "UsageReport",

    # Repositories
    "AttachmentDatabaseRepository",
    "AttachmentSchemaManager",
    "StorageUsageDatabaseRepository",

    # Services
    "AttachmentService",
    "AttachmentServiceConfig",
    "DownloadLink",
    "PresignResult",
    "QuotaDecision",
    "QuotaService",
    "RetentionService",
    "create_attachment_service",

    # Adapters
    "LoggingAuditSink",
    "PermissiveAccessGuard",
    "StaticEntitlementLookup",
    "S3StorageGateway",

    # Utils
    "sanitize_file_name",
    "validate_extension",

    # Routers
    "attachment_admin_router",
    "attachment_router",
    "get_attachment_service",
    "get_current_actor",
    "get_retention_service",
]
