"""Attachment repositories."""

from .attachment_repository import AttachmentDatabaseRepository
from .schema import AttachmentSchemaManager
from .storage_usage_repository import StorageUsageDatabaseRepository

__all__ = [
    "AttachmentDatabaseRepository",
    "AttachmentSchemaManager",
    "StorageUsageDatabaseRepository",
]
