"""Configuration for neo-attachments."""

from .constants import (
    AttachmentStatus,
    AuditAction,
    EntitlementKey,
)
from .logging_config import LoggingConfig, get_logger
from .settings import AttachmentSettings, get_settings

__all__ = [
    "AttachmentStatus",
    "AuditAction",
    "EntitlementKey",
    "LoggingConfig",
    "get_logger",
    "AttachmentSettings",
    "get_settings",
]
