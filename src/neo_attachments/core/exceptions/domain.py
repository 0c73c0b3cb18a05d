"""Domain exceptions for attachment storage and quota accounting."""

from datetime import datetime
from typing import Any, Dict, Optional

from .base import NeoAttachmentsError


class ValidationError(NeoAttachmentsError):
    """Raised when request input violates an upload or retention rule."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if field:
            details["field"] = field
        super().__init__(message, error_code=kwargs.pop("error_code", "VALIDATION_ERROR"), details=details)
        self.field = field


class InvalidStateError(NeoAttachmentsError):
    """Raised when an operation is not allowed in the record's current state."""

    def __init__(self, message: str, current_state: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if current_state:
            details["current_state"] = current_state
        super().__init__(message, error_code="INVALID_STATE", details=details)
        self.current_state = current_state


class AuthorizationError(NeoAttachmentsError):
    """Raised when the caller lacks permission for an operation."""

    def __init__(self, message: str = "Not authorized", **kwargs):
        super().__init__(message, error_code=kwargs.pop("error_code", "FORBIDDEN"), details=kwargs.pop("details", None))


class NotFoundError(NeoAttachmentsError):
    """Raised when an attachment does not exist or is not visible."""

    def __init__(self, resource: str, identifier: Any = None, message: Optional[str] = None):
        text = message or (f"{resource} not found: {identifier}" if identifier is not None else f"{resource} not found")
        super().__init__(
            text,
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": str(identifier) if identifier is not None else None},
        )
        self.resource = resource
        self.identifier = identifier


class GoneError(NeoAttachmentsError):
    """Raised when an attachment has passed its retention window."""

    def __init__(self, message: str = "Attachment has expired", expires_at: Optional[datetime] = None):
        details: Dict[str, Any] = {}
        if expires_at is not None:
            details["expires_at"] = expires_at.isoformat()
        super().__init__(message, error_code="ATTACHMENT_EXPIRED", details=details)
        self.expires_at = expires_at


class QuotaExceededError(NeoAttachmentsError):
    """Raised when an upload would push an organization over its storage limit."""

    def __init__(self, used_bytes: int, limit_bytes: int, requested_bytes: int):
        super().__init__(
            "Workspace storage limit exceeded",
            error_code="STORAGE_LIMIT_EXCEEDED",
            details={
                "used_bytes": used_bytes,
                "limit_bytes": limit_bytes,
                "requested_bytes": requested_bytes,
            },
        )
        self.used_bytes = used_bytes
        self.limit_bytes = limit_bytes
        self.requested_bytes = requested_bytes


class StorageBackendError(NeoAttachmentsError):
    """Raised when the object-storage gateway cannot fulfil a request."""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, error_code="STORAGE_BACKEND_ERROR", details=details)


class DatabaseError(NeoAttachmentsError):
    """Raised when a persistence operation fails unexpectedly."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="DATABASE_ERROR", details=kwargs.pop("details", None))
