"""Exception hierarchy for neo-attachments."""

from .base import NeoAttachmentsError, create_error_response
from .domain import (
    AuthorizationError,
    DatabaseError,
    GoneError,
    InvalidStateError,
    NotFoundError,
    QuotaExceededError,
    StorageBackendError,
    ValidationError,
)
from .http_mapping import HTTP_STATUS_MAP, get_http_status_code

__all__ = [
    "NeoAttachmentsError",
    "create_error_response",
    "AuthorizationError",
    "DatabaseError",
    "GoneError",
    "InvalidStateError",
    "NotFoundError",
    "QuotaExceededError",
    "StorageBackendError",
    "ValidationError",
    "HTTP_STATUS_MAP",
    "get_http_status_code",
]
