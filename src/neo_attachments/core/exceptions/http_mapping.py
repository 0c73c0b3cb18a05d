"""HTTP status code mapping for neo-attachments exceptions."""

from typing import Dict, Type

from .base import NeoAttachmentsError
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


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,
    InvalidStateError: 400,

    # 403 Forbidden
    AuthorizationError: 403,
    QuotaExceededError: 403,

    # 404 Not Found
    NotFoundError: 404,

    # 410 Gone
    GoneError: 410,

    # 500 Internal Server Error
    DatabaseError: 500,
    NeoAttachmentsError: 500,

    # 502 Bad Gateway
    StorageBackendError: 502,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception, walking its class hierarchy.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code, 500 for anything unmapped
    """
    for exception_type in type(exception).__mro__:
        if exception_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exception_type]
        if exception_type is Exception:
            break
    return 500
