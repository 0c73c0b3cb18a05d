"""Base exception for neo-attachments.

Every error raised by the library carries a machine-readable error code and a
details mapping so API layers can render a consistent error envelope.
"""

from typing import Any, Dict, Optional


class NeoAttachmentsError(Exception):
    """Base exception for all neo-attachments errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: NeoAttachmentsError) -> Dict[str, Any]:
    """Create standardized error response from exception."""
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
