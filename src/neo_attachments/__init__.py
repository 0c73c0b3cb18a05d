"""Neo-Attachments - attachment storage and quota accounting for NeoMultiTenant services.

Provides the attachment lifecycle (signed-URL upload, completion, download,
retention, deletion), a per-workspace storage usage ledger and the retention
purge engine, with FastAPI routers ready to include in a service.
"""

from .__version__ import __version__
from .core.exceptions import (
    AuthorizationError,
    DatabaseError,
    GoneError,
    InvalidStateError,
    NeoAttachmentsError,
    NotFoundError,
    QuotaExceededError,
    StorageBackendError,
    ValidationError,
)

__all__ = [
    "__version__",
    "AuthorizationError",
    "DatabaseError",
    "GoneError",
    "InvalidStateError",
    "NeoAttachmentsError",
    "NotFoundError",
    "QuotaExceededError",
    "StorageBackendError",
    "ValidationError",
]
