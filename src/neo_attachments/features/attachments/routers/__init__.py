"""FastAPI routers for the attachments feature."""

from .admin_router import router as attachment_admin_router
from .attachment_router import router as attachment_router, to_http_exception
from .dependencies import (
    get_attachment_service,
    get_current_actor,
    get_retention_service,
    require_platform_admin,
)

__all__ = [
    "attachment_admin_router",
    "attachment_router",
    "to_http_exception",
    "get_attachment_service",
    "get_current_actor",
    "get_retention_service",
    "require_platform_admin",
]
