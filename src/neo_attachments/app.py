"""Neo Attachments API application.

``create_app`` wires the attachment routers to asyncpg repositories, the S3
gateway and the supplied access guard, entitlement lookup and audit sink.
Collaborators that are not supplied fall back to configuration-driven
defaults suitable for development.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .__version__ import __version__
from .api.exception_handlers import register_exception_handlers
from .config.settings import AttachmentSettings, get_settings
from .database.connection import DatabaseManager
from .features.attachments.adapters import (
    LoggingAuditSink,
    PermissiveAccessGuard,
    S3StorageGateway,
    StaticEntitlementLookup,
)
from .features.attachments.entities.protocols import (
    AccessControlGuard,
    AuditSink,
    EntitlementLookup,
    ObjectStorageGateway,
)
from .features.attachments.repositories import (
    AttachmentDatabaseRepository,
    AttachmentSchemaManager,
    StorageUsageDatabaseRepository,
)
from .features.attachments.routers import (
    attachment_admin_router,
    attachment_router,
    get_attachment_service,
    get_retention_service,
)
from .features.attachments.services import create_attachment_service

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[AttachmentSettings] = None,
    access_guard: Optional[AccessControlGuard] = None,
    entitlements: Optional[EntitlementLookup] = None,
    audit_sink: Optional[AuditSink] = None,
    storage_gateway: Optional[ObjectStorageGateway] = None,
    database: Optional[DatabaseManager] = None,
) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or DatabaseManager(
            settings.database_url,
            application_name=settings.app_name,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
        await db.create_pool()
        if settings.attachments_auto_create_tables:
            await AttachmentSchemaManager(db, settings.attachments_db_schema).ensure_schema()

        attachment_repository = AttachmentDatabaseRepository(db, settings.attachments_db_schema)
        usage_repository = StorageUsageDatabaseRepository(db, settings.attachments_db_schema)
        service = create_attachment_service(
            attachment_repository=attachment_repository,
            usage_repository=usage_repository,
            storage_gateway=storage_gateway or S3StorageGateway.from_settings(settings),
            access_guard=access_guard or PermissiveAccessGuard(settings.attachments_dev_workspace_role),
            entitlements=entitlements or StaticEntitlementLookup.from_settings(settings),
            audit_sink=audit_sink or LoggingAuditSink(),
            settings=settings,
        )

        app.state.database = db
        app.dependency_overrides[get_attachment_service] = lambda: service
        app.dependency_overrides[get_retention_service] = lambda: service.retention
        logger.info(f"{settings.app_name} {__version__} started ({settings.environment})")

        yield

        await db.close_pool()
        logger.info(f"{settings.app_name} stopped")

    app = FastAPI(
        title="Neo Attachments API",
        version=__version__,
        lifespan=lifespan,
    )
    register_exception_handlers(app, is_production=settings.is_production)
    app.include_router(attachment_router)
    app.include_router(attachment_admin_router)

    @app.get("/health", tags=["Health"])
    async def health():
        db = getattr(app.state, "database", None)
        healthy = bool(db) and await db.health_check()
        return {"status": "healthy" if healthy else "degraded", "version": __version__}

    return app
