"""Attachment service orchestrator.

Coordinates authorization, quota accounting, persistence, signed URL issuance
and auditing for the attachment lifecycle:

    presign -> pending -> complete -> uploaded -> delete/purge -> deleted

File bytes never pass through this service; clients upload and download
directly against the object store with short-lived signed URLs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, FrozenSet, List, Optional
from uuid import UUID, uuid4

from ....config.constants import (
    AttachmentStatus,
    AuditAction,
    DEFAULT_MAX_BYTES,
    DEFAULT_MIME_TYPE,
    EntitlementKey,
    MAX_RETENTION_DAYS,
    MIN_RETENTION_DAYS,
    PRESIGN_GET_TTL_SECONDS,
    PRESIGN_PUT_TTL_SECONDS,
)
from ....core.exceptions import (
    AuthorizationError,
    GoneError,
    InvalidStateError,
    NotFoundError,
    StorageBackendError,
)
from ....utils.datetime import utc_now
from ..entities.actor import ActorContext
from ..entities.attachment import Attachment
from ..entities.audit_event import AuditEvent
from ..entities.storage_usage import UsageReport
from ..entities.protocols import (
    AccessControlGuard,
    AttachmentRepository,
    AuditSink,
    EntitlementLookup,
    ObjectStorageGateway,
)
from ..utils.error_handling import log_suppressed_failure, record_audit_safely
from ..utils.filenames import sanitize_file_name, validate_extension
from ..utils.validation import AttachmentValidationRules
from .quota_service import QuotaService
from .retention_service import RetentionService

logger = logging.getLogger(__name__)

API_SOURCE = "api"


@dataclass
class AttachmentServiceConfig:
    """Tunables for the attachment service."""

    max_bytes: int = DEFAULT_MAX_BYTES
    put_url_ttl_seconds: int = PRESIGN_PUT_TTL_SECONDS
    get_url_ttl_seconds: int = PRESIGN_GET_TTL_SECONDS
    elevated_roles: FrozenSet[str] = field(default_factory=lambda: frozenset({"owner", "admin"}))


@dataclass(frozen=True)
class PresignResult:
    attachment: Attachment
    upload_url: str
    expires_in: int
    storage_warning: bool = False


@dataclass(frozen=True)
class DownloadLink:
    attachment: Attachment
    download_url: str
    expires_in: int


class AttachmentService:
    """Facade over the attachment lifecycle."""

    def __init__(
        self,
        attachment_repository: AttachmentRepository,
        quota_service: QuotaService,
        storage_gateway: ObjectStorageGateway,
        access_guard: AccessControlGuard,
        entitlements: EntitlementLookup,
        audit_sink: Optional[AuditSink] = None,
        retention_service: Optional[RetentionService] = None,
        config: Optional[AttachmentServiceConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize with injected dependencies.

        Args:
            attachment_repository: Persistence for attachment records
            quota_service: Plan limit checks and ledger bookkeeping
            storage_gateway: Object store URL signing and deletion
            access_guard: Workspace read/write/role decisions
            entitlements: Plan entitlement lookup
            audit_sink: Optional receiver of audit events
            retention_service: Shared soft-delete path (built from the other collaborators if omitted)
            config: Upload and URL settings
            clock: Source of the current UTC time
        """
        self._repository = attachment_repository
        self._quota = quota_service
        self._storage = storage_gateway
        self._guard = access_guard
        self._entitlements = entitlements
        self._audit = audit_sink
        self._config = config or AttachmentServiceConfig()
        self._clock = clock
        self._retention = retention_service or RetentionService(
            attachment_repository=attachment_repository,
            quota_service=quota_service,
            storage_gateway=storage_gateway,
            audit_sink=audit_sink,
            clock=clock,
        )

    @property
    def retention(self) -> RetentionService:
        return self._retention

    # ===========================================
    # Upload
    # ===========================================

    async def create_presign(
        self,
        actor: ActorContext,
        workspace_id: UUID,
        parent_type: str,
        parent_id: str,
        file_name: str,
        size_bytes: int,
        mime_type: Optional[str] = None,
    ) -> PresignResult:
        """Reserve quota, create a pending record and issue a signed PUT URL."""
        parent_type = AttachmentValidationRules.normalize_parent_type(parent_type)
        parent_id = AttachmentValidationRules.normalize_parent_id(parent_id)
        await self._guard.require_write(workspace_id, actor.user_id, parent_type=parent_type, parent_id=parent_id)

        AttachmentValidationRules.validate_size(size_bytes, self._config.max_bytes)
        safe_name = sanitize_file_name(file_name)
        validate_extension(safe_name)

        decision = await self._quota.check_and_reserve(actor.organization_id, workspace_id, size_bytes)

        attachment_id = uuid4()
        now = self._clock()
        attachment = Attachment(
            id=attachment_id,
            organization_id=actor.organization_id,
            workspace_id=workspace_id,
            uploader_user_id=actor.user_id,
            parent_type=parent_type,
            parent_id=parent_id,
            file_name=safe_name,
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            size_bytes=size_bytes,
            storage_provider=self._storage.provider,
            bucket=self._storage.bucket,
            storage_key=self.build_storage_key(
                actor.organization_id, workspace_id, parent_type, parent_id, attachment_id, safe_name
            ),
            status=AttachmentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        try:
            attachment = await self._repository.create(attachment)
        except Exception:
            await self._quota.release(actor.organization_id, workspace_id, size_bytes)
            raise

        try:
            upload_url = await self._storage.signed_put_url(
                attachment.storage_key, attachment.mime_type, size_bytes, self._config.put_url_ttl_seconds
            )
        except Exception as e:
            logger.error(f"Failed to sign upload URL for attachment {attachment.id}: {e}")
            await self._abandon(attachment, actor)
            if isinstance(e, StorageBackendError):
                raise
            raise StorageBackendError(f"Could not issue upload URL: {e}", operation="signed_put_url") from e

        await record_audit_safely(
            self._audit,
            self._event(actor, attachment, AuditAction.PRESIGN_CREATE, {
                "source": API_SOURCE,
                "file_name": attachment.file_name,
                "size_bytes": size_bytes,
                "parent_type": parent_type,
                "parent_id": parent_id,
            }),
        )

        if decision.approaching_limit:
            logger.info(
                f"Organization {actor.organization_id} approaching storage limit: "
                f"{decision.projected_bytes}/{decision.limit_bytes}"
            )

        return PresignResult(
            attachment=attachment,
            upload_url=upload_url,
            expires_in=self._config.put_url_ttl_seconds,
            storage_warning=decision.approaching_limit,
        )

    async def complete_upload(
        self,
        actor: ActorContext,
        workspace_id: UUID,
        attachment_id: UUID,
        checksum_sha256: Optional[str] = None,
    ) -> Attachment:
        """Mark a pending upload as uploaded and move its bytes from reserved to used."""
        attachment = await self._get_or_fail(actor, workspace_id, attachment_id)
        await self._guard.require_write(
            workspace_id, actor.user_id, parent_type=attachment.parent_type, parent_id=attachment.parent_id
        )
        if not attachment.is_pending:
            raise InvalidStateError(
                f"Attachment {attachment_id} is not pending", current_state=attachment.status.value
            )

        checksum = AttachmentValidationRules.normalize_checksum(checksum_sha256)
        uploaded_at = self._clock()
        retention_days = await self._retention_entitlement(actor.organization_id)
        expires_at = self._retention.compute_expiry(uploaded_at, retention_days)

        uploaded = await self._repository.mark_uploaded(
            attachment.id, uploaded_at, checksum, retention_days, expires_at
        )
        if uploaded is None:
            raise InvalidStateError(f"Attachment {attachment_id} was completed concurrently")

        await self._quota.promote(attachment.organization_id, attachment.workspace_id, attachment.size_bytes)

        await record_audit_safely(
            self._audit,
            self._event(actor, uploaded, AuditAction.UPLOAD_COMPLETE, {
                "source": API_SOURCE,
                "size_bytes": uploaded.size_bytes,
                "retention_days": retention_days,
            }),
        )
        logger.info(f"Attachment {attachment_id} upload completed")
        return uploaded

    # ===========================================
    # Read
    # ===========================================

    async def list_for_parent(
        self, actor: ActorContext, workspace_id: UUID, parent_type: str, parent_id: str
    ) -> List[Attachment]:
        """Uploaded attachments of a parent record, newest first."""
        parent_type = AttachmentValidationRules.normalize_parent_type(parent_type)
        parent_id = AttachmentValidationRules.normalize_parent_id(parent_id)
        await self._guard.require_read(workspace_id, actor.user_id, parent_type=parent_type, parent_id=parent_id)
        return await self._repository.list_for_parent(actor.organization_id, workspace_id, parent_type, parent_id)

    async def usage_report(self, actor: ActorContext, workspace_id: UUID) -> UsageReport:
        await self._guard.require_read(workspace_id, actor.user_id)
        return await self._quota.usage_report(actor.organization_id, workspace_id)

    async def get_download_url(
        self, actor: ActorContext, workspace_id: UUID, attachment_id: UUID
    ) -> DownloadLink:
        """Issue a short-lived signed GET URL for an uploaded, unexpired attachment."""
        attachment = await self._get_or_fail(actor, workspace_id, attachment_id)
        if attachment.is_pending:
            raise NotFoundError("Attachment", attachment_id, message="Attachment upload not yet completed")
        if not attachment.is_uploaded:
            raise NotFoundError("Attachment", attachment_id)

        now = self._clock()
        if attachment.is_expired(now):
            raise GoneError(expires_at=attachment.expires_at)

        await self._guard.require_read(
            workspace_id, actor.user_id, parent_type=attachment.parent_type, parent_id=attachment.parent_id
        )

        try:
            url = await self._storage.signed_get_url(
                attachment.storage_key, attachment.file_name, self._config.get_url_ttl_seconds, True
            )
        except StorageBackendError:
            raise
        except Exception as e:
            raise StorageBackendError(f"Could not issue download URL: {e}", operation="signed_get_url") from e

        try:
            await self._repository.touch_last_downloaded(attachment.id, now)
            attachment.last_downloaded_at = now
        except Exception as e:
            log_suppressed_failure("LAST_DOWNLOADED_UPDATE_FAILED", e, {"attachment_id": attachment.id}, log=logger)

        await record_audit_safely(
            self._audit,
            self._event(actor, attachment, AuditAction.DOWNLOAD_LINK, {"source": API_SOURCE}),
        )
        return DownloadLink(
            attachment=attachment, download_url=url, expires_in=self._config.get_url_ttl_seconds
        )

    # ===========================================
    # Update / Delete
    # ===========================================

    async def update_retention(
        self,
        actor: ActorContext,
        workspace_id: UUID,
        attachment_id: UUID,
        retention_days: Optional[int],
    ) -> Attachment:
        """Change the retention window; expiry is recomputed from the original upload time."""
        attachment = await self._get_or_fail(actor, workspace_id, attachment_id)
        role = await self._guard.role_of(workspace_id, actor.user_id)
        if (role or "").lower() not in self._config.elevated_roles:
            raise AuthorizationError("Changing retention requires a workspace owner or admin")
        if not attachment.is_uploaded:
            raise InvalidStateError(
                "Retention can only be changed on uploaded attachments", current_state=attachment.status.value
            )

        retention_days = self._retention.validate_retention_days(retention_days)
        expires_at = self._retention.compute_expiry(attachment.uploaded_at, retention_days)

        updated = await self._repository.update_retention(attachment.id, retention_days, expires_at)
        if updated is None:
            raise InvalidStateError(f"Attachment {attachment_id} is no longer uploaded")

        await record_audit_safely(
            self._audit,
            self._event(actor, updated, AuditAction.UPDATE, {
                "source": API_SOURCE,
                "old_retention_days": attachment.retention_days,
                "new_retention_days": retention_days,
                "old_expires_at": attachment.expires_at.isoformat() if attachment.expires_at else None,
                "new_expires_at": expires_at.isoformat() if expires_at else None,
            }, role=role),
        )
        return updated

    async def delete(self, actor: ActorContext, workspace_id: UUID, attachment_id: UUID) -> Attachment:
        """Soft-delete an attachment and settle its ledger bytes."""
        attachment = await self._get_or_fail(actor, workspace_id, attachment_id)
        await self._guard.require_write(
            workspace_id, actor.user_id, parent_type=attachment.parent_type, parent_id=attachment.parent_id
        )
        deleted = await self._retention.soft_delete(
            attachment,
            actor_user_id=actor.user_id,
            actor_role=actor.platform_role,
            source=API_SOURCE,
            deleted_by_owner=attachment.uploader_user_id == actor.user_id,
        )
        logger.info(f"Attachment {attachment_id} deleted by {actor.user_id}")
        return deleted

    # ===========================================
    # Helpers
    # ===========================================

    @staticmethod
    def build_storage_key(
        organization_id: UUID,
        workspace_id: UUID,
        parent_type: str,
        parent_id: str,
        attachment_id: UUID,
        safe_name: str,
    ) -> str:
        """Server-generated object key; only the sanitized name comes from the client."""
        return f"{organization_id}/{workspace_id}/{parent_type}/{parent_id}/{attachment_id}-{safe_name}"

    async def _get_or_fail(self, actor: ActorContext, workspace_id: UUID, attachment_id: UUID) -> Attachment:
        attachment = await self._repository.get_active(attachment_id, actor.organization_id, workspace_id)
        if attachment is None or attachment.is_deleted:
            raise NotFoundError("Attachment", attachment_id)
        return attachment

    async def _retention_entitlement(self, organization_id: UUID) -> Optional[int]:
        value = await self._entitlements.limit_for(organization_id, EntitlementKey.ATTACHMENT_RETENTION_DAYS.value)
        if value is None:
            return None
        # Plan data outside the allowed window is clamped rather than rejected
        return min(max(int(value), MIN_RETENTION_DAYS), MAX_RETENTION_DAYS)

    async def _abandon(self, attachment: Attachment, actor: ActorContext) -> None:
        try:
            await self._retention.soft_delete(
                attachment,
                actor_user_id=actor.user_id,
                actor_role=actor.platform_role,
                source=API_SOURCE,
                deleted_by_owner=True,
            )
        except Exception as e:
            log_suppressed_failure("PRESIGN_ROLLBACK_FAILED", e, {"attachment_id": attachment.id}, log=logger)

    def _event(
        self,
        actor: ActorContext,
        attachment: Attachment,
        action: AuditAction,
        metadata: dict,
        role: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            organization_id=attachment.organization_id,
            workspace_id=attachment.workspace_id,
            actor_user_id=actor.user_id,
            actor_role=role or actor.platform_role,
            action=action,
            entity_id=attachment.id,
            metadata=metadata,
        )


def create_attachment_service(
    attachment_repository: AttachmentRepository,
    usage_repository,
    storage_gateway: ObjectStorageGateway,
    access_guard: AccessControlGuard,
    entitlements: EntitlementLookup,
    audit_sink: Optional[AuditSink] = None,
    settings=None,
) -> AttachmentService:
    """Wire an AttachmentService and its quota and retention services from settings."""
    from ....config.settings import get_settings

    settings = settings or get_settings()
    quota_service = QuotaService(
        usage_repository, entitlements, warning_threshold=settings.storage_warning_threshold
    )
    retention_service = RetentionService(
        attachment_repository=attachment_repository,
        quota_service=quota_service,
        storage_gateway=storage_gateway,
        audit_sink=audit_sink,
        usage_repository=usage_repository,
    )
    config = AttachmentServiceConfig(
        max_bytes=settings.attachments_max_bytes,
        put_url_ttl_seconds=settings.presign_put_ttl_seconds,
        get_url_ttl_seconds=settings.presign_get_ttl_seconds,
        elevated_roles=frozenset(settings.attachments_elevated_roles),
    )
    return AttachmentService(
        attachment_repository=attachment_repository,
        quota_service=quota_service,
        storage_gateway=storage_gateway,
        access_guard=access_guard,
        entitlements=entitlements,
        audit_sink=audit_sink,
        retention_service=retention_service,
        config=config,
    )
