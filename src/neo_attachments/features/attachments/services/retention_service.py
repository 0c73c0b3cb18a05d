"""Retention, purge and ledger maintenance for attachments.

Owns the single soft-delete path used by user deletes, the expiry purge and
the stale-pending sweep. A soft delete is a conditional update on the
record's prior status; only the caller whose update matched adjusts the
ledger, so concurrent purge runs never double-decrement.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from uuid import UUID

from ....config.constants import (
    AttachmentStatus,
    AuditAction,
    DEFAULT_PURGE_LIMIT,
    DEFAULT_STALE_PENDING_SECONDS,
    SYSTEM_ACTOR_ROLE,
    SYSTEM_AUDIT_SOURCE,
    SYSTEM_USER_ID,
)
from ....core.exceptions import InvalidStateError
from ....utils.datetime import utc_now
from ..entities.attachment import Attachment, compute_expiry
from ..entities.audit_event import AuditEvent
from ..entities.protocols import (
    AttachmentRepository,
    AuditSink,
    ObjectStorageGateway,
    StorageUsageRepository,
)
from ..entities.storage_usage import LedgerDrift
from ..utils.error_handling import log_suppressed_failure, record_audit_safely
from ..utils.validation import AttachmentValidationRules
from .quota_service import QuotaService

logger = logging.getLogger(__name__)


class RetentionService:
    """Expiry computation, purge engine and maintenance sweeps."""

    def __init__(
        self,
        attachment_repository: AttachmentRepository,
        quota_service: QuotaService,
        storage_gateway: ObjectStorageGateway,
        audit_sink: Optional[AuditSink] = None,
        usage_repository: Optional[StorageUsageRepository] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._repository = attachment_repository
        self._quota = quota_service
        self._storage = storage_gateway
        self._audit = audit_sink
        self._usage = usage_repository
        self._clock = clock

    @staticmethod
    def compute_expiry(uploaded_at: datetime, retention_days: Optional[int]) -> Optional[datetime]:
        return compute_expiry(uploaded_at, retention_days)

    @staticmethod
    def validate_retention_days(retention_days: Optional[int]) -> Optional[int]:
        return AttachmentValidationRules.validate_retention_days(retention_days)

    async def soft_delete(
        self,
        attachment: Attachment,
        *,
        actor_user_id: UUID,
        actor_role: Optional[str],
        source: str,
        deleted_by_owner: bool = False,
        expired_before: Optional[datetime] = None,
    ) -> Attachment:
        """Move an attachment to ``deleted`` and settle its bytes.

        With ``expired_before`` the record must also still have expired before
        that time when the update runs.

        Raises:
            InvalidStateError: the record is already deleted, changed state or is no longer expired
        """
        previous_status = attachment.status
        if previous_status == AttachmentStatus.DELETED:
            raise InvalidStateError("Attachment is already deleted", current_state=previous_status.value)

        deleted = await self._repository.mark_deleted(
            attachment.id, previous_status, self._clock(), expired_before=expired_before
        )
        if deleted is None:
            raise InvalidStateError(
                f"Attachment {attachment.id} is no longer {previous_status.value}",
                current_state=previous_status.value,
            )

        if previous_status == AttachmentStatus.PENDING:
            await self._quota.release(attachment.organization_id, attachment.workspace_id, attachment.size_bytes)
        else:
            await self._quota.decrement_used(attachment.organization_id, attachment.workspace_id, attachment.size_bytes)

        try:
            await self._storage.delete_object(attachment.storage_key)
        except Exception as e:
            log_suppressed_failure(
                "STORAGE_DELETE_FAILED",
                e,
                {"attachment_id": attachment.id, "storage_key": attachment.storage_key},
                log=logger,
            )

        await record_audit_safely(
            self._audit,
            AuditEvent(
                organization_id=attachment.organization_id,
                workspace_id=attachment.workspace_id,
                actor_user_id=actor_user_id,
                actor_role=actor_role,
                action=AuditAction.DELETE,
                entity_id=attachment.id,
                metadata={
                    "source": source,
                    "previous_status": previous_status.value,
                    "deleted_by_owner": deleted_by_owner,
                    "size_bytes": attachment.size_bytes,
                },
            ),
        )
        return deleted

    async def purge_expired(self, limit: int = DEFAULT_PURGE_LIMIT) -> int:
        """Soft-delete up to ``limit`` expired attachments, soonest-expired first.

        Per-item failures are logged and skipped.

        Returns:
            Number of attachments purged by this call
        """
        now = self._clock()
        expired = await self._repository.list_expired(now, limit)
        purged = 0
        for attachment in expired:
            try:
                await self.soft_delete(
                    attachment,
                    actor_user_id=SYSTEM_USER_ID,
                    actor_role=SYSTEM_ACTOR_ROLE,
                    source=SYSTEM_AUDIT_SOURCE,
                    expired_before=now,
                )
                purged += 1
            except InvalidStateError:
                logger.info(f"Attachment {attachment.id} already purged or no longer expired")
            except Exception as e:
                log_suppressed_failure("ATTACHMENT_PURGE_FAILED", e, {"attachment_id": attachment.id}, log=logger)

        if expired:
            logger.info(f"Purged {purged} of {len(expired)} expired attachments")
        return purged

    async def release_stale_pending(
        self,
        older_than: Optional[timedelta] = None,
        limit: int = DEFAULT_PURGE_LIMIT,
    ) -> int:
        """Delete pending uploads that were never completed and free their reservations."""
        older_than = older_than or timedelta(seconds=DEFAULT_STALE_PENDING_SECONDS)
        stale = await self._repository.list_stale_pending(self._clock() - older_than, limit)
        released = 0
        for attachment in stale:
            try:
                await self.soft_delete(
                    attachment,
                    actor_user_id=SYSTEM_USER_ID,
                    actor_role=SYSTEM_ACTOR_ROLE,
                    source=SYSTEM_AUDIT_SOURCE,
                )
                released += 1
            except InvalidStateError:
                logger.info(f"Pending attachment {attachment.id} changed state before release")
            except Exception as e:
                log_suppressed_failure("STALE_PENDING_RELEASE_FAILED", e, {"attachment_id": attachment.id}, log=logger)

        if stale:
            logger.info(f"Released {released} stale pending attachments")
        return released

    async def reconcile_ledger(self, organization_id: UUID) -> List[LedgerDrift]:
        """Compare ledger rows against attachment totals. Never writes the ledger.

        Returns:
            Drift entries for every workspace whose counters disagree
        """
        if self._usage is None:
            raise RuntimeError("reconcile_ledger requires a storage usage repository")

        ledger = {row.workspace_id: row for row in await self._usage.list_for_organization(organization_id)}
        actual = await self._repository.sum_bytes_by_workspace(organization_id)

        drifts: List[LedgerDrift] = []
        for workspace_id in sorted(set(ledger) | set(actual), key=str):
            row = ledger.get(workspace_id)
            uploaded, pending = actual.get(workspace_id, (0, 0))
            drift = LedgerDrift(
                organization_id=organization_id,
                workspace_id=workspace_id,
                ledger_used_bytes=row.used_bytes if row else 0,
                ledger_reserved_bytes=row.reserved_bytes if row else 0,
                actual_used_bytes=uploaded,
                actual_reserved_bytes=pending,
            )
            if drift.has_drift:
                logger.warning(
                    f"STORAGE_LEDGER_DRIFT: workspace {workspace_id} "
                    f"used {drift.used_delta:+d} reserved {drift.reserved_delta:+d}",
                    extra={"context": "STORAGE_LEDGER_DRIFT", **{k: str(v) for k, v in drift.to_dict().items()}},
                )
                drifts.append(drift)
        return drifts
