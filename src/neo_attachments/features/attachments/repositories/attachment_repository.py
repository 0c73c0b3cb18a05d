"""Attachment repository backed by asyncpg.

Accepts any database manager exposing ``fetch``/``fetchrow``/``execute`` and a
schema name, so the same repository serves every deployment layout.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from ....config.constants import AttachmentStatus
from ..entities.attachment import Attachment
from ..utils.error_handling import attachment_error_handler
from ..utils.queries import (
    ATTACHMENT_GET_ACTIVE,
    ATTACHMENT_INSERT,
    ATTACHMENT_LIST_EXPIRED,
    ATTACHMENT_LIST_FOR_PARENT,
    ATTACHMENT_LIST_STALE_PENDING,
    ATTACHMENT_MARK_DELETED,
    ATTACHMENT_MARK_EXPIRED_DELETED,
    ATTACHMENT_MARK_UPLOADED,
    ATTACHMENT_SUM_BY_WORKSPACE,
    ATTACHMENT_TOUCH_LAST_DOWNLOADED,
    ATTACHMENT_UPDATE_RETENTION,
)

logger = logging.getLogger(__name__)


class AttachmentDatabaseRepository:
    """Database repository for attachment records."""

    def __init__(self, database_repository, schema: str = "public"):
        """Initialize with a database manager.

        Args:
            database_repository: asyncpg-backed ``DatabaseManager``
            schema: Database schema holding the ``attachments`` table
        """
        self._db = database_repository
        self._schema = schema

    @attachment_error_handler("create attachment")
    async def create(self, attachment: Attachment) -> Attachment:
        query = ATTACHMENT_INSERT.format(schema=self._schema)
        row = await self._db.fetchrow(
            query,
            attachment.id,
            attachment.organization_id,
            attachment.workspace_id,
            attachment.uploader_user_id,
            attachment.parent_type,
            attachment.parent_id,
            attachment.file_name,
            attachment.mime_type,
            attachment.size_bytes,
            attachment.storage_provider,
            attachment.bucket,
            attachment.storage_key,
            attachment.checksum_sha256,
            attachment.status.value,
            attachment.created_at,
            attachment.updated_at,
        )
        logger.info(f"Created pending attachment {attachment.id} ({attachment.size_bytes} bytes)")
        return self._row_to_attachment(row) if row else attachment

    @attachment_error_handler("get attachment")
    async def get_active(
        self, attachment_id: UUID, organization_id: UUID, workspace_id: UUID
    ) -> Optional[Attachment]:
        query = ATTACHMENT_GET_ACTIVE.format(schema=self._schema)
        row = await self._db.fetchrow(query, attachment_id, organization_id, workspace_id)
        return self._row_to_attachment(row) if row else None

    @attachment_error_handler("mark attachment uploaded")
    async def mark_uploaded(
        self,
        attachment_id: UUID,
        uploaded_at: datetime,
        checksum_sha256: Optional[str],
        retention_days: Optional[int],
        expires_at: Optional[datetime],
    ) -> Optional[Attachment]:
        query = ATTACHMENT_MARK_UPLOADED.format(schema=self._schema)
        row = await self._db.fetchrow(
            query, attachment_id, uploaded_at, checksum_sha256, retention_days, expires_at
        )
        return self._row_to_attachment(row) if row else None

    @attachment_error_handler("mark attachment deleted")
    async def mark_deleted(
        self,
        attachment_id: UUID,
        expected_status: AttachmentStatus,
        deleted_at: datetime,
        expired_before: Optional[datetime] = None,
    ) -> Optional[Attachment]:
        status = AttachmentStatus(expected_status).value
        if expired_before is None:
            query = ATTACHMENT_MARK_DELETED.format(schema=self._schema)
            row = await self._db.fetchrow(query, attachment_id, status, deleted_at)
        else:
            query = ATTACHMENT_MARK_EXPIRED_DELETED.format(schema=self._schema)
            row = await self._db.fetchrow(query, attachment_id, status, deleted_at, expired_before)
        return self._row_to_attachment(row) if row else None

    @attachment_error_handler("update attachment retention")
    async def update_retention(
        self, attachment_id: UUID, retention_days: Optional[int], expires_at: Optional[datetime]
    ) -> Optional[Attachment]:
        query = ATTACHMENT_UPDATE_RETENTION.format(schema=self._schema)
        row = await self._db.fetchrow(query, attachment_id, retention_days, expires_at)
        return self._row_to_attachment(row) if row else None

    @attachment_error_handler("stamp last download")
    async def touch_last_downloaded(self, attachment_id: UUID, downloaded_at: datetime) -> None:
        query = ATTACHMENT_TOUCH_LAST_DOWNLOADED.format(schema=self._schema)
        await self._db.execute(query, attachment_id, downloaded_at)

    @attachment_error_handler("list attachments for parent")
    async def list_for_parent(
        self, organization_id: UUID, workspace_id: UUID, parent_type: str, parent_id: str
    ) -> List[Attachment]:
        query = ATTACHMENT_LIST_FOR_PARENT.format(schema=self._schema)
        rows = await self._db.fetch(query, organization_id, workspace_id, parent_type, parent_id)
        return [self._row_to_attachment(row) for row in rows]

    @attachment_error_handler("list expired attachments")
    async def list_expired(self, now: datetime, limit: int) -> List[Attachment]:
        query = ATTACHMENT_LIST_EXPIRED.format(schema=self._schema)
        rows = await self._db.fetch(query, now, limit)
        return [self._row_to_attachment(row) for row in rows]

    @attachment_error_handler("list stale pending attachments")
    async def list_stale_pending(self, created_before: datetime, limit: int) -> List[Attachment]:
        query = ATTACHMENT_LIST_STALE_PENDING.format(schema=self._schema)
        rows = await self._db.fetch(query, created_before, limit)
        return [self._row_to_attachment(row) for row in rows]

    @attachment_error_handler("sum attachment bytes")
    async def sum_bytes_by_workspace(self, organization_id: UUID) -> Dict[UUID, Tuple[int, int]]:
        query = ATTACHMENT_SUM_BY_WORKSPACE.format(schema=self._schema)
        rows = await self._db.fetch(query, organization_id)
        return {
            row["workspace_id"]: (int(row["uploaded_bytes"]), int(row["pending_bytes"]))
            for row in rows
        }

    def _row_to_attachment(self, row: Any) -> Attachment:
        """Map a database row to an Attachment entity."""
        return Attachment(
            id=row["id"],
            organization_id=row["organization_id"],
            workspace_id=row["workspace_id"],
            uploader_user_id=row["uploader_user_id"],
            parent_type=row["parent_type"],
            parent_id=row["parent_id"],
            file_name=row["file_name"],
            mime_type=row["mime_type"],
            size_bytes=int(row["size_bytes"]),
            storage_provider=row["storage_provider"],
            bucket=row["bucket"],
            storage_key=row["storage_key"],
            checksum_sha256=row["checksum_sha256"],
            status=AttachmentStatus(row["status"]),
            uploaded_at=row["uploaded_at"],
            retention_days=row["retention_days"],
            expires_at=row["expires_at"],
            last_downloaded_at=row["last_downloaded_at"],
            deleted_at=row["deleted_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
