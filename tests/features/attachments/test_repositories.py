"""Tests for the asyncpg repositories against a mocked database manager."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from neo_attachments.config.constants import AttachmentStatus
from neo_attachments.core.exceptions import DatabaseError
from neo_attachments.features.attachments.entities import Attachment
from neo_attachments.features.attachments.repositories import (
    AttachmentDatabaseRepository,
    StorageUsageDatabaseRepository,
)


def attachment_row(**overrides):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    row = {
        "id": uuid4(),
        "organization_id": uuid4(),
        "workspace_id": uuid4(),
        "uploader_user_id": uuid4(),
        "parent_type": "task",
        "parent_id": "42",
        "file_name": "report.pdf",
        "mime_type": "application/pdf",
        "size_bytes": 1024,
        "storage_provider": "s3",
        "bucket": "bucket",
        "storage_key": "a/b/task/42/x-report.pdf",
        "checksum_sha256": None,
        "status": "uploaded",
        "uploaded_at": now,
        "retention_days": 30,
        "expires_at": now,
        "last_downloaded_at": None,
        "deleted_at": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


class TestStorageUsageDatabaseRepository:
    """Each ledger mutator is one statement against one row."""

    @pytest.fixture
    def repository(self, mock_database_repository):
        return StorageUsageDatabaseRepository(mock_database_repository, "tenant_a")

    @pytest.mark.asyncio
    async def test_reserve_upserts(self, repository, mock_database_repository):
        mock_database_repository.execute.return_value = "INSERT 0 1"
        org, ws = uuid4(), uuid4()

        assert await repository.reserve(org, ws, 500) is True

        query, *params = mock_database_repository.execute.call_args.args
        assert "INSERT INTO tenant_a.workspace_storage_usage" in query
        assert "ON CONFLICT (organization_id, workspace_id) DO UPDATE" in query
        assert params == [org, ws, 500]

    @pytest.mark.asyncio
    async def test_promote_moves_bytes_in_one_statement(self, repository, mock_database_repository):
        mock_database_repository.execute.return_value = "UPDATE 1"

        assert await repository.promote(uuid4(), uuid4(), 200) is True

        query = mock_database_repository.execute.call_args.args[0]
        assert "reserved_bytes = GREATEST(0, reserved_bytes - $3)" in query
        assert "used_bytes = used_bytes + $3" in query
        assert mock_database_repository.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_promote_reports_missing_row(self, repository, mock_database_repository):
        mock_database_repository.execute.return_value = "UPDATE 0"
        assert await repository.promote(uuid4(), uuid4(), 200) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["reserve", "promote", "release", "decrement_used"])
    async def test_negative_amounts_are_clamped(self, repository, mock_database_repository, method):
        mock_database_repository.execute.return_value = "UPDATE 1"

        await getattr(repository, method)(uuid4(), uuid4(), -50)

        assert mock_database_repository.execute.call_args.args[3] == 0

    @pytest.mark.asyncio
    async def test_release_and_decrement_floor_at_zero(self, repository, mock_database_repository):
        mock_database_repository.execute.return_value = "UPDATE 1"

        await repository.release(uuid4(), uuid4(), 10)
        assert "GREATEST(0, reserved_bytes - $3)" in mock_database_repository.execute.call_args.args[0]

        await repository.decrement_used(uuid4(), uuid4(), 10)
        assert "GREATEST(0, used_bytes - $3)" in mock_database_repository.execute.call_args.args[0]

    @pytest.mark.asyncio
    async def test_effective_usage_sums_organization(self, repository, mock_database_repository):
        mock_database_repository.fetchval.return_value = 1234
        org = uuid4()

        assert await repository.effective_usage(org) == 1234

        query, param = mock_database_repository.fetchval.call_args.args
        assert "SUM(used_bytes + reserved_bytes)" in query
        assert param == org

    @pytest.mark.asyncio
    async def test_get_usage_without_row(self, repository, mock_database_repository):
        mock_database_repository.fetchrow.return_value = None
        assert await repository.get_usage(uuid4(), uuid4()) is None

    @pytest.mark.asyncio
    async def test_driver_errors_become_database_errors(self, repository, mock_database_repository):
        mock_database_repository.execute.side_effect = OSError("connection reset")

        with pytest.raises(DatabaseError):
            await repository.reserve(uuid4(), uuid4(), 10)


class TestAttachmentDatabaseRepository:

    @pytest.fixture
    def repository(self, mock_database_repository):
        return AttachmentDatabaseRepository(mock_database_repository, "public")

    @pytest.mark.asyncio
    async def test_create_inserts_pending_record(self, repository, mock_database_repository):
        attachment = Attachment(
            organization_id=uuid4(),
            workspace_id=uuid4(),
            uploader_user_id=uuid4(),
            parent_type="task",
            parent_id="42",
            file_name="report.pdf",
            size_bytes=10,
            bucket="bucket",
            storage_key="key",
        )
        mock_database_repository.fetchrow.return_value = attachment_row(
            id=attachment.id, status="pending", uploaded_at=None, expires_at=None, retention_days=None
        )

        created = await repository.create(attachment)

        query, *params = mock_database_repository.fetchrow.call_args.args
        assert "INSERT INTO public.attachments" in query
        assert params[0] == attachment.id
        assert params[13] == "pending"
        assert created.id == attachment.id
        assert created.status == AttachmentStatus.PENDING

    @pytest.mark.asyncio
    async def test_mark_uploaded_is_conditional_on_pending(self, repository, mock_database_repository):
        mock_database_repository.fetchrow.return_value = None

        result = await repository.mark_uploaded(uuid4(), datetime.now(timezone.utc), None, None, None)

        assert result is None
        query = mock_database_repository.fetchrow.call_args.args[0]
        assert "WHERE id = $1 AND status = 'pending'" in query

    @pytest.mark.asyncio
    async def test_mark_deleted_passes_expected_status(self, repository, mock_database_repository):
        row = attachment_row(status="deleted", deleted_at=datetime.now(timezone.utc))
        mock_database_repository.fetchrow.return_value = row

        result = await repository.mark_deleted(row["id"], AttachmentStatus.UPLOADED, row["deleted_at"])

        assert result.status == AttachmentStatus.DELETED
        assert mock_database_repository.fetchrow.call_args.args[2] == "uploaded"

    @pytest.mark.asyncio
    async def test_mark_deleted_can_require_expiry(self, repository, mock_database_repository):
        mock_database_repository.fetchrow.return_value = None
        now = datetime.now(timezone.utc)

        result = await repository.mark_deleted(uuid4(), AttachmentStatus.UPLOADED, now, expired_before=now)

        assert result is None
        query, *params = mock_database_repository.fetchrow.call_args.args
        assert "AND expires_at IS NOT NULL AND expires_at < $4" in query
        assert params[1:] == ["uploaded", now, now]

    @pytest.mark.asyncio
    async def test_list_expired_orders_by_expiry(self, repository, mock_database_repository):
        mock_database_repository.fetch.return_value = [attachment_row(), attachment_row()]
        now = datetime.now(timezone.utc)

        result = await repository.list_expired(now, 25)

        query, *params = mock_database_repository.fetch.call_args.args
        assert "ORDER BY expires_at ASC" in query
        assert params == [now, 25]
        assert len(result) == 2

    @pytest.mark.asyncio
    async def test_sum_bytes_by_workspace(self, repository, mock_database_repository):
        ws = uuid4()
        mock_database_repository.fetch.return_value = [
            {"workspace_id": ws, "uploaded_bytes": 300, "pending_bytes": 20}
        ]

        assert await repository.sum_bytes_by_workspace(uuid4()) == {ws: (300, 20)}

    @pytest.mark.asyncio
    async def test_row_mapping(self, repository, mock_database_repository):
        row = attachment_row()
        mock_database_repository.fetchrow.return_value = row

        attachment = await repository.get_active(row["id"], row["organization_id"], row["workspace_id"])

        assert attachment.id == row["id"]
        assert attachment.status == AttachmentStatus.UPLOADED
        assert attachment.retention_days == 30
