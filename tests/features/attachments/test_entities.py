"""Tests for attachment entities."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from neo_attachments.config.constants import AttachmentStatus, AuditAction
from neo_attachments.features.attachments.entities import (
    Attachment,
    AuditEvent,
    LedgerDrift,
    StorageUsage,
    compute_expiry,
)


def make_attachment(**overrides) -> Attachment:
    values = dict(
        organization_id=uuid4(),
        workspace_id=uuid4(),
        uploader_user_id=uuid4(),
        parent_type="Task",
        parent_id="42",
        file_name="report.pdf",
        size_bytes=100,
        bucket="bucket",
        storage_key="org/ws/task/42/id-report.pdf",
    )
    values.update(overrides)
    return Attachment(**values)


class TestAttachment:

    def test_defaults(self):
        attachment = make_attachment(mime_type=None)
        assert attachment.status == AttachmentStatus.PENDING
        assert attachment.mime_type == "application/octet-stream"
        assert attachment.storage_provider == "s3"
        assert attachment.parent_type == "task"
        assert attachment.created_at.tzinfo is not None

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_size(self, size):
        with pytest.raises(ValueError):
            make_attachment(size_bytes=size)

    @pytest.mark.parametrize("days", [0, 3651])
    def test_rejects_retention_out_of_range(self, days):
        with pytest.raises(ValueError):
            make_attachment(retention_days=days)

    def test_status_string_is_coerced(self):
        assert make_attachment(status="uploaded").status == AttachmentStatus.UPLOADED

    def test_naive_datetimes_become_utc(self):
        attachment = make_attachment(uploaded_at=datetime(2026, 1, 1))
        assert attachment.uploaded_at.tzinfo == timezone.utc

    def test_is_expired_only_for_uploaded_past_expiry(self):
        now = datetime(2026, 6, 1, tzinfo=timezone.utc)
        past = now - timedelta(seconds=1)
        future = now + timedelta(days=1)

        assert make_attachment(status="uploaded", expires_at=past).is_expired(now)
        assert not make_attachment(status="uploaded", expires_at=future).is_expired(now)
        assert not make_attachment(status="uploaded", expires_at=None).is_expired(now)
        assert not make_attachment(status="pending", expires_at=past).is_expired(now)

    def test_to_dict(self):
        attachment = make_attachment()
        data = attachment.to_dict()
        assert data["id"] == str(attachment.id)
        assert data["status"] == "pending"
        assert data["uploaded_at"] is None


class TestComputeExpiry:

    def test_ninety_days_from_original_upload(self):
        uploaded_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert compute_expiry(uploaded_at, 90) == datetime(2026, 4, 1, tzinfo=timezone.utc)

    def test_unlimited(self):
        assert compute_expiry(datetime(2026, 1, 1, tzinfo=timezone.utc), None) is None


class TestStorageEntities:

    def test_usage_rejects_negative_counters(self):
        with pytest.raises(ValueError):
            StorageUsage(uuid4(), uuid4(), used_bytes=-1)

    def test_effective_bytes(self):
        assert StorageUsage(uuid4(), uuid4(), used_bytes=5, reserved_bytes=7).effective_bytes == 12

    def test_ledger_drift(self):
        drift = LedgerDrift(uuid4(), uuid4(), 100, 10, 90, 10)
        assert drift.has_drift
        assert drift.used_delta == 10
        assert drift.reserved_delta == 0

    def test_audit_event_to_dict(self):
        event = AuditEvent(
            organization_id=uuid4(),
            workspace_id=uuid4(),
            actor_user_id=uuid4(),
            action=AuditAction.DELETE,
            entity_id=uuid4(),
            metadata={"source": "api"},
        )
        data = event.to_dict()
        assert data["action"] == "delete"
        assert data["entity_type"] == "attachment"
        assert data["metadata"] == {"source": "api"}
