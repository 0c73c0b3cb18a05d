"""Pytest configuration and fixtures for neo-attachments tests.

The in-memory repositories mirror the SQL semantics of the asyncpg
repositories: transitions only apply when the prior status matches, and
ledger counters are floored at zero.
"""

import dataclasses
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from neo_attachments.config.constants import AttachmentStatus
from neo_attachments.core.exceptions import AuthorizationError
from neo_attachments.features.attachments.adapters import StaticEntitlementLookup
from neo_attachments.features.attachments.entities import ActorContext, Attachment, StorageUsage
from neo_attachments.features.attachments.services import (
    AttachmentService,
    AttachmentServiceConfig,
    QuotaService,
    RetentionService,
)


class InMemoryAttachmentRepository:
    """AttachmentRepository backed by a dict."""

    def __init__(self):
        self.rows: Dict[UUID, Attachment] = {}
        self.fail_mark_deleted_for: set = set()

    async def create(self, attachment: Attachment) -> Attachment:
        self.rows[attachment.id] = dataclasses.replace(attachment)
        return dataclasses.replace(attachment)

    async def get_active(self, attachment_id, organization_id, workspace_id) -> Optional[Attachment]:
        row = self.rows.get(attachment_id)
        if (
            row is None
            or row.organization_id != organization_id
            or row.workspace_id != workspace_id
            or row.deleted_at is not None
        ):
            return None
        return dataclasses.replace(row)

    async def mark_uploaded(self, attachment_id, uploaded_at, checksum_sha256, retention_days, expires_at):
        row = self.rows.get(attachment_id)
        if row is None or row.status != AttachmentStatus.PENDING or row.deleted_at is not None:
            return None
        row.status = AttachmentStatus.UPLOADED
        row.uploaded_at = uploaded_at
        row.checksum_sha256 = checksum_sha256 or row.checksum_sha256
        row.retention_days = retention_days
        row.expires_at = expires_at
        row.updated_at = uploaded_at
        return dataclasses.replace(row)

    async def mark_deleted(self, attachment_id, expected_status, deleted_at, expired_before=None):
        if attachment_id in self.fail_mark_deleted_for:
            raise RuntimeError("database unavailable")
        row = self.rows.get(attachment_id)
        if row is None or row.status != expected_status or row.deleted_at is not None:
            return None
        if expired_before is not None and (row.expires_at is None or row.expires_at >= expired_before):
            return None
        row.status = AttachmentStatus.DELETED
        row.deleted_at = deleted_at
        row.updated_at = deleted_at
        return dataclasses.replace(row)

    async def update_retention(self, attachment_id, retention_days, expires_at):
        row = self.rows.get(attachment_id)
        if row is None or row.status != AttachmentStatus.UPLOADED or row.deleted_at is not None:
            return None
        row.retention_days = retention_days
        row.expires_at = expires_at
        return dataclasses.replace(row)

    async def touch_last_downloaded(self, attachment_id, downloaded_at) -> None:
        self.rows[attachment_id].last_downloaded_at = downloaded_at

    async def list_for_parent(self, organization_id, workspace_id, parent_type, parent_id) -> List[Attachment]:
        matches = [
            dataclasses.replace(row) for row in self.rows.values()
            if row.organization_id == organization_id
            and row.workspace_id == workspace_id
            and row.parent_type == parent_type
            and row.parent_id == parent_id
            and row.status == AttachmentStatus.UPLOADED
            and row.deleted_at is None
        ]
        return sorted(matches, key=lambda a: a.uploaded_at, reverse=True)

    async def list_expired(self, now, limit) -> List[Attachment]:
        expired = [
            dataclasses.replace(row) for row in self.rows.values()
            if row.status == AttachmentStatus.UPLOADED
            and row.deleted_at is None
            and row.expires_at is not None
            and row.expires_at < now
        ]
        return sorted(expired, key=lambda a: a.expires_at)[:limit]

    async def list_stale_pending(self, created_before, limit) -> List[Attachment]:
        stale = [
            dataclasses.replace(row) for row in self.rows.values()
            if row.status == AttachmentStatus.PENDING
            and row.deleted_at is None
            and row.created_at < created_before
        ]
        return sorted(stale, key=lambda a: a.created_at)[:limit]

    async def sum_bytes_by_workspace(self, organization_id) -> Dict[UUID, Tuple[int, int]]:
        totals: Dict[UUID, Tuple[int, int]] = {}
        for row in self.rows.values():
            if row.organization_id != organization_id or row.deleted_at is not None:
                continue
            uploaded, pending = totals.get(row.workspace_id, (0, 0))
            if row.status == AttachmentStatus.UPLOADED:
                uploaded += row.size_bytes
            elif row.status == AttachmentStatus.PENDING:
                pending += row.size_bytes
            totals[row.workspace_id] = (uploaded, pending)
        return totals


class InMemoryStorageUsageRepository:
    """StorageUsageRepository backed by a dict keyed by (org, workspace)."""

    def __init__(self):
        self.rows: Dict[Tuple[UUID, UUID], StorageUsage] = {}

    async def reserve(self, organization_id, workspace_id, size_bytes) -> bool:
        n = max(0, size_bytes)
        row = self.rows.setdefault(
            (organization_id, workspace_id), StorageUsage(organization_id, workspace_id)
        )
        row.reserved_bytes += n
        return True

    async def promote(self, organization_id, workspace_id, size_bytes) -> bool:
        row = self.rows.get((organization_id, workspace_id))
        if row is None:
            return False
        n = max(0, size_bytes)
        row.reserved_bytes = max(0, row.reserved_bytes - n)
        row.used_bytes += n
        return True

    async def release(self, organization_id, workspace_id, size_bytes) -> bool:
        row = self.rows.get((organization_id, workspace_id))
        if row is None:
            return False
        row.reserved_bytes = max(0, row.reserved_bytes - max(0, size_bytes))
        return True

    async def decrement_used(self, organization_id, workspace_id, size_bytes) -> bool:
        row = self.rows.get((organization_id, workspace_id))
        if row is None:
            return False
        row.used_bytes = max(0, row.used_bytes - max(0, size_bytes))
        return True

    async def effective_usage(self, organization_id) -> int:
        return sum(r.used_bytes + r.reserved_bytes for (org, _), r in self.rows.items() if org == organization_id)

    async def used_bytes(self, organization_id) -> int:
        return sum(r.used_bytes for (org, _), r in self.rows.items() if org == organization_id)

    async def get_usage(self, organization_id, workspace_id) -> Optional[StorageUsage]:
        return self.rows.get((organization_id, workspace_id))

    async def list_for_organization(self, organization_id) -> List[StorageUsage]:
        return [r for (org, _), r in self.rows.items() if org == organization_id]

    def usage(self, organization_id, workspace_id) -> StorageUsage:
        return self.rows.get((organization_id, workspace_id)) or StorageUsage(organization_id, workspace_id)


class FakeStorageGateway:
    """ObjectStorageGateway that records calls."""

    bucket = "test-bucket"
    provider = "s3"

    def __init__(self):
        self.signed_put_url = AsyncMock(side_effect=lambda key, *a, **k: f"https://s3.test/{key}?put")
        self.signed_get_url = AsyncMock(side_effect=lambda key, *a, **k: f"https://s3.test/{key}?get")
        self.delete_object = AsyncMock(return_value=None)


class FakeAccessGuard:
    """AccessControlGuard with per-workspace denials and roles."""

    def __init__(self, role: Optional[str] = "owner"):
        self.role = role
        self.deny_read = False
        self.deny_write = False
        self.require_read_calls = 0
        self.require_write_calls = 0

    async def require_read(self, workspace_id, user_id, *, parent_type=None, parent_id=None):
        self.require_read_calls += 1
        if self.deny_read:
            raise AuthorizationError("read denied")

    async def require_write(self, workspace_id, user_id, *, parent_type=None, parent_id=None):
        self.require_write_calls += 1
        if self.deny_write:
            raise AuthorizationError("write denied")

    async def role_of(self, workspace_id, user_id):
        return self.role


class Clock:
    """Settable clock returning timezone-aware datetimes."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def organization_id():
    return uuid4()


@pytest.fixture
def workspace_id():
    return uuid4()


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def actor(user_id, organization_id):
    return ActorContext(user_id=user_id, organization_id=organization_id, platform_role="member")


@pytest.fixture
def clock():
    return Clock(datetime(2026, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def attachment_repository():
    return InMemoryAttachmentRepository()


@pytest.fixture
def usage_repository():
    return InMemoryStorageUsageRepository()


@pytest.fixture
def storage_gateway():
    return FakeStorageGateway()


@pytest.fixture
def access_guard():
    return FakeAccessGuard()


@pytest.fixture
def entitlements():
    return StaticEntitlementLookup()


@pytest.fixture
def audit_sink():
    sink = AsyncMock()
    sink.record = AsyncMock()
    return sink


@pytest.fixture
def quota_service(usage_repository, entitlements):
    return QuotaService(usage_repository, entitlements)


@pytest.fixture
def retention_service(attachment_repository, quota_service, storage_gateway, audit_sink, usage_repository, clock):
    return RetentionService(
        attachment_repository=attachment_repository,
        quota_service=quota_service,
        storage_gateway=storage_gateway,
        audit_sink=audit_sink,
        usage_repository=usage_repository,
        clock=clock,
    )


@pytest.fixture
def service(
    attachment_repository, quota_service, storage_gateway, access_guard,
    entitlements, audit_sink, retention_service, clock,
):
    return AttachmentService(
        attachment_repository=attachment_repository,
        quota_service=quota_service,
        storage_gateway=storage_gateway,
        access_guard=access_guard,
        entitlements=entitlements,
        audit_sink=audit_sink,
        retention_service=retention_service,
        config=AttachmentServiceConfig(max_bytes=10_000),
        clock=clock,
    )


@pytest.fixture
def mock_database_repository():
    """Mock asyncpg-style database manager."""
    mock_db = AsyncMock()
    mock_db.fetchrow = AsyncMock()
    mock_db.fetch = AsyncMock()
    mock_db.fetchval = AsyncMock()
    mock_db.execute = AsyncMock()
    return mock_db
