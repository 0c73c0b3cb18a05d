"""Storage usage ledger repository.

Each mutator issues exactly one statement against one ledger row, so
concurrent uploads, completions and deletes in the same workspace never lose
updates. Counters are floored at zero by the statements themselves.
"""

import logging
from typing import Any, List, Optional
from uuid import UUID

from ....database.connection import affected_rows
from ..entities.storage_usage import StorageUsage
from ..utils.error_handling import attachment_error_handler
from ..utils.queries import (
    STORAGE_DECREMENT_USED,
    STORAGE_EFFECTIVE_USAGE,
    STORAGE_GET_USAGE,
    STORAGE_LIST_FOR_ORGANIZATION,
    STORAGE_PROMOTE,
    STORAGE_RELEASE,
    STORAGE_RESERVE,
    STORAGE_USED_BYTES,
)

logger = logging.getLogger(__name__)


def _safe_bytes(size_bytes: int) -> int:
    return max(0, int(size_bytes or 0))


class StorageUsageDatabaseRepository:
    """Database repository for the ``workspace_storage_usage`` ledger."""

    def __init__(self, database_repository, schema: str = "public"):
        self._db = database_repository
        self._schema = schema

    @attachment_error_handler("reserve storage")
    async def reserve(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        """Add to reserved bytes, creating the ledger row on first use."""
        query = STORAGE_RESERVE.format(schema=self._schema)
        status = await self._db.execute(query, organization_id, workspace_id, _safe_bytes(size_bytes))
        return affected_rows(status) > 0

    @attachment_error_handler("promote reserved storage")
    async def promote(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        """Move bytes from reserved to used in a single update."""
        query = STORAGE_PROMOTE.format(schema=self._schema)
        status = await self._db.execute(query, organization_id, workspace_id, _safe_bytes(size_bytes))
        return affected_rows(status) > 0

    @attachment_error_handler("release reserved storage")
    async def release(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        query = STORAGE_RELEASE.format(schema=self._schema)
        status = await self._db.execute(query, organization_id, workspace_id, _safe_bytes(size_bytes))
        return affected_rows(status) > 0

    @attachment_error_handler("decrement used storage")
    async def decrement_used(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> bool:
        query = STORAGE_DECREMENT_USED.format(schema=self._schema)
        status = await self._db.execute(query, organization_id, workspace_id, _safe_bytes(size_bytes))
        return affected_rows(status) > 0

    @attachment_error_handler("compute effective usage")
    async def effective_usage(self, organization_id: UUID) -> int:
        query = STORAGE_EFFECTIVE_USAGE.format(schema=self._schema)
        value = await self._db.fetchval(query, organization_id)
        return int(value or 0)

    @attachment_error_handler("compute used bytes")
    async def used_bytes(self, organization_id: UUID) -> int:
        query = STORAGE_USED_BYTES.format(schema=self._schema)
        value = await self._db.fetchval(query, organization_id)
        return int(value or 0)

    @attachment_error_handler("get storage usage")
    async def get_usage(self, organization_id: UUID, workspace_id: UUID) -> Optional[StorageUsage]:
        query = STORAGE_GET_USAGE.format(schema=self._schema)
        row = await self._db.fetchrow(query, organization_id, workspace_id)
        return self._row_to_usage(row) if row else None

    @attachment_error_handler("list storage usage")
    async def list_for_organization(self, organization_id: UUID) -> List[StorageUsage]:
        query = STORAGE_LIST_FOR_ORGANIZATION.format(schema=self._schema)
        rows = await self._db.fetch(query, organization_id)
        return [self._row_to_usage(row) for row in rows]

    def _row_to_usage(self, row: Any) -> StorageUsage:
        return StorageUsage(
            organization_id=row["organization_id"],
            workspace_id=row["workspace_id"],
            used_bytes=int(row["used_bytes"]),
            reserved_bytes=int(row["reserved_bytes"]),
            updated_at=row["updated_at"],
        )
