"""Quota enforcement and ledger bookkeeping for attachments.

The quota check runs at presign time only. ``effective usage`` is the sum of
used and reserved bytes over every workspace of the organization, so a plan
limit caps the organization as a whole. The check and the reservation are
two statements: concurrent presigns can land slightly above the limit.

Ledger mutations other than the reservation made during presign are
compensating bookkeeping. Their failures are logged with a stable tag and
never fail the operation that triggered them.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from ....config.constants import EntitlementKey, STORAGE_WARNING_THRESHOLD
from ....core.exceptions import QuotaExceededError
from ..entities.protocols import EntitlementLookup, StorageUsageRepository
from ..entities.storage_usage import UsageReport
from ..utils.error_handling import log_suppressed_failure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of an accepted presign quota check."""

    effective_bytes: int
    requested_bytes: int
    limit_bytes: Optional[int]
    approaching_limit: bool = False

    @property
    def projected_bytes(self) -> int:
        return self.effective_bytes + self.requested_bytes


class QuotaService:
    """Checks plan limits and applies the four ledger mutations."""

    def __init__(
        self,
        usage_repository: StorageUsageRepository,
        entitlements: EntitlementLookup,
        warning_threshold: float = STORAGE_WARNING_THRESHOLD,
    ):
        self._usage = usage_repository
        self._entitlements = entitlements
        self._warning_threshold = warning_threshold

    async def storage_limit(self, organization_id: UUID) -> Optional[int]:
        return await self._entitlements.limit_for(organization_id, EntitlementKey.MAX_STORAGE_BYTES.value)

    async def check_and_reserve(
        self, organization_id: UUID, workspace_id: UUID, size_bytes: int
    ) -> QuotaDecision:
        """Reject the upload if it would exceed the plan limit, otherwise reserve it.

        Raises:
            QuotaExceededError: effective usage plus the request exceeds the limit
        """
        effective = await self._usage.effective_usage(organization_id)
        limit = await self.storage_limit(organization_id)

        if limit is not None and effective + size_bytes > limit:
            logger.info(
                f"Storage limit exceeded for organization {organization_id}: "
                f"{effective} + {size_bytes} > {limit}"
            )
            raise QuotaExceededError(used_bytes=effective, limit_bytes=limit, requested_bytes=size_bytes)

        await self.reserve(organization_id, workspace_id, size_bytes)

        approaching = bool(limit) and (effective + size_bytes) / limit >= self._warning_threshold
        return QuotaDecision(
            effective_bytes=effective,
            requested_bytes=size_bytes,
            limit_bytes=limit,
            approaching_limit=approaching,
        )

    async def reserve(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> None:
        await self._apply("reserve", "STORAGE_RESERVE_FAILED", organization_id, workspace_id, size_bytes)

    async def promote(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> None:
        await self._apply("promote", "STORAGE_MOVE_FAILED", organization_id, workspace_id, size_bytes)

    async def release(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> None:
        await self._apply("release", "STORAGE_RELEASE_FAILED", organization_id, workspace_id, size_bytes)

    async def decrement_used(self, organization_id: UUID, workspace_id: UUID, size_bytes: int) -> None:
        await self._apply("decrement_used", "STORAGE_DECREMENT_FAILED", organization_id, workspace_id, size_bytes)

    async def usage_report(self, organization_id: UUID, workspace_id: Optional[UUID] = None) -> UsageReport:
        """Read-only usage figures for dashboards and the usage endpoint."""
        effective = await self._usage.effective_usage(organization_id)
        used = await self._usage.used_bytes(organization_id)
        limit = await self.storage_limit(organization_id)
        workspace = await self._usage.get_usage(organization_id, workspace_id) if workspace_id else None
        return UsageReport(
            organization_id=organization_id,
            effective_bytes=effective,
            used_bytes=used,
            limit_bytes=limit,
            workspace=workspace,
        )

    async def _apply(
        self, operation: str, failure_tag: str,
        organization_id: UUID, workspace_id: UUID, size_bytes: int
    ) -> None:
        context = {
            "organization_id": organization_id,
            "workspace_id": workspace_id,
            "size_bytes": size_bytes,
        }
        try:
            changed = await getattr(self._usage, operation)(organization_id, workspace_id, size_bytes)
        except Exception as e:
            log_suppressed_failure(failure_tag, e, context, log=logger)
            return

        if not changed:
            logger.warning(
                f"STORAGE_{operation.upper()}_NO_ROW: no ledger row for workspace {workspace_id}",
                extra={"context": f"STORAGE_{operation.upper()}_NO_ROW", **{k: str(v) for k, v in context.items()}},
            )
