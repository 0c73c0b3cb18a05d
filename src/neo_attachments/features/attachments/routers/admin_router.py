"""Maintenance endpoints for attachment retention and ledger health."""

from datetime import timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from ....config.constants import DEFAULT_PURGE_LIMIT
from ....core.exceptions import NeoAttachmentsError
from ..entities.actor import ActorContext
from ..models.responses import LedgerDriftResponse, MaintenanceRunResponse, ReconcileResponse
from ..services.retention_service import RetentionService
from .attachment_router import to_http_exception
from .dependencies import get_retention_service, require_platform_admin


router = APIRouter(
    prefix="/admin/attachments",
    tags=["Attachments Admin"],
    responses={403: {"description": "Platform administrator role required"}},
)


@router.post("/purge", response_model=MaintenanceRunResponse, summary="Purge expired attachments")
async def purge_expired(
    limit: int = Query(DEFAULT_PURGE_LIMIT, ge=1, le=10_000, description="Maximum records to purge"),
    actor: ActorContext = Depends(require_platform_admin),
    service: RetentionService = Depends(get_retention_service),
) -> MaintenanceRunResponse:
    try:
        purged = await service.purge_expired(limit=limit)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return MaintenanceRunResponse(operation="purge_expired", processed=purged)


@router.post(
    "/stale-pending/release",
    response_model=MaintenanceRunResponse,
    summary="Release abandoned uploads",
)
async def release_stale_pending(
    older_than_seconds: Optional[int] = Query(None, ge=60, description="Minimum age of pending uploads"),
    limit: int = Query(DEFAULT_PURGE_LIMIT, ge=1, le=10_000),
    actor: ActorContext = Depends(require_platform_admin),
    service: RetentionService = Depends(get_retention_service),
) -> MaintenanceRunResponse:
    older_than = timedelta(seconds=older_than_seconds) if older_than_seconds else None
    try:
        released = await service.release_stale_pending(older_than=older_than, limit=limit)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return MaintenanceRunResponse(operation="release_stale_pending", processed=released)


@router.get(
    "/reconcile/{organization_id}",
    response_model=ReconcileResponse,
    summary="Compare ledger with attachment totals",
)
async def reconcile_ledger(
    organization_id: UUID = Path(..., description="Organization ID"),
    actor: ActorContext = Depends(require_platform_admin),
    service: RetentionService = Depends(get_retention_service),
) -> ReconcileResponse:
    try:
        drifts = await service.reconcile_ledger(organization_id)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return ReconcileResponse(
        organization_id=str(organization_id),
        drifts=[LedgerDriftResponse.from_entity(d) for d in drifts],
        in_sync=not drifts,
    )
