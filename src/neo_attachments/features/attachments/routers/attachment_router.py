"""Attachment router.

Workspace-scoped endpoints for the attachment lifecycle. Typed library errors
are converted to HTTP errors carrying the standard error body.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from ....config.constants import STORAGE_WARNING_HEADER, STORAGE_WARNING_VALUE
from ....core.exceptions import NeoAttachmentsError, create_error_response, get_http_status_code
from ..entities.actor import ActorContext
from ..models.requests import CompleteUploadRequest, PresignUploadRequest, UpdateRetentionRequest
from ..models.responses import (
    AttachmentListResponse,
    AttachmentResponse,
    DownloadUrlResponse,
    PresignUploadResponse,
    StorageUsageResponse,
)
from ..services.attachment_service import AttachmentService
from .dependencies import get_attachment_service, get_current_actor


router = APIRouter(
    prefix="/workspaces/{workspace_id}/attachments",
    tags=["Attachments"],
    responses={
        400: {"description": "Validation or state error"},
        403: {"description": "Forbidden or storage limit exceeded"},
        404: {"description": "Attachment not found"},
        410: {"description": "Attachment expired"},
        502: {"description": "Object storage unavailable"},
    }
)


def to_http_exception(error: NeoAttachmentsError) -> HTTPException:
    """Convert a library error to an HTTPException with the error body as detail."""
    return HTTPException(
        status_code=get_http_status_code(error),
        detail=create_error_response(error)["error"],
    )


@router.post(
    "/presign",
    response_model=PresignUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request upload URL",
    description="Reserve quota, create a pending attachment and return a signed PUT URL",
)
async def presign_upload(
    request: PresignUploadRequest,
    response: Response,
    workspace_id: UUID = Path(..., description="Workspace ID"),
    actor: ActorContext = Depends(get_current_actor),
    service: AttachmentService = Depends(get_attachment_service),
) -> PresignUploadResponse:
    try:
        result = await service.create_presign(
            actor,
            workspace_id,
            parent_type=request.parent_type,
            parent_id=request.parent_id,
            file_name=request.file_name,
            size_bytes=request.size_bytes,
            mime_type=request.mime_type,
        )
    except NeoAttachmentsError as e:
        raise to_http_exception(e)

    if result.storage_warning:
        response.headers[STORAGE_WARNING_HEADER] = STORAGE_WARNING_VALUE

    return PresignUploadResponse(
        attachment=AttachmentResponse.from_entity(result.attachment),
        upload_url=result.upload_url,
        expires_in=result.expires_in,
        storage_warning=result.storage_warning,
    )


@router.post(
    "/{attachment_id}/complete",
    response_model=AttachmentResponse,
    summary="Complete upload",
)
async def complete_upload(
    request: CompleteUploadRequest,
    workspace_id: UUID = Path(..., description="Workspace ID"),
    attachment_id: UUID = Path(..., description="Attachment ID"),
    actor: ActorContext = Depends(get_current_actor),
    service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentResponse:
    try:
        attachment = await service.complete_upload(
            actor, workspace_id, attachment_id, checksum_sha256=request.checksum_sha256
        )
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return AttachmentResponse.from_entity(attachment)


@router.get(
    "",
    response_model=AttachmentListResponse,
    summary="List attachments of a parent record",
)
async def list_attachments(
    workspace_id: UUID = Path(..., description="Workspace ID"),
    parent_type: str = Query(..., description="Type of the owning record"),
    parent_id: str = Query(..., description="Identifier of the owning record"),
    actor: ActorContext = Depends(get_current_actor),
    service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentListResponse:
    try:
        attachments = await service.list_for_parent(actor, workspace_id, parent_type, parent_id)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return AttachmentListResponse.from_entities(attachments)


@router.get(
    "/usage",
    response_model=StorageUsageResponse,
    summary="Storage usage",
    description="Organization-wide storage usage and this workspace's ledger row",
)
async def get_usage(
    workspace_id: UUID = Path(..., description="Workspace ID"),
    actor: ActorContext = Depends(get_current_actor),
    service: AttachmentService = Depends(get_attachment_service),
) -> StorageUsageResponse:
    try:
        report = await service.usage_report(actor, workspace_id)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return StorageUsageResponse.from_report(report)


@router.get(
    "/{attachment_id}/download",
    response_model=DownloadUrlResponse,
    summary="Get download URL",
    responses={410: {"description": "Attachment retention window has passed"}},
)
async def get_download_url(
    workspace_id: UUID = Path(..., description="Workspace ID"),
    attachment_id: UUID = Path(..., description="Attachment ID"),
    actor: ActorContext = Depends(get_current_actor),
    service: AttachmentService = Depends(get_attachment_service),
) -> DownloadUrlResponse:
    try:
        link = await service.get_download_url(actor, workspace_id, attachment_id)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return DownloadUrlResponse(
        download_url=link.download_url,
        expires_in=link.expires_in,
        file_name=link.attachment.file_name,
    )


@router.patch(
    "/{attachment_id}/retention",
    response_model=AttachmentResponse,
    summary="Update retention",
)
async def update_retention(
    request: UpdateRetentionRequest,
    workspace_id: UUID = Path(..., description="Workspace ID"),
    attachment_id: UUID = Path(..., description="Attachment ID"),
    actor: ActorContext = Depends(get_current_actor),
    service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentResponse:
    try:
        attachment = await service.update_retention(actor, workspace_id, attachment_id, request.retention_days)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return AttachmentResponse.from_entity(attachment)


@router.delete(
    "/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete attachment",
)
async def delete_attachment(
    workspace_id: UUID = Path(..., description="Workspace ID"),
    attachment_id: UUID = Path(..., description="Attachment ID"),
    actor: ActorContext = Depends(get_current_actor),
    service: AttachmentService = Depends(get_attachment_service),
) -> Response:
    try:
        await service.delete(actor, workspace_id, attachment_id)
    except NeoAttachmentsError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
