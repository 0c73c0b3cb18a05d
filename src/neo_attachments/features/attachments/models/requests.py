"""Attachment request models.

Range and policy checks live in the service layer so they surface as the
library's typed errors; these models only describe the payload shape.
"""

from typing import Optional

from pydantic import BaseModel, Field


class PresignUploadRequest(BaseModel):
    """Request a signed upload URL for a new attachment."""

    parent_type: str = Field(..., description="Type of the owning record, e.g. 'task'")
    parent_id: str = Field(..., description="Identifier of the owning record")
    file_name: str = Field(..., description="Client file name; sanitized server-side")
    size_bytes: int = Field(..., description="Exact size of the file to upload")
    mime_type: Optional[str] = Field(None, description="Content type (defaults to application/octet-stream)")


class CompleteUploadRequest(BaseModel):
    """Confirm that the client finished uploading to the signed URL."""

    checksum_sha256: Optional[str] = Field(None, description="Hex SHA-256 of the uploaded bytes")


class UpdateRetentionRequest(BaseModel):
    """Change the retention window of an uploaded attachment."""

    retention_days: Optional[int] = Field(
        ..., description="Days to keep the file after upload (1-3650), null for unlimited"
    )
