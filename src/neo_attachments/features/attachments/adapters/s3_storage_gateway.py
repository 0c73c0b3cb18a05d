"""S3 object storage gateway.

Issues presigned PUT/GET URLs and deletes objects through boto3. URL signing
is local computation; ``delete_object`` is a network call and runs in a
worker thread so it does not block the event loop.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ....config.constants import STORAGE_PROVIDER_S3
from ....core.exceptions import StorageBackendError

logger = logging.getLogger(__name__)

_BOTO_CFG = Config(
    retries={"max_attempts": 5, "mode": "standard"},
    connect_timeout=3,
    read_timeout=10,
    signature_version="s3v4",
)


def content_disposition(file_name: str, force_attachment: bool = True) -> str:
    """Build a Content-Disposition value safe for any UTF-8 filename."""
    disposition = "attachment" if force_attachment else "inline"
    ascii_name = file_name.encode("ascii", errors="replace").decode("ascii").replace('"', "_").replace("?", "_")
    return f"{disposition}; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"


class S3StorageGateway:
    """ObjectStorageGateway backed by S3 or an S3-compatible store."""

    def __init__(
        self,
        bucket: str,
        region: str = "eu-west-1",
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        self._bucket = bucket
        self._region = region
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            config=_BOTO_CFG,
        )
        logger.info(f"S3 gateway initialized region={region} bucket={bucket}")

    @classmethod
    def from_settings(cls, settings) -> "S3StorageGateway":
        return cls(
            bucket=settings.s3_bucket,
            region=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def provider(self) -> str:
        return STORAGE_PROVIDER_S3

    async def signed_put_url(self, key: str, mime_type: str, size_bytes: int, ttl_seconds: int) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": key,
                    "ContentType": mime_type,
                    "ContentLength": size_bytes,
                },
                ExpiresIn=ttl_seconds,
                HttpMethod="PUT",
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageBackendError(f"presign_put_failed: {e}", operation="signed_put_url") from e

    async def signed_get_url(
        self, key: str, file_name: str, ttl_seconds: int, force_attachment: bool = True
    ) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": key,
                    "ResponseContentDisposition": content_disposition(file_name, force_attachment),
                },
                ExpiresIn=ttl_seconds,
                HttpMethod="GET",
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageBackendError(f"presign_get_failed: {e}", operation="signed_get_url") from e

    async def delete_object(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageBackendError(f"delete_failed: {e}", operation="delete_object") from e
        logger.debug(f"Deleted object {key} from bucket {self._bucket}")
