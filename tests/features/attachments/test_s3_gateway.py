"""Tests for the boto3-backed storage gateway."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from neo_attachments.core.exceptions import StorageBackendError
from neo_attachments.features.attachments.adapters import S3StorageGateway
from neo_attachments.features.attachments.adapters.s3_storage_gateway import content_disposition


def client_error(operation):
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation)


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.generate_presigned_url.return_value = "https://bucket.s3.amazonaws.com/signed"
    return client


@pytest.fixture
def gateway(s3_client):
    return S3StorageGateway(bucket="uploads", region="us-east-1", client=s3_client)


class TestContentDisposition:

    def test_ascii_name(self):
        assert content_disposition("report.pdf") == (
            "attachment; filename=\"report.pdf\"; filename*=UTF-8''report.pdf"
        )

    def test_non_ascii_name_is_percent_encoded(self):
        value = content_disposition("résumé.pdf")
        assert 'filename="r_sum_.pdf"' in value
        assert "filename*=UTF-8''r%C3%A9sum%C3%A9.pdf" in value

    def test_quotes_cannot_break_header(self):
        assert 'filename="a_b.txt"' in content_disposition('a"b.txt')

    def test_inline(self):
        assert content_disposition("a.png", force_attachment=False).startswith("inline;")


class TestS3StorageGateway:

    def test_identity(self, gateway):
        assert gateway.bucket == "uploads"
        assert gateway.provider == "s3"

    @pytest.mark.asyncio
    async def test_signed_put_url_binds_type_and_length(self, gateway, s3_client):
        url = await gateway.signed_put_url("org/ws/task/1/id-a.pdf", "application/pdf", 123, 900)

        assert url == "https://bucket.s3.amazonaws.com/signed"
        s3_client.generate_presigned_url.assert_called_once_with(
            ClientMethod="put_object",
            Params={
                "Bucket": "uploads",
                "Key": "org/ws/task/1/id-a.pdf",
                "ContentType": "application/pdf",
                "ContentLength": 123,
            },
            ExpiresIn=900,
            HttpMethod="PUT",
        )

    @pytest.mark.asyncio
    async def test_signed_get_url_forces_download(self, gateway, s3_client):
        await gateway.signed_get_url("k", "a.pdf", 60)

        kwargs = s3_client.generate_presigned_url.call_args.kwargs
        assert kwargs["ClientMethod"] == "get_object"
        assert kwargs["ExpiresIn"] == 60
        assert kwargs["Params"]["ResponseContentDisposition"].startswith("attachment;")

    @pytest.mark.asyncio
    async def test_signing_error_is_wrapped(self, gateway, s3_client):
        s3_client.generate_presigned_url.side_effect = client_error("GeneratePresignedUrl")

        with pytest.raises(StorageBackendError) as exc_info:
            await gateway.signed_put_url("k", "text/plain", 1, 900)
        assert exc_info.value.details["operation"] == "signed_put_url"

    @pytest.mark.asyncio
    async def test_delete_object(self, gateway, s3_client):
        await gateway.delete_object("k")
        s3_client.delete_object.assert_called_once_with(Bucket="uploads", Key="k")

    @pytest.mark.asyncio
    async def test_delete_error_is_wrapped(self, gateway, s3_client):
        s3_client.delete_object.side_effect = client_error("DeleteObject")

        with pytest.raises(StorageBackendError):
            await gateway.delete_object("k")
