"""Tests for the upload adapter and the concurrent upload helpers."""
from __future__ import annotations

import asyncio

import pytest
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import ClientError

from services.upload_service import DocumentUploader, S3DocumentUploader, UploadError, upload_optional, upload_required


class RecordingS3Client:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    def upload_file(self, filename, bucket, key, ExtraArgs=None):
        if self.error:
            raise self.error
        self.calls.append((filename, bucket, key, ExtraArgs))


class SlowUploader(DocumentUploader):
    """gstDoc fails immediately, everything else takes a while."""

    def __init__(self):
        self.cancelled = []

    async def upload(self, local_path: str) -> str:
        if "gst" in local_path:
            raise UploadError("gst rejected")
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            self.cancelled.append(local_path)
            raise
        return f"https://cdn.test/{local_path}"


class TestS3DocumentUploader:
    async def test_uploads_with_content_type_and_returns_url(self, tmp_path):
        path = tmp_path / "licence.PDF"
        path.write_bytes(b"pdf")
        client = RecordingS3Client()
        uploader = S3DocumentUploader(bucket="kyc-bucket", prefix="restaurants/", region="ap-south-1", client=client)

        url = await uploader.upload(str(path))

        filename, bucket, key, extra = client.calls[0]
        assert filename == str(path)
        assert bucket == "kyc-bucket"
        assert key.startswith("restaurants/") and key.endswith(".pdf")
        assert extra == {"ContentType": "application/pdf"}
        assert url == f"https://kyc-bucket.s3.ap-south-1.amazonaws.com/{key}"

    async def test_public_base_url_override(self):
        uploader = S3DocumentUploader(bucket="b", public_base_url="https://cdn.foodapp.test/", client=RecordingS3Client())

        assert uploader.public_url("restaurants/x.jpg") == "https://cdn.foodapp.test/restaurants/x.jpg"

    async def test_client_error_becomes_upload_error(self, tmp_path):
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"pdf")
        error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        uploader = S3DocumentUploader(bucket="b", client=RecordingS3Client(error))

        with pytest.raises(UploadError):
            await uploader.upload(str(path))

    async def test_transfer_failure_becomes_upload_error(self, tmp_path):
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"pdf")
        error = S3UploadFailedError("Failed to upload doc.pdf to b/restaurants/doc.pdf: AccessDenied")
        uploader = S3DocumentUploader(bucket="b", client=RecordingS3Client(error))

        with pytest.raises(UploadError):
            await uploader.upload(str(path))

    async def test_unconfigured_bucket(self, tmp_path):
        uploader = S3DocumentUploader(bucket=None, client=RecordingS3Client())

        with pytest.raises(UploadError):
            await uploader.upload(str(tmp_path / "doc.pdf"))


class TestConcurrentUploads:
    async def test_required_returns_url_per_document(self, uploader):
        urls = await upload_required(uploader, {"fssaiDoc": "/tmp/f.pdf", "gstDoc": "/tmp/g.pdf"})

        assert set(urls) == {"fssaiDoc", "gstDoc"}
        assert all(u.startswith("https://cdn.test/") for u in urls.values())

    async def test_required_fails_fast_and_cancels_the_rest(self):
        uploader = SlowUploader()

        with pytest.raises(UploadError):
            await upload_required(uploader, {"fssaiDoc": "/tmp/fssai.pdf", "gstDoc": "/tmp/gst.pdf", "aadharDoc": "/tmp/aadhar.pdf"})

        assert sorted(uploader.cancelled) == ["/tmp/aadhar.pdf", "/tmp/fssai.pdf"]

    async def test_optional_filters_failures(self, uploader):
        uploader.fail_on.add("bad")

        urls = await upload_optional(uploader, ["/tmp/good1.jpg", "/tmp/bad.jpg", "/tmp/good2.jpg"])

        assert len(urls) == 2

    async def test_optional_with_nothing(self, uploader):
        assert await upload_optional(uploader, []) == []
