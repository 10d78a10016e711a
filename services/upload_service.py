"""
Object storage adapter for KYC documents and restaurant images.

Routes stage multipart files on local disk and hand the paths to a
DocumentUploader; the uploader returns a durable URL or raises UploadError.
The uploader is injected through get_uploader() so tests can swap it out.
"""
import asyncio
import mimetypes
import os
import uuid
from functools import lru_cache
import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("Upload_Service")

class UploadError(Exception):
    pass

class DocumentUploader:
    async def upload(self, local_path: str) -> str:
        raise NotImplementedError

class S3DocumentUploader(DocumentUploader):
    def __init__(self, bucket: str, prefix: str = "", region: str = "ap-south-1", public_base_url: str | None = None, client=None):
        self.bucket = bucket
        self.prefix = prefix
        self.region = region
        self.public_base_url = public_base_url
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=self.region,
            )
        return self._client

    def object_key(self, local_path: str) -> str:
        _, ext = os.path.splitext(local_path)
        return f"{self.prefix}{uuid.uuid4().hex}{ext.lower()}"

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(self, local_path: str) -> str:
        if not self.bucket:
            raise UploadError("Object storage is not configured")
        key = self.object_key(local_path)
        content_type = mimetypes.guess_type(local_path)[0] or "application/octet-stream"
        try:
            # boto3 is blocking, keep it off the event loop
            await asyncio.to_thread(
                self.client.upload_file,
                local_path,
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError, S3UploadFailedError, OSError) as e:
            logger.error(f"Upload failed for {local_path}: {e}")
            raise UploadError(str(e)) from e
        logger.info("Document uploaded", extra={"key": key})
        return self.public_url(key)

@lru_cache
def get_uploader() -> DocumentUploader:
    return S3DocumentUploader(
        bucket=settings.S3_BUCKET,
        prefix=settings.S3_KEY_PREFIX,
        region=settings.AWS_REGION,
        public_base_url=settings.S3_PUBLIC_BASE_URL,
    )

async def upload_required(uploader: DocumentUploader, files: dict[str, str]) -> dict[str, str]:
    """
    Upload every file concurrently. The first failure cancels the uploads
    still in flight and raises UploadError naming the document.
    """
    tasks = {name: asyncio.create_task(uploader.upload(path)) for name, path in files.items()}
    if not tasks:
        return {}
    _, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    for name, task in tasks.items():
        if task.cancelled():
            continue
        error = task.exception()
        if error is not None:
            logger.error(f"Required document upload failed: {name}")
            raise UploadError(f"{name} upload failed") from error
    return {name: task.result() for name, task in tasks.items()}

async def upload_optional(uploader: DocumentUploader, paths: list[str]) -> list[str]:
    """Upload concurrently and keep only the URLs that succeeded, in input order."""
    if not paths:
        return []
    results = await asyncio.gather(*(uploader.upload(p) for p in paths), return_exceptions=True)
    urls = []
    for path, result in zip(paths, results):
        if isinstance(result, BaseException):
            logger.warning(f"Optional upload skipped for {os.path.basename(path)}: {result}")
            continue
        if result:
            urls.append(result)
    return urls
