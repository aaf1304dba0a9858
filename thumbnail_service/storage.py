"""
Object storage: S3-compatible access for originals and derivatives.

Upload flow:
  1. Client requests a presigned PUT URL (POST /generate-upload-url).
  2. Client uploads the original directly to the originals bucket.
  3. Client calls POST /generate-thumbnails with the bucket and key.
  4. The service downloads the original and writes derivatives to the
     derived bucket.
"""
from __future__ import annotations

import logging

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from thumbnail_service.config import Settings
from thumbnail_service.exceptions import (
    OriginalNotFound,
    StorageUnavailable,
    UploadUrlError,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


class ObjectStore:
    """Thin async wrapper over an S3 client. One instance per process."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._session = aioboto3.Session(
            aws_access_key_id=settings.storage_access_key_id or None,
            aws_secret_access_key=settings.storage_secret_access_key or None,
            region_name=settings.storage_region,
        )

    def _client(self):
        return self._session.client(
            "s3", endpoint_url=self._settings.storage_endpoint_url or None,
        )

    async def download(self, bucket: str, key: str) -> bytes:
        """Return the object's bytes. Missing or empty objects raise OriginalNotFound."""
        try:
            async with self._client() as s3:
                response = await s3.get_object(Bucket=bucket, Key=key)
                async with response["Body"] as stream:
                    data: bytes = await stream.read()
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "")
            if error_code in _NOT_FOUND_CODES:
                raise OriginalNotFound(bucket, key)
            raise StorageUnavailable(str(exc))
        except BotoCoreError as exc:
            raise StorageUnavailable(str(exc))
        if not data:
            raise OriginalNotFound(bucket, key)
        return data

    async def upload(
        self, bucket: str, key: str, data: bytes, content_type: str,
    ) -> None:
        """Write an object, replacing whatever is stored under the key."""
        try:
            async with self._client() as s3:
                await s3.put_object(
                    Bucket=bucket,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                    CacheControl="max-age=31536000",
                )
        except (BotoCoreError, ClientError) as exc:
            raise StorageUnavailable(str(exc))

    async def delete(self, bucket: str, key: str) -> None:
        try:
            async with self._client() as s3:
                await s3.delete_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageUnavailable(str(exc))

    async def create_signed_upload_url(
        self, bucket: str, key: str, expires_in: int,
    ) -> tuple[str, str | None]:
        """Return (presigned_put_url, token). S3 embeds credentials in the URL, so token is None."""
        try:
            async with self._client() as s3:
                url: str = await s3.generate_presigned_url(
                    "put_object",
                    Params={"Bucket": bucket, "Key": key},
                    ExpiresIn=expires_in,
                )
        except (BotoCoreError, ClientError) as exc:
            raise UploadUrlError(str(exc))
        return url, None
