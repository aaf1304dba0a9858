"""
Image records: controller layer for the upload flow.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from thumbnail_service.derivatives.constants import normalize_path
from thumbnail_service.exceptions import (
    DatabaseNotConfigured,
    InvalidRequest,
    RecordWriteFailed,
)
from thumbnail_service.records import service
from thumbnail_service.records.schemas import (
    RecordUploadRequest,
    UploadUrlRequest,
    UploadUrlResponse,
)
from thumbnail_service.schemas import OkResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from thumbnail_service.config import Settings
    from thumbnail_service.storage import ObjectStore

logger = logging.getLogger(__name__)


async def generate_upload_url(
    request: UploadUrlRequest,
    settings: Settings,
    store: ObjectStore,
) -> UploadUrlResponse:
    """Ask the store for a short-lived PUT URL on the originals bucket."""
    path = normalize_path(request.file_name)
    if not path:
        raise InvalidRequest("Missing fileName")
    url, token = await store.create_signed_upload_url(
        settings.originals_bucket, path, settings.upload_url_expiry_seconds,
    )
    return UploadUrlResponse(path=path, signed_url=url, token=token)


async def record_upload(
    request: RecordUploadRequest,
    settings: Settings,
    db: AsyncSession | None,
) -> OkResponse:
    """Insert or update the metadata row for an uploaded original."""
    path = normalize_path(request.path)
    if not path:
        raise InvalidRequest("Missing path")
    if db is None:
        raise DatabaseNotConfigured()
    try:
        await service.upsert_record(
            db,
            path=path,
            title=request.title,
            category=request.category,
            bucket=request.bucket or settings.originals_bucket,
            uploaded_by=request.uploaded_by,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        logger.exception("Record upsert failed for %s", path)
        await db.rollback()
        raise RecordWriteFailed(str(getattr(exc, "orig", None) or exc))
    return OkResponse()
