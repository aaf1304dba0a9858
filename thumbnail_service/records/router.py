"""
Upload flow: HTTP routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from thumbnail_service.config import Settings
from thumbnail_service.database import get_optional_db
from thumbnail_service.dependencies import get_settings, get_store
from thumbnail_service.records import controller
from thumbnail_service.records.schemas import (
    RecordUploadRequest,
    UploadUrlRequest,
    UploadUrlResponse,
)
from thumbnail_service.schemas import OkResponse
from thumbnail_service.storage import ObjectStore

router = APIRouter(tags=["uploads"])


@router.post(
    "/generate-upload-url",
    response_model=UploadUrlResponse,
    summary="Request a presigned upload URL",
    description=(
        "Generates a presigned PUT URL on the originals bucket so the client "
        "can upload directly. The URL expires after 60 seconds by default."
    ),
)
async def generate_upload_url(
    request: UploadUrlRequest,
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_store),
) -> UploadUrlResponse:
    return await controller.generate_upload_url(request, settings, store)


@router.post(
    "/record-upload",
    response_model=OkResponse,
    summary="Record an uploaded original",
    description="Creates the image record for a path, or updates it if it already exists.",
)
async def record_upload(
    request: RecordUploadRequest,
    settings: Settings = Depends(get_settings),
    db: AsyncSession | None = Depends(get_optional_db),
) -> OkResponse:
    return await controller.record_upload(request, settings, db)
