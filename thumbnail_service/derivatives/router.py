"""
Derivatives: HTTP routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from thumbnail_service.config import Settings
from thumbnail_service.database import get_optional_db
from thumbnail_service.dependencies import get_codec, get_settings, get_store
from thumbnail_service.derivatives import controller
from thumbnail_service.derivatives.codec import ImageCodec
from thumbnail_service.derivatives.schemas import (
    DeleteJobRequest,
    GenerateThumbnailsRequest,
    GenerateThumbnailsResponse,
)
from thumbnail_service.schemas import OkResponse
from thumbnail_service.storage import ObjectStore

router = APIRouter(tags=["thumbnails"])


@router.post(
    "/generate-thumbnails",
    response_model=GenerateThumbnailsResponse,
    summary="Generate resized derivatives of an original",
    description=(
        "Downloads the original from the given bucket and writes one derivative "
        "per configured size and format to the derived bucket. Pairs that fail "
        "are reported as null; the request only fails when the original cannot "
        "be fetched."
    ),
)
async def generate_thumbnails(
    request: GenerateThumbnailsRequest,
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_store),
    codec: ImageCodec = Depends(get_codec),
    db: AsyncSession | None = Depends(get_optional_db),
) -> GenerateThumbnailsResponse:
    return await controller.generate_thumbnails(request, settings, store, codec, db)


@router.api_route(
    "/delete-job",
    methods=["POST", "DELETE"],
    response_model=OkResponse,
    summary="Delete an original and its derivatives",
    description=(
        "Best-effort delete of the listed derivatives, the original and, when "
        "an id is given, its metadata record. Individual failures are logged."
    ),
)
async def delete_job(
    request: DeleteJobRequest,
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_store),
    db: AsyncSession | None = Depends(get_optional_db),
) -> OkResponse:
    return await controller.delete_job(request, settings, store, db)
