"""
Derivatives: controller layer.

Receives validated input from the router, calls service functions, composes
the response.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from thumbnail_service.derivatives import service
from thumbnail_service.derivatives.constants import normalize_path
from thumbnail_service.derivatives.schemas import (
    DeleteJobRequest,
    GenerateThumbnailsRequest,
    GenerateThumbnailsResponse,
)
from thumbnail_service.records import service as record_service
from thumbnail_service.schemas import OkResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from thumbnail_service.config import Settings
    from thumbnail_service.derivatives.codec import ImageCodec
    from thumbnail_service.storage import ObjectStore

logger = logging.getLogger(__name__)


async def generate_thumbnails(
    request: GenerateThumbnailsRequest,
    settings: Settings,
    store: ObjectStore,
    codec: ImageCodec,
    db: AsyncSession | None,
) -> GenerateThumbnailsResponse:
    """Build every configured derivative of one original."""
    path = normalize_path(request.source_path)
    generated = await service.generate_derivatives(
        store,
        codec,
        source_bucket=request.bucket,
        path=path,
        derived_bucket=settings.derived_bucket,
        sizes=service.selected_sizes(settings),
        formats=service.selected_formats(settings),
    )

    if db is not None:
        try:
            record = await record_service.set_generated_paths(db, path, generated)
            if record is not None:
                await db.commit()
        except Exception:
            logger.exception("Could not store generated paths for %s", path)
            await db.rollback()

    return GenerateThumbnailsResponse(generated_paths=generated)


async def delete_job(
    request: DeleteJobRequest,
    settings: Settings,
    store: ObjectStore,
    db: AsyncSession | None,
) -> OkResponse:
    """Delete derivatives, then the original, then the record. Each phase is best-effort."""
    job = request.resolved()
    path = normalize_path(job.path)
    keys = service.deletable_keys(path, job.derived_paths)

    deleted = await service.delete_objects(store, settings.derived_bucket, keys)
    logger.info("Deleted %d/%d derivatives of %s", len(deleted), len(keys), path)

    if job.bucket and job.bucket != settings.originals_bucket:
        logger.warning(
            "Original %s not deleted: bucket %r is not the originals bucket",
            path, job.bucket,
        )
    else:
        await service.delete_objects(store, settings.originals_bucket, [path])

    if job.id is not None:
        if db is None:
            logger.warning("Record %s not deleted: metadata table disabled", job.id)
        else:
            try:
                if await record_service.delete_record(db, job.id):
                    await db.commit()
                else:
                    logger.warning("Record %s not found", job.id)
            except Exception:
                logger.exception("Could not delete record %s", job.id)
                await db.rollback()

    return OkResponse()
