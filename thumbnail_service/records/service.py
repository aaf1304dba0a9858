"""
Image records: pure persistence logic.

Zero FastAPI imports. Receives the session via parameters.
"""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thumbnail_service.derivatives.constants import GeneratedPaths
from thumbnail_service.records.models import ImageRecord


async def get_record_by_path(db: AsyncSession, path: str) -> ImageRecord | None:
    result = await db.execute(select(ImageRecord).where(ImageRecord.path == path))
    return result.scalar_one_or_none()


async def get_record_by_id(db: AsyncSession, record_id: int) -> ImageRecord | None:
    return await db.get(ImageRecord, record_id)


async def upsert_record(
    db: AsyncSession,
    *,
    path: str,
    title: str,
    bucket: str,
    category: str | None = None,
    uploaded_by: str | None = None,
) -> ImageRecord:
    """Insert a record for ``path`` or update the existing one.

    Read-then-write: two concurrent calls for the same path can race, in
    which case the unique constraint on ``path`` rejects the second insert.
    """
    record = await get_record_by_path(db, path)
    if record is None:
        record = ImageRecord(
            path=path,
            title=title,
            category=category,
            bucket=bucket,
            generated_paths={},
            uploaded_by=uploaded_by,
        )
        db.add(record)
    else:
        record.title = title
        record.category = category
        record.bucket = bucket
        if uploaded_by is not None:
            record.uploaded_by = uploaded_by
    await db.flush()
    return record


async def set_generated_paths(
    db: AsyncSession, path: str, generated_paths: GeneratedPaths,
) -> ImageRecord | None:
    """Replace the derivative map of an existing record. Returns None if absent."""
    record = await get_record_by_path(db, path)
    if record is None:
        return None
    record.generated_paths = generated_paths
    await db.flush()
    return record


async def delete_record(db: AsyncSession, record_id: int) -> bool:
    record = await get_record_by_id(db, record_id)
    if record is None:
        return False
    await db.delete(record)
    await db.flush()
    return True
