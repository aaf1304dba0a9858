"""
Derivatives: generation and deletion logic.

Zero FastAPI imports. The object store and codec are passed in, so tests can
substitute either.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from thumbnail_service.derivatives.constants import (
    FORMATS,
    SIZES,
    FormatSpec,
    GeneratedPaths,
    SizeSpec,
    all_derived_keys,
    derived_key,
    normalize_path,
)

if TYPE_CHECKING:
    from thumbnail_service.config import Settings
    from thumbnail_service.derivatives.codec import ImageCodec
    from thumbnail_service.storage import ObjectStore

logger = logging.getLogger(__name__)


def selected_sizes(settings: Settings) -> list[SizeSpec]:
    return [SIZES[name] for name in settings.size_names]


def selected_formats(settings: Settings) -> list[FormatSpec]:
    return [FORMATS[name] for name in settings.format_names]


async def generate_derivatives(
    store: ObjectStore,
    codec: ImageCodec,
    *,
    source_bucket: str,
    path: str,
    derived_bucket: str,
    sizes: list[SizeSpec],
    formats: list[FormatSpec],
) -> GeneratedPaths:
    """Download the original once, then build and upload every (size, format) pair.

    A download failure propagates and nothing is uploaded. A failure in any
    single pair is logged and recorded as None; the remaining pairs still run.
    """
    key = normalize_path(path)
    original = await store.download(source_bucket, key)

    loop = asyncio.get_running_loop()
    generated: GeneratedPaths = {}
    for size in sizes:
        generated[size.name] = {}
        for fmt in formats:
            out_key = derived_key(key, size, fmt)
            try:
                # Pillow is CPU-bound → offload to thread
                data = await loop.run_in_executor(
                    None, codec.transform, original, size, fmt,
                )
                await store.upload(derived_bucket, out_key, data, fmt.content_type)
            except Exception:
                logger.exception(
                    "Derivative %s/%s failed for %s/%s",
                    size.name, fmt.name, source_bucket, key,
                )
                generated[size.name][fmt.name] = None
                continue
            generated[size.name][fmt.name] = out_key
            logger.info("Uploaded %s: %s/%s", size.name, derived_bucket, out_key)
    return generated


def deletable_keys(path: str, derived_paths: GeneratedPaths | None) -> list[str]:
    """Resolve which derived keys may be deleted for ``path``.

    Only keys that a derivative of ``path`` could have been written under are
    accepted; anything else in a client-supplied map is skipped. Without a
    map, every possible derivative key is returned.
    """
    allowed = all_derived_keys(path)
    if derived_paths is None:
        return sorted(allowed)

    keys: list[str] = []
    for size_name, by_format in derived_paths.items():
        for fmt_name, key in (by_format or {}).items():
            if not key:
                continue
            if key not in allowed:
                logger.warning(
                    "Skipping derived key %r (%s/%s): not a derivative of %r",
                    key, size_name, fmt_name, path,
                )
                continue
            keys.append(key)
    return keys


async def delete_objects(store: ObjectStore, bucket: str, keys: list[str]) -> list[str]:
    """Delete keys one by one. Best-effort: logs failures, returns the deleted keys."""
    deleted: list[str] = []
    for key in keys:
        try:
            await store.delete(bucket, key)
        except Exception:
            logger.exception("Delete failed for %s/%s", bucket, key)
            continue
        deleted.append(key)
    return deleted
