"""
Image codec: decode, resize to a target width, re-encode.

Uses Pillow. Every call decodes the original afresh so a failure in one
(size, format) pair cannot leave shared state behind for the next.

  - Resize keeps the aspect ratio; the target width is met exactly
    (smaller originals are enlarged).
  - WebP and AVIF keep transparency. JPEG composites onto white.
"""
from __future__ import annotations

import io

from PIL import Image, ImageOps

from thumbnail_service.derivatives.constants import FormatSpec, SizeSpec

_ALPHA_MODES = ("RGBA", "LA", "PA")


class ImageCodec:
    """Turn original bytes into one encoded derivative."""

    def transform(self, data: bytes, size: SizeSpec, fmt: FormatSpec) -> bytes:
        image = Image.open(io.BytesIO(data))
        # Apply camera orientation before measuring
        image = ImageOps.exif_transpose(image)
        image = self._prepare_mode(image, fmt)
        resized = self._resize_to_width(image, size.width)

        buf = io.BytesIO()
        resized.save(buf, format=fmt.pillow_format, quality=fmt.quality)
        return buf.getvalue()

    @staticmethod
    def _prepare_mode(image: Image.Image, fmt: FormatSpec) -> Image.Image:
        if fmt.pillow_format == "JPEG":
            if image.mode == "P":
                image = image.convert("RGBA")
            if image.mode in _ALPHA_MODES:
                background = Image.new("RGB", image.size, (255, 255, 255))
                background.paste(image, mask=image.split()[-1])
                return background
            if image.mode != "RGB":
                return image.convert("RGB")
            return image
        if image.mode not in ("RGB", "RGBA"):
            return image.convert("RGBA" if "A" in image.getbands() or image.mode == "P" else "RGB")
        return image

    @staticmethod
    def _resize_to_width(image: Image.Image, width: int) -> Image.Image:
        height = max(1, round(image.height * width / image.width))
        return image.resize((width, height), Image.LANCZOS)
